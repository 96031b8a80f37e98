#!/usr/bin/env python3
"""Modular configuration system for SocietyFixer

Configuration hierarchy:
- infra_config: Hosted backend (identity, record store, blob store)
- model_config: Content moderation classifier
- service_config: Platform service ports and public site URL
- logging_config: Logging configuration
- app_config: Top-level config combining the above with application limits
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import BackendConfig
from .model_config import ModerationConfig
from .service_config import ServiceConfig
from .app_config import AppConfig, UploadConfig, RateLimitConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = AppConfig.from_env()

def get_settings() -> AppConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> AppConfig:
    """Reload settings from environment"""
    global settings
    settings = AppConfig.from_env()
    return settings


__all__ = [
    'settings',
    'get_settings',
    'reload_settings',
    'AppConfig',
    'UploadConfig',
    'RateLimitConfig',
    'LoggingConfig',
    'BackendConfig',
    'ModerationConfig',
    'ServiceConfig',
]
