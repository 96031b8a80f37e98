#!/usr/bin/env python3
"""Application configuration

Combines all sub-configs and adds the application-level limits: page size,
advisory auth rate limiting, upload constraints and client-local state.
"""
import os
from dataclasses import dataclass, field
from typing import Tuple

from .infra_config import BackendConfig
from .logging_config import LoggingConfig
from .model_config import ModerationConfig
from .service_config import ServiceConfig


def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class UploadConfig:
    """Media upload constraints"""
    max_bytes: int = 2 * 1024 * 1024
    image_types: Tuple[str, ...] = ("image/jpeg", "image/png")
    document_types: Tuple[str, ...] = ("application/pdf",)

    @classmethod
    def from_env(cls) -> 'UploadConfig':
        return cls(max_bytes=_int(os.getenv("UPLOAD_MAX_BYTES", ""), 2 * 1024 * 1024))


@dataclass
class RateLimitConfig:
    """Client-side auth attempt limits (advisory only)"""
    max_attempts: int = 5
    lockout_seconds: int = 300

    @classmethod
    def from_env(cls) -> 'RateLimitConfig':
        return cls(
            max_attempts=_int(os.getenv("AUTH_MAX_ATTEMPTS", "5"), 5),
            lockout_seconds=_int(os.getenv("AUTH_LOCKOUT_SECONDS", "300"), 300),
        )


@dataclass
class AppConfig:
    """Top-level configuration"""

    backend: BackendConfig = field(default_factory=BackendConfig)
    moderation: ModerationConfig = field(default_factory=ModerationConfig)
    services: ServiceConfig = field(default_factory=ServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    uploads: UploadConfig = field(default_factory=UploadConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)

    page_size: int = 6
    local_state_path: str = ".societyfixer/local_state.json"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load the complete configuration from environment variables"""
        return cls(
            backend=BackendConfig.from_env(),
            moderation=ModerationConfig.from_env(),
            services=ServiceConfig.from_env(),
            logging=LoggingConfig.from_env(),
            uploads=UploadConfig.from_env(),
            rate_limit=RateLimitConfig.from_env(),
            page_size=_int(os.getenv("CAMPAIGNS_PAGE_SIZE", "6"), 6),
            local_state_path=os.getenv(
                "LOCAL_STATE_PATH",
                os.path.join(os.path.expanduser("~"), ".societyfixer", "local_state.json"),
            ),
        )
