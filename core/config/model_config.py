#!/usr/bin/env python3
"""Moderation model configuration

Settings for the generative text classifier used to screen campaign content.
"""
import os
from dataclasses import dataclass


def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class ModerationConfig:
    """Content classifier configuration"""

    api_key: str = ""
    model: str = "gemini-2.5-flash"
    enabled: bool = True

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.api_key)

    @classmethod
    def from_env(cls) -> 'ModerationConfig':
        """Load moderation configuration from environment variables"""
        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
            model=os.getenv("MODERATION_MODEL", "gemini-2.5-flash"),
            enabled=_bool(os.getenv("MODERATION_ENABLED", "true")),
        )
