#!/usr/bin/env python3
"""Service configuration

Ports and base URLs of the platform's own services, plus the public site URL
used to build e-mail redirect links.
"""
import os
from dataclasses import dataclass


def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class ServiceConfig:
    """Platform service endpoints"""

    auth_service_port: int = 8201
    campaign_service_port: int = 8251

    auth_service_url: str = "http://localhost:8201"
    campaign_service_url: str = "http://localhost:8251"

    # Public origin of the web application
    site_url: str = "http://localhost:3000"

    @classmethod
    def from_env(cls) -> 'ServiceConfig':
        """Load service configuration from environment variables"""
        auth_port = _int(os.getenv("AUTH_SERVICE_PORT", "8201"), 8201)
        campaign_port = _int(os.getenv("CAMPAIGN_SERVICE_PORT", "8251"), 8251)
        return cls(
            auth_service_port=auth_port,
            campaign_service_port=campaign_port,
            auth_service_url=os.getenv("AUTH_SERVICE_URL", f"http://localhost:{auth_port}"),
            campaign_service_url=os.getenv("CAMPAIGN_SERVICE_URL", f"http://localhost:{campaign_port}"),
            site_url=os.getenv("SITE_URL", "http://localhost:3000").rstrip("/"),
        )
