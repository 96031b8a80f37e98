#!/usr/bin/env python3
"""Hosted backend configuration

Connection settings for the backend-as-a-service that provides identity,
relational storage (PostgREST) and file storage.
"""
import os
from dataclasses import dataclass
from typing import Optional


def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class BackendConfig:
    """Backend-as-a-service endpoints and credentials"""

    url: Optional[str] = None
    anon_key: Optional[str] = None

    # Access tokens issued by the identity provider are HS256-signed with this secret
    jwt_secret: Optional[str] = None
    jwt_audience: str = "authenticated"
    jwt_algorithm: str = "HS256"

    # Record store
    campaigns_table: str = "campaigns"

    # Blob store
    portrait_bucket: str = "portraits"
    resume_bucket: str = "resumes"

    request_timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

    @property
    def rest_url(self) -> str:
        return f"{(self.url or '').rstrip('/')}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{(self.url or '').rstrip('/')}/auth/v1"

    @property
    def storage_url(self) -> str:
        return f"{(self.url or '').rstrip('/')}/storage/v1"

    @classmethod
    def from_env(cls) -> 'BackendConfig':
        """Load backend configuration from environment variables"""
        return cls(
            url=os.getenv("SUPABASE_URL"),
            anon_key=os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY"),
            jwt_secret=os.getenv("SUPABASE_JWT_SECRET") or os.getenv("JWT_SECRET"),
            jwt_audience=os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated"),
            jwt_algorithm=os.getenv("SUPABASE_JWT_ALGORITHM", "HS256"),
            campaigns_table=os.getenv("CAMPAIGNS_TABLE", "campaigns"),
            portrait_bucket=os.getenv("PORTRAIT_BUCKET", "portraits"),
            resume_bucket=os.getenv("RESUME_BUCKET", "resumes"),
            request_timeout=_float(os.getenv("BACKEND_TIMEOUT", "30"), 30.0),
        )
