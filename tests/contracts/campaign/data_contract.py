"""
Campaign Service Data Contract

Test data factories for the campaign and auth services. The models
themselves live in the service packages; this module only builds valid
instances, provider payloads and signed access tokens for tests.

All tests MUST build their campaign data through CampaignTestDataFactory.
"""

import time
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

import jwt

from microservices.campaign_service.models import (
    Campaign,
    CampaignCreateRequest,
    CampaignUpdateRequest,
    ElectionScope,
)

STORAGE_BASE = "https://project.supabase.co/storage/v1"
TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests-only"


class CampaignTestDataFactory:
    """Factory for generating test data for campaign service tests

    Usage:
        factory = CampaignTestDataFactory()
        campaign = factory.make_campaign()
        page = factory.make_campaigns(7, user_id=campaign.user_id)
        token = factory.make_access_token(campaign.user_id)
    """

    _sequence = 0

    @staticmethod
    def make_campaign_id() -> str:
        """Generate campaign ID"""
        return str(uuid4())

    @staticmethod
    def make_user_id() -> str:
        """Generate user ID (identity provider ids are UUIDs)"""
        return str(uuid4())

    @staticmethod
    def make_email() -> str:
        """Generate unique email"""
        return f"voter_{uuid4().hex[:8]}@example.com"

    @classmethod
    def _next_created_at(cls) -> datetime:
        # strictly increasing so "newest first" is well defined
        cls._sequence += 1
        return datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=cls._sequence)

    @staticmethod
    def make_public_url(bucket: str = "portraits", path: Optional[str] = None) -> str:
        """Public URL of a blob-store object"""
        path = path or f"{bucket}/{uuid4().hex}.png"
        return f"{STORAGE_BASE}/object/public/{bucket}/{path}"

    # =========================================================================
    # Campaigns
    # =========================================================================

    @classmethod
    def make_campaign_row(cls, **overrides) -> Dict[str, Any]:
        """Generate a record-store row as the REST interface returns it"""
        row = {
            "id": cls.make_campaign_id(),
            "created_at": cls._next_created_at().isoformat(),
            "user_id": cls.make_user_id(),
            "candidate_name": "Ada Lovelace",
            "election_name": "City Council 2025",
            "election_deadline": "2025-11-04",
            "scope": ElectionScope.LOCAL.value,
            "election_region": "Springfield",
            "position_name": "Council Member",
            "proposed_policies": "<p>Better <strong>parks</strong> for everyone.</p>",
            "political_party": "Independent",
            "gender": None,
            "date_of_birth": None,
            "religion": None,
            "contact_email": "ada@example.com",
            "social_media_url": None,
            "portrait_url": None,
            "resume_url": None,
        }
        row.update(overrides)
        return row

    @classmethod
    def make_campaign(cls, **overrides) -> Campaign:
        """Generate a stored campaign"""
        return Campaign.model_validate(cls.make_campaign_row(**overrides))

    @classmethod
    def make_campaigns(cls, count: int, **overrides) -> List[Campaign]:
        """Generate count campaigns, oldest first"""
        return [cls.make_campaign(**overrides) for _ in range(count)]

    @classmethod
    def make_campaign_with_media(cls, **overrides) -> Campaign:
        """Generate a campaign referencing a portrait and a resume"""
        defaults = {
            "portrait_url": cls.make_public_url("portraits"),
            "resume_url": cls.make_public_url("resumes", f"resumes/{uuid4().hex}.pdf"),
        }
        defaults.update(overrides)
        return cls.make_campaign(**defaults)

    # =========================================================================
    # Requests
    # =========================================================================

    @staticmethod
    def make_create_payload(**overrides) -> Dict[str, Any]:
        """Generate a create-form payload as sent over HTTP"""
        payload = {
            "candidate_name": "Grace Hopper",
            "election_name": "State Senate 2026",
            "election_deadline": (date.today() + timedelta(days=90)).isoformat(),
            "scope": ElectionScope.STATE.value,
            "election_region": "Virginia",
            "position_name": "Senator",
            "proposed_policies": "<p>Computing classes in every school.</p>",
            "political_party": "",
            "contact_email": "grace@example.com",
        }
        payload.update(overrides)
        return payload

    @classmethod
    def make_create_request(cls, **overrides) -> CampaignCreateRequest:
        """Generate a valid create request"""
        return CampaignCreateRequest(**cls.make_create_payload(**overrides))

    @staticmethod
    def make_update_request(**fields) -> CampaignUpdateRequest:
        """Generate a partial update; only the given fields are set"""
        return CampaignUpdateRequest(**fields)

    # =========================================================================
    # Identity
    # =========================================================================

    @staticmethod
    def make_access_token(
        user_id: str,
        email: Optional[str] = None,
        secret: str = TEST_JWT_SECRET,
        expires_in: int = 3600,
        audience: str = "authenticated",
    ) -> str:
        """Generate an HS256 access token shaped like the identity provider's"""
        now = int(time.time())
        payload = {
            "sub": user_id,
            "email": email,
            "role": "authenticated",
            "aud": audience,
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(payload, secret, algorithm="HS256")

    @classmethod
    def make_provider_user(cls, user_id: Optional[str] = None, email: Optional[str] = None) -> Dict[str, Any]:
        """Generate a user object as the identity provider returns it"""
        return {
            "id": user_id or cls.make_user_id(),
            "aud": "authenticated",
            "role": "authenticated",
            "email": email or cls.make_email(),
            "email_confirmed_at": "2024-01-01T00:00:00Z",
            "created_at": "2024-01-01T00:00:00Z",
            "app_metadata": {"provider": "email"},
        }

    @classmethod
    def make_provider_session(cls, user_id: Optional[str] = None, email: Optional[str] = None) -> Dict[str, Any]:
        """Generate a token response as the identity provider returns it"""
        user = cls.make_provider_user(user_id, email)
        return {
            "access_token": cls.make_access_token(user["id"], user["email"]),
            "refresh_token": uuid4().hex,
            "token_type": "bearer",
            "expires_in": 3600,
            "user": user,
        }


__all__ = [
    "STORAGE_BASE",
    "TEST_JWT_SECRET",
    "CampaignTestDataFactory",
]
