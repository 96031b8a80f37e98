"""
Campaign Service Data Models

Canonical data structures for the campaign service: the campaign record as
stored, write requests, query/page shapes and API responses.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ====================
# Enums
# ====================

class ElectionScope(str, Enum):
    """Election scope category"""
    LOCAL = "Local"
    STATE = "State"
    NATIONAL = "National"


class MediaKind(str, Enum):
    """Kinds of media a campaign can reference"""
    PORTRAIT = "portrait"
    RESUME = "resume"


class SubmissionState(str, Enum):
    """Per-submission state of a create/update"""
    IDLE = "idle"
    VALIDATING = "validating"
    MODERATING = "moderating"
    PERSISTING = "persisting"
    SUCCESS = "success"
    FAILED = "failed"


# Free-text fields screened by the moderation gate, in submission order
MODERATED_FIELDS = ("candidate_name", "election_name", "position_name", "proposed_policies")

# Columns matched by free-text search
SEARCH_COLUMNS = ("candidate_name", "position_name", "election_region")

# Columns an update may change but never clear
REQUIRED_UPDATE_FIELDS = (
    "candidate_name", "election_name", "election_deadline", "scope",
    "election_region", "position_name", "proposed_policies",
)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _check_http_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.lower().startswith(("http://", "https://")):
        raise ValueError("must be an http(s) URL")
    return value


# ====================
# Core Models
# ====================

class Campaign(BaseModel):
    """Campaign record as stored in the record store"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    user_id: str

    candidate_name: str
    election_name: str
    election_deadline: Optional[date] = None
    scope: Optional[ElectionScope] = None
    election_region: Optional[str] = None
    position_name: str
    proposed_policies: str = ""
    political_party: Optional[str] = None

    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    religion: Optional[str] = None

    contact_email: Optional[str] = None
    social_media_url: Optional[str] = None

    portrait_url: Optional[str] = None
    resume_url: Optional[str] = None

    def media_urls(self) -> List[str]:
        """Referenced media objects, portrait first"""
        return [url for url in (self.portrait_url, self.resume_url) if url]


# ====================
# Request Models
# ====================

class CampaignCreateRequest(BaseModel):
    """Request to create a campaign; user_id is stamped from the caller"""
    candidate_name: str = Field(..., min_length=1, max_length=200)
    election_name: str = Field(..., min_length=1, max_length=200)
    election_deadline: date
    scope: ElectionScope
    election_region: str = Field(..., min_length=1, max_length=200)
    position_name: str = Field(..., min_length=1, max_length=200)
    proposed_policies: str = Field(..., min_length=1, max_length=50000)
    political_party: Optional[str] = Field(None, max_length=200)

    gender: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    religion: Optional[str] = Field(None, max_length=100)

    contact_email: Optional[EmailStr] = None
    social_media_url: Optional[str] = Field(None, max_length=500)

    portrait_url: Optional[str] = Field(None, max_length=1000)
    resume_url: Optional[str] = Field(None, max_length=1000)

    @field_validator(
        "political_party", "gender", "religion", "contact_email",
        "social_media_url", "portrait_url", "resume_url",
        mode="before",
    )
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator(
        "candidate_name", "election_name", "election_region",
        "position_name", "proposed_policies",
        mode="before",
    )
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("social_media_url", "portrait_url", "resume_url")
    @classmethod
    def http_url(cls, v):
        return _check_http_url(v)

    def moderation_text(self) -> str:
        return " ".join(getattr(self, name) or "" for name in MODERATED_FIELDS)

    def to_row(self, user_id: str) -> Dict[str, Any]:
        row = self.model_dump(mode="json")
        row["user_id"] = user_id
        return row


class CampaignUpdateRequest(BaseModel):
    """Partial update; only fields that were sent are applied"""
    candidate_name: Optional[str] = Field(None, min_length=1, max_length=200)
    election_name: Optional[str] = Field(None, min_length=1, max_length=200)
    election_deadline: Optional[date] = None
    scope: Optional[ElectionScope] = None
    election_region: Optional[str] = Field(None, min_length=1, max_length=200)
    position_name: Optional[str] = Field(None, min_length=1, max_length=200)
    proposed_policies: Optional[str] = Field(None, min_length=1, max_length=50000)
    political_party: Optional[str] = Field(None, max_length=200)

    gender: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    religion: Optional[str] = Field(None, max_length=100)

    contact_email: Optional[EmailStr] = None
    social_media_url: Optional[str] = Field(None, max_length=500)

    portrait_url: Optional[str] = Field(None, max_length=1000)
    resume_url: Optional[str] = Field(None, max_length=1000)

    @field_validator(
        "political_party", "gender", "religion", "contact_email",
        "social_media_url", "portrait_url", "resume_url",
        mode="before",
    )
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator(
        "candidate_name", "election_name", "election_region",
        "position_name", "proposed_policies",
        mode="before",
    )
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator(*REQUIRED_UPDATE_FIELDS, mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        return v

    @field_validator("social_media_url", "portrait_url", "resume_url")
    @classmethod
    def http_url(cls, v):
        return _check_http_url(v)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class CampaignQuery(BaseModel):
    """Inputs of the paginated campaign listing"""
    model_config = ConfigDict(frozen=True)

    query: Optional[str] = Field(None, max_length=200)
    owner_id: Optional[str] = None
    scoped_to_owner: bool = False

    @property
    def search_term(self) -> Optional[str]:
        if self.query is None:
            return None
        return self.query.strip() or None


# ====================
# Result Models
# ====================

class ModerationVerdict(BaseModel):
    """Outcome of the content-safety gate"""
    model_config = ConfigDict(frozen=True)

    safe: bool
    reason: Optional[str] = None


class CampaignPage(BaseModel):
    """One page of campaigns, newest first"""
    campaigns: List[Campaign] = Field(default_factory=list)
    page: int = 0
    page_size: int = 6
    has_more: bool = False


class CampaignCard(Campaign):
    """Listing entry: the record plus display helpers"""
    snippet: str = ""
    thumbnail_url: Optional[str] = None


class CampaignDetail(Campaign):
    """Detail view; proposed_policies_html is sanitized for display"""
    proposed_policies_html: str = ""
    snippet: str = ""
    portrait_display_url: Optional[str] = None


class CampaignListResponse(BaseModel):
    """Paginated listing response"""
    campaigns: List[CampaignCard] = Field(default_factory=list)
    page: int = 0
    page_size: int = 6
    has_more: bool = False


class MutationResponse(BaseModel):
    """Outcome of a successful create/update/delete"""
    campaign: Optional[Campaign] = None
    message: str


class DeleteConfirmationResponse(BaseModel):
    """First step of the two-step delete"""
    campaign_id: str
    confirmation_token: str
    expires_at: datetime
    message: str = "Are you sure you want to permanently delete this campaign? This action cannot be undone."


class MediaUploadResponse(BaseModel):
    """Uploaded media object"""
    url: str
    bucket: str
    path: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response"""
    detail: str
    error_code: Optional[str] = None


__all__ = [
    "ElectionScope",
    "MediaKind",
    "SubmissionState",
    "MODERATED_FIELDS",
    "SEARCH_COLUMNS",
    "REQUIRED_UPDATE_FIELDS",
    "Campaign",
    "CampaignCreateRequest",
    "CampaignUpdateRequest",
    "CampaignQuery",
    "ModerationVerdict",
    "CampaignPage",
    "CampaignCard",
    "CampaignDetail",
    "CampaignListResponse",
    "MutationResponse",
    "DeleteConfirmationResponse",
    "MediaUploadResponse",
    "HealthResponse",
    "ErrorResponse",
]
