"""
Campaign form drafts

In-progress create/edit form content kept in client-local state, one entry
per form: ``campaign-form-draft-new`` for the create form and
``campaign-form-draft-<id>`` for editing an existing campaign.
"""

import logging
from typing import Any, Dict, Optional

from core.local_state import LocalStateStore

logger = logging.getLogger(__name__)

DRAFT_KEY_PREFIX = "campaign-form-draft-"
NEW_FORM_ID = "new"


def draft_key(campaign_id: Optional[str] = None) -> str:
    return f"{DRAFT_KEY_PREFIX}{campaign_id or NEW_FORM_ID}"


class FormDraftStore:
    """Per-form draft persistence"""

    def __init__(self, state: LocalStateStore):
        self.state = state

    def load(self, campaign_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        draft = self.state.get(draft_key(campaign_id))
        if draft is not None and not isinstance(draft, dict):
            logger.warning(f"Ignoring malformed draft under {draft_key(campaign_id)}")
            return None
        return draft

    def save(self, fields: Dict[str, Any], campaign_id: Optional[str] = None) -> None:
        self.state.set(draft_key(campaign_id), dict(fields))

    def clear(self, campaign_id: Optional[str] = None) -> None:
        self.state.remove(draft_key(campaign_id))


__all__ = ["FormDraftStore", "draft_key", "DRAFT_KEY_PREFIX", "NEW_FORM_ID"]
