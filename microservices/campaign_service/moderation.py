"""
Content-safety gate

Allow/deny decision for free-text campaign content. The gate fails open:
an unconfigured or failing classifier lets the submission through.
"""

import logging
from typing import Optional

from .models import ModerationVerdict
from .protocols import ModerationClientProtocol
from .rich_text import strip_markup

logger = logging.getLogger(__name__)

UNSAFE_TOKEN = "UNSAFE"
UNSAFE_REASON = (
    "Content was flagged as potentially unsafe by our AI moderation system. "
    "Please revise and try again."
)

SAFE = ModerationVerdict(safe=True)


class ContentSafetyGate:
    """Screens text with the external classifier"""

    def __init__(self, client: Optional[ModerationClientProtocol] = None):
        self.client = client

    async def moderate(self, text: Optional[str]) -> ModerationVerdict:
        if not text or not text.strip():
            return SAFE

        if self.client is None or not self.client.is_configured:
            logger.warning("Moderation classifier is not configured; moderation is being skipped")
            return SAFE

        plain = strip_markup(text)
        try:
            verdict = await self.client.classify(plain)
        except Exception as e:
            logger.error(f"Moderation call failed, allowing content: {e}")
            return SAFE

        if verdict.strip().upper() == UNSAFE_TOKEN:
            logger.info("Content flagged as unsafe by moderation classifier")
            return ModerationVerdict(safe=False, reason=UNSAFE_REASON)
        return SAFE


__all__ = ["ContentSafetyGate", "UNSAFE_REASON", "UNSAFE_TOKEN"]
