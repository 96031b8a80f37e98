"""
Application context

The application root: built once at start with create_app_context() and
passed down explicitly. Owns the client-local state, the toast queue, the
session context and the service clients.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from core.config import AppConfig, get_settings
from core.local_state import WELCOME_SEEN_KEY, LocalStateStore
from core.notifications import ToastQueue, ToastType
from microservices.auth_service.client import AuthServiceClient
from microservices.auth_service.rate_limiter import AuthRateLimiter
from microservices.auth_service.session_context import SessionContext
from microservices.campaign_service.client import CampaignServiceClient
from microservices.campaign_service.drafts import FormDraftStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything the client application shares"""
    config: AppConfig
    local_state: LocalStateStore
    toasts: ToastQueue
    session: SessionContext
    auth: AuthServiceClient
    campaigns: CampaignServiceClient
    drafts: FormDraftStore

    def should_show_welcome(self) -> bool:
        return not self.local_state.get(WELCOME_SEEN_KEY, False)

    def dismiss_welcome(self) -> None:
        self.local_state.set(WELCOME_SEEN_KEY, True)

    def notify(self, message: str, type: ToastType = ToastType.INFO, duration: Optional[float] = None):
        return self.toasts.enqueue(message, type, duration)

    async def close(self) -> None:
        await self.auth.close()
        await self.campaigns.close()
        logger.debug("Application context closed")


def create_app_context(
    config: Optional[AppConfig] = None,
    local_state: Optional[LocalStateStore] = None,
) -> AppContext:
    """Build the application root and publish the initial session state"""
    config = config or get_settings()
    local_state = local_state or LocalStateStore(config.local_state_path)

    session = SessionContext()
    toasts = ToastQueue()
    rate_limiter = AuthRateLimiter(
        local_state,
        max_attempts=config.rate_limit.max_attempts,
        lockout_seconds=config.rate_limit.lockout_seconds,
    )
    drafts = FormDraftStore(local_state)

    auth = AuthServiceClient(
        base_url=config.services.auth_service_url,
        session_context=session,
        local_state=local_state,
        rate_limiter=rate_limiter,
        toasts=toasts,
    )
    campaigns = CampaignServiceClient(
        base_url=config.services.campaign_service_url,
        token_provider=session.access_token,
        drafts=drafts,
        page_size=config.page_size,
        toasts=toasts,
    )

    context = AppContext(
        config=config,
        local_state=local_state,
        toasts=toasts,
        session=session,
        auth=auth,
        campaigns=campaigns,
        drafts=drafts,
    )

    auth.initialize()
    return context


__all__ = ["AppContext", "create_app_context"]
