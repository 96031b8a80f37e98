"""
Paginated campaign feed

CampaignFeed accumulates fixed-size pages of campaigns, newest first. A
reset (new query) discards everything and refetches page 0; load_more
appends the next page. Responses that arrive after a newer reset, or after
close(), are dropped.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from .models import Campaign, CampaignListResponse, CampaignPage, CampaignQuery

logger = logging.getLogger(__name__)

PAGE_SIZE = 6

NETWORK_ERROR_MESSAGE = (
    "Network Error: Could not connect to the database. This is often a CORS "
    "(Cross-Origin Resource Sharing) issue. Please ensure this website's URL is "
    "added to your Supabase project's 'Allowed Origins' list in the API settings."
)
LOAD_ERROR_PREFIX = "Failed to load campaigns. An unexpected error occurred: "
CONNECTIVITY_MARKER = "Failed to fetch"

PageFetcher = Callable[[CampaignQuery, int], Awaitable[Union[CampaignPage, CampaignListResponse]]]


def load_error_message(message: str, connectivity: bool = False) -> str:
    """User-facing text for a failed page fetch"""
    if connectivity or CONNECTIVITY_MARKER in message:
        return NETWORK_ERROR_MESSAGE
    if message.startswith(LOAD_ERROR_PREFIX) or message == NETWORK_ERROR_MESSAGE:
        return message
    return f"{LOAD_ERROR_PREFIX}{message}"


def has_more_after(rows: int, page_size: int = PAGE_SIZE) -> bool:
    """A full page means there may be more; a short page ends the feed"""
    return rows == page_size


@dataclass(frozen=True)
class FeedState:
    """Immutable snapshot of a feed"""
    campaigns: Tuple[Campaign, ...] = ()
    query: Optional[CampaignQuery] = None
    loading: bool = False
    loading_more: bool = False
    has_more: bool = True
    error: Optional[str] = None
    next_page: int = 0


class CampaignFeed:
    """Growable, resettable list of campaigns over a page fetcher"""

    def __init__(
        self,
        fetcher: PageFetcher,
        query: Optional[CampaignQuery] = None,
        page_size: int = PAGE_SIZE,
    ):
        self._fetcher = fetcher
        self._query = query or CampaignQuery()
        self.page_size = page_size

        self._campaigns: List[Campaign] = []
        self._next_page = 0
        self._has_more = True
        self._loading = False
        self._loading_more = False
        self._error: Optional[str] = None

        self._generation = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def state(self) -> FeedState:
        return FeedState(
            campaigns=tuple(self._campaigns),
            query=self._query,
            loading=self._loading,
            loading_more=self._loading_more,
            has_more=self._has_more,
            error=self._error,
            next_page=self._next_page,
        )

    async def reset(self, query: Optional[CampaignQuery] = None) -> FeedState:
        """Discard accumulated results and fetch page 0 for query (or the current one)"""
        if self._closed:
            return self.state()

        if query is not None:
            self._query = query
        self._generation += 1
        generation = self._generation

        self._campaigns = []
        self._next_page = 0
        self._error = None
        self._loading_more = False

        if self._query.scoped_to_owner and not self._query.owner_id:
            # nothing to fetch until the owner is known
            self._loading = False
            self._has_more = False
            return self.state()

        self._loading = True
        self._has_more = True
        await self._fetch(generation, 0, reset=True)
        return self.state()

    async def load_more(self) -> FeedState:
        """Fetch and append the next page; a no-op while busy or exhausted"""
        if self._closed or self._loading or self._loading_more or not self._has_more:
            return self.state()

        self._loading_more = True
        self._error = None
        await self._fetch(self._generation, self._next_page, reset=False)
        return self.state()

    def close(self):
        """Stop accepting responses; in-flight fetches are discarded when they settle"""
        self._closed = True
        self._generation += 1

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def _fetch(self, generation: int, page: int, reset: bool):
        query = self._query
        try:
            result = await self._fetcher(query, page)
        except Exception as e:
            if not self._is_current(generation):
                logger.debug(f"Discarding failed fetch of superseded page {page}: {e}")
                return
            logger.error(f"Error fetching paginated campaigns: {e}")
            self._error = load_error_message(str(e), getattr(e, "connectivity", False))
            self._has_more = False
            self._loading = False
            self._loading_more = False
            return

        if not self._is_current(generation):
            logger.debug(f"Discarding superseded response for page {page}")
            return

        rows = list(result.campaigns)
        if reset:
            self._campaigns = rows
        else:
            self._campaigns.extend(rows)
        self._has_more = has_more_after(len(rows), self.page_size)
        self._next_page = page + 1
        self._loading = False
        self._loading_more = False


__all__ = [
    "PAGE_SIZE",
    "NETWORK_ERROR_MESSAGE",
    "LOAD_ERROR_PREFIX",
    "PageFetcher",
    "load_error_message",
    "has_more_after",
    "FeedState",
    "CampaignFeed",
]
