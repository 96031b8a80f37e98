"""
Campaign Service Data Repository

Data access layer - hosted record store over its PostgREST interface
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from core.backend_client import BackendClient, BackendError, BackendResult
from core.config import BackendConfig

from .models import SEARCH_COLUMNS, Campaign, CampaignQuery

logger = logging.getLogger(__name__)

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


# Characters with a meaning in POSIX regular expressions
REGEX_METACHARACTERS = frozenset("\\^$.|?*+()[]{}")


def escape_regex(term: str) -> str:
    """Backslash-escape regex metacharacters so the term matches literally"""
    return "".join(f"\\{c}" if c in REGEX_METACHARACTERS else c for c in term)


def quote_filter_value(value: str) -> str:
    """Double-quote a filter value so reserved characters (, . : ( )) are literal"""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_search_filter(term: str) -> str:
    """
    OR-chained case-insensitive substring filter over the search columns.

    Uses ``imatch`` (``~*``) rather than ``ilike``: the record store turns
    every ``*`` in a like pattern into ``%``, so a literal asterisk cannot be
    expressed there.

    Example: ``(candidate_name.imatch."ada",position_name.imatch."ada",...)``
    """
    pattern = quote_filter_value(escape_regex(term))
    return "(" + ",".join(f"{column}.imatch.{pattern}" for column in SEARCH_COLUMNS) + ")"


class CampaignRepository(BackendClient):
    """Campaign repository - record store operations"""

    def __init__(
        self,
        config: BackendConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config, http_client)
        self.table_url = f"{config.rest_url}/{config.campaigns_table}"
        logger.info(f"CampaignRepository initialized for table {config.campaigns_table}")

    async def health_check(self) -> bool:
        """Check that the campaigns table answers"""
        result = await self.request(
            "GET",
            self.table_url,
            params={"select": "id", "limit": "1"},
        )
        return result.ok

    # ====================
    # Reads
    # ====================

    def build_list_params(
        self, query: CampaignQuery, page: int, page_size: int
    ) -> List[tuple]:
        """Filter, then order, then paginate"""
        params: List[tuple] = [("select", "*")]

        if query.owner_id:
            params.append(("user_id", f"eq.{query.owner_id}"))

        term = query.search_term
        if term:
            params.append(("or", build_search_filter(term)))

        params.append(("order", "created_at.desc"))
        params.append(("offset", str(page * page_size)))
        params.append(("limit", str(page_size)))
        return params

    async def list_campaigns(
        self,
        query: CampaignQuery,
        page: int = 0,
        page_size: int = 6,
        access_token: Optional[str] = None,
    ) -> BackendResult:
        """List one page of campaigns, newest first"""
        result = await self.request_json(
            "GET",
            self.table_url,
            access_token=access_token,
            params=self.build_list_params(query, page, page_size),
        )
        if result.error:
            return result
        return self._rows_to_campaigns(result.data or [])

    async def get_campaign(
        self, campaign_id: str, access_token: Optional[str] = None
    ) -> BackendResult:
        """Get campaign by ID; data is None when no row matches"""
        result = await self.request_json(
            "GET",
            self.table_url,
            access_token=access_token,
            params={"select": "*", "id": f"eq.{campaign_id}", "limit": "1"},
        )
        if result.error:
            return result
        return self._first_campaign(result.data)

    # ====================
    # Writes
    # ====================

    async def insert_campaign(
        self, row: Dict[str, Any], access_token: str
    ) -> BackendResult:
        """Insert a campaign row and return the stored record"""
        result = await self.request_json(
            "POST",
            self.table_url,
            access_token=access_token,
            json=row,
            headers=RETURN_REPRESENTATION,
        )
        if result.error:
            return result

        created = self._first_campaign(result.data)
        if created.ok and created.data is None:
            return BackendResult(error=BackendError(message="Insert returned no record"))
        if created.ok:
            logger.info(f"Inserted campaign {created.data.id} for user {created.data.user_id}")
        return created

    async def update_campaign(
        self, campaign_id: str, changes: Dict[str, Any], access_token: str
    ) -> BackendResult:
        """Update a campaign; data is None when no row was visible to update"""
        result = await self.request_json(
            "PATCH",
            self.table_url,
            access_token=access_token,
            params={"id": f"eq.{campaign_id}"},
            json=changes,
            headers=RETURN_REPRESENTATION,
        )
        if result.error:
            return result
        return self._first_campaign(result.data)

    async def delete_campaign(
        self, campaign_id: str, access_token: str
    ) -> BackendResult:
        """Delete a campaign; data is the number of rows removed"""
        result = await self.request_json(
            "DELETE",
            self.table_url,
            access_token=access_token,
            params={"id": f"eq.{campaign_id}"},
            headers=RETURN_REPRESENTATION,
        )
        if result.error:
            return result
        deleted = len(result.data or [])
        logger.info(f"Deleted {deleted} row(s) for campaign {campaign_id}")
        return BackendResult(data=deleted)

    # ====================
    # Row mapping
    # ====================

    def _rows_to_campaigns(self, rows: List[Dict[str, Any]]) -> BackendResult:
        try:
            return BackendResult(data=[Campaign.model_validate(row) for row in rows])
        except ValidationError as e:
            logger.error(f"Malformed campaign row from record store: {e}")
            return BackendResult(error=BackendError(message=f"Malformed campaign record: {e}"))

    def _first_campaign(self, rows: Any) -> BackendResult:
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            return BackendResult(data=None)
        result = self._rows_to_campaigns(rows[:1])
        if result.error:
            return result
        return BackendResult(data=result.data[0])


__all__ = [
    "CampaignRepository",
    "escape_regex",
    "quote_filter_value",
    "build_search_filter",
]
