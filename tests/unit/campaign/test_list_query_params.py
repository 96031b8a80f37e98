"""
Unit Tests for campaign listing query construction

The record-store request must filter, then order newest first, then
slice, and search terms must match literally, asterisks included.
"""

import httpx
import pytest

from core.config import BackendConfig
from microservices.campaign_service.campaign_repository import (
    CampaignRepository,
    build_search_filter,
    escape_regex,
    quote_filter_value,
)
from microservices.campaign_service.models import CampaignQuery


@pytest.fixture
def repository():
    config = BackendConfig(url="https://project.supabase.co", anon_key="anon-key")
    return CampaignRepository(config, http_client=httpx.AsyncClient())


class TestSearchFilter:
    """Literal, case-insensitive substring search"""

    def test_escape_regex_metacharacters(self):
        assert escape_regex("a*b") == "a\\*b"
        assert escape_regex("(1+1)?") == "\\(1\\+1\\)\\?"
        assert escape_regex("50%_off") == "50%_off"

    def test_quote_filter_value(self):
        assert quote_filter_value('say "hi"') == '"say \\"hi\\""'

    def test_filter_covers_all_search_columns(self):
        result = build_search_filter("ada")

        assert result == (
            '(candidate_name.imatch."ada",'
            'position_name.imatch."ada",'
            'election_region.imatch."ada")'
        )

    def test_asterisk_is_matched_literally(self):
        result = build_search_filter("a*b")

        assert "ilike" not in result
        assert result.count('.imatch."a\\\\*b"') == 3

    def test_reserved_characters_stay_inside_quotes(self):
        result = build_search_filter("a,b:c")

        assert result.count('"a,b:c"') == 3

    def test_dot_and_parentheses_are_escaped_then_quoted(self):
        result = build_search_filter("St. Louis (MO)")

        assert result.count('"St\\\\. Louis \\\\(MO\\\\)"') == 3


class TestBuildListParams:
    """Filter, then order, then paginate"""

    def test_first_page_without_filters(self, repository):
        params = repository.build_list_params(CampaignQuery(), page=0, page_size=6)

        assert params == [
            ("select", "*"),
            ("order", "created_at.desc"),
            ("offset", "0"),
            ("limit", "6"),
        ]

    def test_page_offset(self, repository):
        params = dict(repository.build_list_params(CampaignQuery(), page=3, page_size=6))

        assert params["offset"] == "18"
        assert params["limit"] == "6"

    def test_owner_and_search_filters_precede_ordering(self, repository):
        query = CampaignQuery(query=" ada ", owner_id="user-1", scoped_to_owner=True)

        params = repository.build_list_params(query, page=1, page_size=6)
        keys = [key for key, _ in params]

        assert keys == ["select", "user_id", "or", "order", "offset", "limit"]
        assert ("user_id", "eq.user-1") in params
        assert ("or", build_search_filter("ada")) in params

    def test_blank_search_is_ignored(self, repository):
        params = repository.build_list_params(CampaignQuery(query="   "), page=0, page_size=6)

        assert "or" not in dict(params)

    def test_table_url(self, repository):
        assert repository.table_url == "https://project.supabase.co/rest/v1/campaigns"
