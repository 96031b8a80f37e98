"""
Component Tests for CampaignService

Business logic over the in-memory record store and blob store: listing,
gated create/update, owner-only edits, two-step delete with media cleanup,
and media uploads.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.backend_client import BackendResult
from microservices.campaign_service.campaign_service import CampaignService
from microservices.campaign_service.models import (
    CampaignQuery,
    CampaignUpdateRequest,
    MediaKind,
    SubmissionState,
)
from microservices.campaign_service.moderation import UNSAFE_REASON, ContentSafetyGate
from microservices.campaign_service.pagination import NETWORK_ERROR_MESSAGE
from microservices.campaign_service.protocols import (
    AuthenticationRequiredError,
    CampaignAccessDeniedError,
    CampaignDeletionError,
    CampaignModerationError,
    CampaignNotFoundError,
    CampaignPersistenceError,
    CampaignValidationError,
    DeleteConfirmationError,
    MediaUploadError,
)
from tests.component.mocks import FakeModerationClient, rejected, unreachable

MUTATING_OPERATIONS = ("insert_campaign", "update_campaign", "delete_campaign")


class TestListCampaigns:
    """Filter, then newest first, then paginate"""

    @pytest.mark.asyncio
    async def test_search_matches_any_search_column_case_insensitively(
        self, campaign_service, mock_repository, factory
    ):
        mock_repository.seed([
            factory.make_campaign(candidate_name="Ada LOVELACE", position_name="Mayor", election_region="North"),
            factory.make_campaign(candidate_name="Grace", position_name="Lovelace Chair", election_region="South"),
            factory.make_campaign(candidate_name="Grace", position_name="Mayor", election_region="lovelace county"),
            factory.make_campaign(candidate_name="Alan", position_name="Mayor", election_region="East",
                                  election_name="Lovelace election"),
        ])

        page = await campaign_service.list_campaigns(CampaignQuery(query="lovelace"))

        assert len(page.campaigns) == 3
        for campaign in page.campaigns:
            assert any(
                "lovelace" in (value or "").lower()
                for value in (campaign.candidate_name, campaign.position_name, campaign.election_region)
            )

    @pytest.mark.asyncio
    async def test_pages_are_disjoint_and_newest_first(self, campaign_service, mock_repository, factory):
        mock_repository.seed(factory.make_campaigns(14))

        pages = [await campaign_service.list_campaigns(CampaignQuery(), page=n) for n in range(3)]
        combined = [c for page in pages for c in page.campaigns]

        assert [len(p.campaigns) for p in pages] == [6, 6, 2]
        assert len({c.id for c in combined}) == 14
        assert [c.created_at for c in combined] == sorted((c.created_at for c in combined), reverse=True)

    @pytest.mark.asyncio
    async def test_has_more_heuristic(self, campaign_service, mock_repository, factory):
        mock_repository.seed(factory.make_campaigns(12))

        first = await campaign_service.list_campaigns(CampaignQuery(), page=0)
        second = await campaign_service.list_campaigns(CampaignQuery(), page=1)
        third = await campaign_service.list_campaigns(CampaignQuery(), page=2)

        assert first.has_more and second.has_more
        assert third.campaigns == []
        assert not third.has_more

    @pytest.mark.asyncio
    async def test_owner_scope_filters_then_paginates(self, campaign_service, mock_repository, factory, owner):
        mock_repository.seed(factory.make_campaigns(7, user_id=owner.user_id))
        mock_repository.seed(factory.make_campaigns(5))

        query = CampaignQuery(owner_id=owner.user_id, scoped_to_owner=True)
        first = await campaign_service.list_campaigns(query, page=0, actor=owner)
        second = await campaign_service.list_campaigns(query, page=1, actor=owner)

        owned = first.campaigns + second.campaigns
        assert len(owned) == 7
        assert all(c.user_id == owner.user_id for c in owned)
        assert not second.has_more

    @pytest.mark.asyncio
    async def test_owner_scope_without_owner_skips_the_store(self, campaign_service, mock_repository):
        page = await campaign_service.list_campaigns(CampaignQuery(scoped_to_owner=True))

        assert page.campaigns == []
        assert not page.has_more
        assert mock_repository.calls_to("list_campaigns") == []

    @pytest.mark.asyncio
    async def test_negative_page_is_rejected(self, campaign_service):
        with pytest.raises(CampaignValidationError):
            await campaign_service.list_campaigns(CampaignQuery(), page=-1)

    @pytest.mark.asyncio
    async def test_connectivity_failure_gives_network_message(self, campaign_service, mock_repository):
        mock_repository.fail("list_campaigns", unreachable())

        with pytest.raises(CampaignPersistenceError) as exc_info:
            await campaign_service.list_campaigns(CampaignQuery())

        assert str(exc_info.value) == NETWORK_ERROR_MESSAGE
        assert exc_info.value.connectivity

    @pytest.mark.asyncio
    async def test_other_failure_is_prefixed(self, campaign_service, mock_repository):
        mock_repository.fail("list_campaigns", rejected("permission denied for table campaigns"))

        with pytest.raises(CampaignPersistenceError, match="^Failed to load campaigns. An unexpected error"):
            await campaign_service.list_campaigns(CampaignQuery())


class TestGetCampaign:

    @pytest.mark.asyncio
    async def test_missing_campaign(self, campaign_service):
        with pytest.raises(CampaignNotFoundError, match="Campaign not found."):
            await campaign_service.get_campaign("missing")

    @pytest.mark.asyncio
    async def test_detail_is_sanitized(self, campaign_service, mock_repository, factory):
        campaign = mock_repository.seed([factory.make_campaign(
            proposed_policies="<p>Parks</p><script>steal()</script>",
            portrait_url=factory.make_public_url("portraits", "portraits/a.png"),
        )])[0]

        detail = await campaign_service.get_campaign_detail(campaign.id)

        assert detail.proposed_policies_html == "<p>Parks</p>"
        assert detail.proposed_policies == campaign.proposed_policies
        assert "/render/image/" in detail.portrait_display_url
        assert detail.snippet == "Parks"

    def test_card_has_thumbnail_and_snippet(self, factory):
        campaign = factory.make_campaign(portrait_url=factory.make_public_url("portraits", "portraits/a.png"))

        card = CampaignService.to_card(campaign)

        assert "width=400" in card.thumbnail_url
        assert card.snippet == "Better parks for everyone."

    def test_card_without_portrait(self, factory):
        assert CampaignService.to_card(factory.make_campaign()).thumbnail_url is None


class TestCreateCampaign:
    """Validate, moderate, persist"""

    @pytest.mark.asyncio
    async def test_create_stamps_owner_and_walks_states(self, campaign_service, factory, owner):
        states = []

        campaign = await campaign_service.create_campaign(
            factory.make_create_request(), owner, on_state=states.append
        )

        assert campaign.user_id == owner.user_id
        assert states == [
            SubmissionState.VALIDATING,
            SubmissionState.MODERATING,
            SubmissionState.PERSISTING,
            SubmissionState.SUCCESS,
        ]

    @pytest.mark.asyncio
    async def test_create_requires_sign_in(self, campaign_service, mock_repository, factory):
        states = []

        with pytest.raises(AuthenticationRequiredError, match="You must be logged in to create a campaign."):
            await campaign_service.create_campaign(factory.make_create_request(), None, on_state=states.append)

        assert states[-1] == SubmissionState.FAILED
        assert mock_repository.calls_to("insert_campaign") == []

    @pytest.mark.asyncio
    async def test_unsafe_content_is_rejected_before_insert(self, mock_repository, mock_storage, factory, owner):
        service = CampaignService(
            repository=mock_repository,
            storage=mock_storage,
            safety_gate=ContentSafetyGate(FakeModerationClient("UNSAFE")),
        )
        states = []

        with pytest.raises(CampaignModerationError) as exc_info:
            await service.create_campaign(factory.make_create_request(), owner, on_state=states.append)

        assert exc_info.value.reason == UNSAFE_REASON
        assert states == [SubmissionState.VALIDATING, SubmissionState.MODERATING, SubmissionState.FAILED]
        assert mock_repository.calls_to("insert_campaign") == []

    @pytest.mark.asyncio
    async def test_moderation_sees_plain_text(self, campaign_service, moderation_client, factory, owner):
        await campaign_service.create_campaign(
            factory.make_create_request(proposed_policies="<p>Free <b>buses</b></p>"), owner
        )

        assert "<" not in moderation_client.texts[0]
        assert "buses" in moderation_client.texts[0]

    @pytest.mark.asyncio
    async def test_classifier_failure_fails_open(self, mock_repository, mock_storage, factory, owner):
        service = CampaignService(
            repository=mock_repository,
            storage=mock_storage,
            safety_gate=ContentSafetyGate(FakeModerationClient(error=RuntimeError("quota"))),
        )

        campaign = await service.create_campaign(factory.make_create_request(), owner)

        assert campaign.id in mock_repository.campaigns

    @pytest.mark.asyncio
    async def test_store_rejection(self, campaign_service, mock_repository, factory, owner):
        mock_repository.fail("insert_campaign", rejected("new row violates row-level security policy"))
        states = []

        with pytest.raises(CampaignPersistenceError) as exc_info:
            await campaign_service.create_campaign(factory.make_create_request(), owner, on_state=states.append)

        assert str(exc_info.value) == "Error creating campaign: new row violates row-level security policy"
        assert states[-1] == SubmissionState.FAILED


class TestUpdateCampaign:
    """Owner-only partial updates"""

    @pytest.mark.asyncio
    async def test_owner_can_update(self, campaign_service, mock_repository, factory, owner):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]

        updated = await campaign_service.update_campaign(
            campaign.id, CampaignUpdateRequest(position_name="Mayor"), owner
        )

        assert updated.position_name == "Mayor"
        assert updated.id == campaign.id
        assert updated.created_at == campaign.created_at

    @pytest.mark.asyncio
    async def test_non_owner_is_rejected_before_any_mutation(
        self, campaign_service, mock_repository, factory, owner, stranger
    ):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]
        states = []

        with pytest.raises(CampaignAccessDeniedError, match="You are not authorized to edit this campaign."):
            await campaign_service.update_campaign(
                campaign.id, CampaignUpdateRequest(position_name="Dictator"), stranger, on_state=states.append
            )

        assert all(not mock_repository.calls_to(op) for op in MUTATING_OPERATIONS)
        assert mock_repository.campaigns[campaign.id] == campaign
        assert states[-1] == SubmissionState.FAILED

    @pytest.mark.asyncio
    async def test_anonymous_update_is_rejected(self, campaign_service, mock_repository, factory):
        campaign = mock_repository.seed([factory.make_campaign()])[0]

        with pytest.raises(AuthenticationRequiredError):
            await campaign_service.update_campaign(campaign.id, CampaignUpdateRequest(position_name="x"), None)

        assert mock_repository.calls_to("update_campaign") == []

    @pytest.mark.asyncio
    async def test_edit_form_load_is_owner_only(self, campaign_service, mock_repository, factory, owner, stranger):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]

        assert (await campaign_service.get_campaign_for_edit(campaign.id, owner)).id == campaign.id
        with pytest.raises(CampaignAccessDeniedError):
            await campaign_service.get_campaign_for_edit(campaign.id, stranger)

    @pytest.mark.asyncio
    async def test_empty_update_returns_existing(self, campaign_service, mock_repository, factory, owner):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]

        result = await campaign_service.update_campaign(campaign.id, CampaignUpdateRequest(), owner)

        assert result == campaign
        assert mock_repository.calls_to("update_campaign") == []

    @pytest.mark.asyncio
    async def test_moderation_runs_on_merged_content(
        self, campaign_service, mock_repository, moderation_client, factory, owner
    ):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id, candidate_name="Ada")])[0]

        await campaign_service.update_campaign(
            campaign.id, CampaignUpdateRequest(position_name="Governor"), owner
        )

        assert "Ada" in moderation_client.texts[-1]
        assert "Governor" in moderation_client.texts[-1]

    @pytest.mark.asyncio
    async def test_no_rows_updated(self, campaign_service, mock_repository, factory, owner):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]

        async def invisible(*args, **kwargs):
            return BackendResult(data=None)

        mock_repository.update_campaign = invisible

        with pytest.raises(CampaignPersistenceError, match="no rows were updated"):
            await campaign_service.update_campaign(campaign.id, CampaignUpdateRequest(position_name="x"), owner)


class TestDeleteCampaign:
    """Two-step delete with best-effort media cleanup"""

    @pytest.mark.asyncio
    async def test_confirmed_delete_removes_media_and_record(
        self, campaign_service, mock_repository, mock_storage, factory, owner
    ):
        campaign = mock_repository.seed([factory.make_campaign_with_media(user_id=owner.user_id)])[0]

        confirmation = await campaign_service.request_delete(campaign.id, owner)
        await campaign_service.delete_campaign(campaign.id, owner, confirmation.confirmation_token)

        assert campaign.id not in mock_repository.campaigns
        assert [bucket for bucket, _ in mock_storage.removed] == ["portraits", "resumes"]

    @pytest.mark.asyncio
    async def test_media_failures_do_not_stop_cleanup_or_delete(
        self, campaign_service, mock_repository, mock_storage, factory, owner
    ):
        campaign = mock_repository.seed([factory.make_campaign_with_media(user_id=owner.user_id)])[0]
        mock_storage.remove_exceptions["portraits"] = RuntimeError("storage down")

        confirmation = await campaign_service.request_delete(campaign.id, owner)
        await campaign_service.delete_campaign(campaign.id, owner, confirmation.confirmation_token)

        assert [bucket for bucket, _ in mock_storage.removed] == ["resumes"]
        assert campaign.id not in mock_repository.campaigns

    @pytest.mark.asyncio
    async def test_failed_record_delete_leaves_campaign_unchanged(
        self, campaign_service, mock_repository, mock_storage, factory, owner
    ):
        campaign = mock_repository.seed([factory.make_campaign_with_media(user_id=owner.user_id)])[0]
        mock_storage.remove_errors["portraits"] = rejected("Object not found", 404)
        mock_repository.fail("delete_campaign", rejected("permission denied"))

        confirmation = await campaign_service.request_delete(campaign.id, owner)
        with pytest.raises(CampaignDeletionError) as exc_info:
            await campaign_service.delete_campaign(campaign.id, owner, confirmation.confirmation_token)

        assert str(exc_info.value) == "Deletion failed: permission denied. Please check RLS policies."
        assert [bucket for bucket, _ in mock_storage.removed] == ["resumes"]
        assert await campaign_service.get_campaign(campaign.id) == campaign

    @pytest.mark.asyncio
    async def test_zero_deleted_rows_is_a_failure(self, campaign_service, mock_repository, factory, owner):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]
        mock_repository.delete_blocked = True

        confirmation = await campaign_service.request_delete(campaign.id, owner)
        with pytest.raises(CampaignDeletionError, match="no rows were deleted"):
            await campaign_service.delete_campaign(campaign.id, owner, confirmation.confirmation_token)

        assert campaign.id in mock_repository.campaigns

    @pytest.mark.asyncio
    async def test_delete_without_confirmation(self, campaign_service, mock_repository, factory, owner):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]

        with pytest.raises(DeleteConfirmationError):
            await campaign_service.delete_campaign(campaign.id, owner, None)
        with pytest.raises(DeleteConfirmationError):
            await campaign_service.delete_campaign(campaign.id, owner, "made-up")

        assert campaign.id in mock_repository.campaigns

    @pytest.mark.asyncio
    async def test_confirmation_is_single_use(self, campaign_service, mock_repository, factory, owner):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]
        mock_repository.delete_blocked = True
        confirmation = await campaign_service.request_delete(campaign.id, owner)

        with pytest.raises(CampaignDeletionError):
            await campaign_service.delete_campaign(campaign.id, owner, confirmation.confirmation_token)
        with pytest.raises(DeleteConfirmationError):
            await campaign_service.delete_campaign(campaign.id, owner, confirmation.confirmation_token)

    @pytest.mark.asyncio
    async def test_confirmation_is_bound_to_campaign(self, campaign_service, mock_repository, factory, owner):
        first, second = mock_repository.seed(factory.make_campaigns(2, user_id=owner.user_id))
        confirmation = await campaign_service.request_delete(first.id, owner)

        with pytest.raises(DeleteConfirmationError):
            await campaign_service.delete_campaign(second.id, owner, confirmation.confirmation_token)

        assert second.id in mock_repository.campaigns

    @pytest.mark.asyncio
    async def test_confirmation_expires(self, mock_repository, mock_storage, factory, owner):
        now = [datetime(2025, 1, 1, tzinfo=timezone.utc)]
        service = CampaignService(mock_repository, mock_storage, clock=lambda: now[0])
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]

        confirmation = await service.request_delete(campaign.id, owner)
        now[0] += timedelta(minutes=5, seconds=1)

        with pytest.raises(DeleteConfirmationError):
            await service.delete_campaign(campaign.id, owner, confirmation.confirmation_token)

    @pytest.mark.asyncio
    async def test_non_owner_cannot_request_delete(
        self, campaign_service, mock_repository, factory, owner, stranger
    ):
        campaign = mock_repository.seed([factory.make_campaign(user_id=owner.user_id)])[0]

        with pytest.raises(CampaignAccessDeniedError):
            await campaign_service.request_delete(campaign.id, stranger)

        assert mock_repository.calls_to("delete_campaign") == []


class TestUploadMedia:
    """Portrait and resume uploads"""

    @pytest.mark.asyncio
    async def test_portrait_upload(self, campaign_service, mock_storage, owner):
        result = await campaign_service.upload_media(
            MediaKind.PORTRAIT, "me.PNG", b"\x89PNG", "image/png", owner
        )

        assert result.bucket == "portraits"
        assert result.path.startswith("portraits/")
        assert result.path.endswith(".png")
        assert result.url.endswith(f"/object/public/portraits/{result.path}")
        assert mock_storage.has("portraits", result.path)

    @pytest.mark.asyncio
    async def test_resume_must_be_pdf(self, campaign_service, owner):
        with pytest.raises(CampaignValidationError, match="Invalid file type. Please upload a PDF."):
            await campaign_service.upload_media(MediaKind.RESUME, "cv.docx", b"x", "application/msword", owner)

    @pytest.mark.asyncio
    async def test_portrait_must_be_image(self, campaign_service, owner):
        with pytest.raises(CampaignValidationError, match="JPEG or PNG"):
            await campaign_service.upload_media(MediaKind.PORTRAIT, "a.gif", b"x", "image/gif", owner)

    @pytest.mark.asyncio
    async def test_size_limit(self, campaign_service, owner):
        content = b"x" * (2 * 1024 * 1024 + 1)

        with pytest.raises(CampaignValidationError, match="File is too large. Maximum size is 2MB."):
            await campaign_service.upload_media(MediaKind.RESUME, "cv.pdf", content, "application/pdf", owner)

    @pytest.mark.asyncio
    async def test_extension_from_content_type(self, campaign_service, owner):
        result = await campaign_service.upload_media(MediaKind.RESUME, None, b"%PDF", "application/pdf", owner)

        assert result.path.endswith(".pdf")

    @pytest.mark.asyncio
    async def test_store_rejection(self, campaign_service, mock_storage, owner):
        mock_storage.upload_error = rejected("The resource already exists", 409)

        with pytest.raises(MediaUploadError, match="^Upload failed: The resource already exists"):
            await campaign_service.upload_media(MediaKind.RESUME, "cv.pdf", b"%PDF", "application/pdf", owner)

    @pytest.mark.asyncio
    async def test_upload_requires_sign_in(self, campaign_service):
        with pytest.raises(AuthenticationRequiredError):
            await campaign_service.upload_media(MediaKind.RESUME, "cv.pdf", b"%PDF", "application/pdf", None)
