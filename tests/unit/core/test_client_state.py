"""
Unit Tests for client-local state, toasts and form drafts
"""

import json

import pytest

from core.local_state import REMEMBERED_EMAIL_KEY, LocalStateStore
from core.notifications import DEFAULT_TOAST_DURATION, ToastQueue, ToastType
from microservices.campaign_service.drafts import FormDraftStore, draft_key


class TestLocalStateStore:

    def test_in_memory_store(self):
        store = LocalStateStore()

        store.set(REMEMBERED_EMAIL_KEY, "ada@example.com")

        assert store.get(REMEMBERED_EMAIL_KEY) == "ada@example.com"
        assert REMEMBERED_EMAIL_KEY in store

    def test_persists_to_file(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        LocalStateStore(str(path)).set("hasSeenWelcomeIntro", True)

        assert json.loads(path.read_text()) == {"hasSeenWelcomeIntro": True}
        assert LocalStateStore(str(path)).get("hasSeenWelcomeIntro") is True

    def test_remove(self, tmp_path):
        path = tmp_path / "state.json"
        store = LocalStateStore(str(path))
        store.set("k", 1)

        store.remove("k")
        store.remove("missing")

        assert "k" not in LocalStateStore(str(path))

    @pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
    def test_unreadable_file_is_ignored(self, tmp_path, content):
        path = tmp_path / "state.json"
        path.write_text(content)

        assert LocalStateStore(str(path)).get("anything", "default") == "default"


class TestToastQueue:

    def test_enqueue_defaults(self):
        queue = ToastQueue(clock=lambda: 100.0)

        toast = queue.enqueue("Saved")

        assert toast.type == ToastType.INFO
        assert toast.id == 100000
        assert toast.expires_at() == 100.0 + DEFAULT_TOAST_DURATION

    def test_ids_are_unique_within_a_millisecond(self):
        queue = ToastQueue(clock=lambda: 100.0)

        first = queue.enqueue("a")
        second = queue.enqueue("b")

        assert second.id > first.id

    def test_dismiss(self):
        queue = ToastQueue(clock=lambda: 100.0)
        toast = queue.enqueue("a", ToastType.DANGER)

        assert queue.dismiss(toast.id)
        assert not queue.dismiss(toast.id)
        assert len(queue) == 0

    def test_active_drops_expired_toasts(self):
        queue = ToastQueue(clock=lambda: 100.0)
        queue.enqueue("short", duration=1)
        long = queue.enqueue("long", duration=10)

        assert queue.active(now=105.0) == [long]


class TestFormDraftStore:

    def test_draft_keys(self):
        assert draft_key() == "campaign-form-draft-new"
        assert draft_key("abc") == "campaign-form-draft-abc"

    def test_drafts_are_per_form(self):
        drafts = FormDraftStore(LocalStateStore())

        drafts.save({"candidate_name": "Ada"})
        drafts.save({"candidate_name": "Grace"}, campaign_id="abc")

        assert drafts.load() == {"candidate_name": "Ada"}
        assert drafts.load("abc") == {"candidate_name": "Grace"}

    def test_clear(self):
        drafts = FormDraftStore(LocalStateStore())
        drafts.save({"x": 1}, campaign_id="abc")

        drafts.clear("abc")

        assert drafts.load("abc") is None

    def test_malformed_draft_is_ignored(self):
        state = LocalStateStore()
        state.set(draft_key(), "oops")

        assert FormDraftStore(state).load() is None
