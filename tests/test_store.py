"""Unit tests for src.translation.store: key requests, batches and progress updates."""

import threading

import pytest

from src.language_codes import Language
from src.translation import TranslationRequestStore
from src.translation.exceptions import (
    DuplicateKeyError,
    EmptySelectionError,
    InvalidSelectionError,
    RequestNotFoundError,
    ValidationError,
)
from src.translation.models import KeyStatus


def _statuses(store):
    return {item.id: item.status for item in store.list_keys()}


class TestCreateKeyRequest:

    def test_creates_in_progress_request(self, store):
        item = store.create_key_request("Admin", "ADMIN_TITLE", "Administration", "John Doe")
        assert item.status is KeyStatus.IN_PROGRESS
        assert item.id == "100"
        assert store.get_key(item.id) is item
        assert len(store.list_keys()) == 6

    def test_key_and_text_are_trimmed(self, store):
        item = store.create_key_request("CMS", "  CMS_TITLE ", " Title ", "John Doe")
        assert item.key == "CMS_TITLE"
        assert item.english_text == "Title"

    def test_duplicate_is_case_insensitive(self, store):
        with pytest.raises(DuplicateKeyError) as exc_info:
            store.create_key_request("Holidu Web", "booking_confirmation_title", "Again", "John Doe")
        assert str(exc_info.value) == "This key already exists in the Holidu Web project"
        assert exc_info.value.existing_id == "4"
        assert len(store.list_keys()) == 5

    def test_same_key_in_other_project_is_allowed(self, store):
        item = store.create_key_request("Backend", "BOOKING_CONFIRMATION_TITLE", "Booking confirmation", "John Doe")
        assert item.project == "Backend"

    def test_second_create_of_new_key_fails(self, store):
        store.create_key_request("Holidu Web", "X", "First", "John Doe")
        with pytest.raises(DuplicateKeyError):
            store.create_key_request("Holidu Web", "X", "Second", "John Doe")
        assert [item.key for item in store.list_keys()].count("X") == 1

    @pytest.mark.parametrize("project,key,text,field", [
        ("Unknown", "K", "T", "project"),
        ("Mobile", "   ", "T", "key"),
        ("Mobile", "K", "", "english_text"),
        ("Mobile", 42, "T", "key"),
        ("Mobile", "K", ["T"], "english_text"),
        (None, "K", "T", "project"),
    ])
    def test_validation(self, store, project, key, text, field):
        with pytest.raises(ValidationError) as exc_info:
            store.create_key_request(project, key, text, "John Doe")
        assert exc_info.value.details["field"] == field
        assert len(store.list_keys()) == 5

    def test_drafts_are_filtered(self, store):
        item = store.create_key_request("Mobile", "NEW", "New", "John Doe", drafts={"de": "Neu", "xx": "?"})
        assert item.drafts == {Language.DE: "Neu"}

    def test_concurrent_duplicates_create_one(self, store):
        errors = []

        def create():
            try:
                store.create_key_request("API", "RACE_KEY", "Race", "John Doe")
            except DuplicateKeyError as e:
                errors.append(e)

        threads = [threading.Thread(target=create) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(errors) == 7
        assert sum(1 for item in store.list_keys() if item.key == "RACE_KEY") == 1


class TestKeyLookups:

    def test_is_key_taken(self, store):
        assert store.is_key_taken("Mobile", "payment_success_message")
        assert not store.is_key_taken("Backend", "PAYMENT_SUCCESS_MESSAGE")
        assert not store.is_key_taken("Mobile", "")

    def test_list_by_status(self, store):
        assert [item.id for item in store.list_keys("in_progress")] == ["1", "2", "3"]
        assert [item.id for item in store.list_keys(KeyStatus.SENT)] == ["4", "5"]

    def test_list_unknown_status(self, store):
        with pytest.raises(ValueError):
            store.list_keys("done")

    def test_get_unknown_key(self, store):
        with pytest.raises(RequestNotFoundError):
            store.get_key("nope")


class TestSendBatch:

    def test_sends_exactly_the_selection(self, store):
        selection = store.select_for_batch(["3", "1"])
        request = store.send_batch(selection, "message", channel="#translations")

        assert request.key_ids == ("1", "3")
        assert request.translation_keys == (
            "DETAIL_MULTI_RATE_CANCELLATION_OPTIONS_AVAILABLE",
            "LIST_SMART_SEARCH_TITLE",
        )
        assert all(done is False for done in request.completion_status.values())
        assert _statuses(store) == {
            "1": KeyStatus.SENT,
            "2": KeyStatus.IN_PROGRESS,
            "3": KeyStatus.SENT,
            "4": KeyStatus.SENT,
            "5": KeyStatus.SENT,
        }
        assert store.get_proofreading(request.id) is request
        assert len(store.list_proofreading()) == 4

    def test_two_of_three_in_progress_keys(self, store):
        request = store.send_batch(store.select_for_batch(["1", "2"]), "message")

        assert request.key_ids == ("1", "2")
        assert [item.id for item in store.list_keys(KeyStatus.IN_PROGRESS)] == ["3"]
        assert [item.id for item in store.list_keys(KeyStatus.SENT)] == ["1", "2", "4", "5"]

    def test_empty_selection_rejected(self, store):
        before = _statuses(store)
        with pytest.raises(EmptySelectionError):
            store.send_batch([], "message")
        assert _statuses(store) == before
        assert len(store.list_proofreading()) == 3

    def test_sent_key_rejected_without_mutation(self, store):
        before = _statuses(store)
        with pytest.raises(InvalidSelectionError) as exc_info:
            store.select_for_batch(["1", "4"])
        assert exc_info.value.details["ids"] == ["4"]
        assert _statuses(store) == before

    def test_unknown_key_rejected(self, store):
        with pytest.raises(RequestNotFoundError):
            store.select_for_batch(["1", "missing"])

    def test_stale_selection_rejected_at_commit(self, store):
        selection = store.select_for_batch(["1"])
        store.send_batch(selection, "first")
        with pytest.raises(InvalidSelectionError):
            store.send_batch(selection, "second")
        assert len(store.list_proofreading()) == 4

    def test_find_by_idempotency_key(self, store):
        request = store.send_batch(store.select_for_batch(["2"]), "m", idempotency_key="abc")
        assert store.find_by_idempotency_key("abc") is request
        assert store.find_by_idempotency_key("other") is None
        assert store.find_by_idempotency_key(None) is None


class TestProofreadingUpdates:

    def test_set_language_complete(self, store):
        request = store.set_language_complete("1", "es", True)
        assert request.completion_status[Language.ES] is True
        assert store.compute_completion_rate(request) == 67

    def test_reopen_language(self, store):
        request = store.set_language_complete("3", Language.DE, False)
        assert not store.is_complete(request)

    def test_unknown_language_rejected(self, store):
        with pytest.raises(ValidationError):
            store.set_language_complete("1", "sv", True)

    def test_unknown_request_rejected(self, store):
        with pytest.raises(RequestNotFoundError):
            store.set_language_complete("99", "de", True)

    def test_filter_proofreading(self, store):
        assert [r.id for r in store.filter_proofreading("all")] == ["1", "2", "3"]
        assert [r.id for r in store.filter_proofreading("complete")] == ["3"]
        assert [r.id for r in store.filter_proofreading("incomplete")] == ["1", "2"]

    def test_new_batch_listed_first(self, store):
        store.send_batch(store.select_for_batch(["2"]), "m")
        assert store.filter_proofreading()[0].key_ids == ("2",)


class TestEmptyStore:

    def test_starts_empty(self):
        store = TranslationRequestStore()
        assert store.list_keys() == []
        assert store.list_proofreading() == []
