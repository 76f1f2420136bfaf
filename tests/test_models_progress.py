"""Unit tests for the workflow data model and proofreading progress helpers."""

from datetime import datetime

import pytest

from src.language_codes import DRAFT_LANGUAGES, Language
from src.translation import progress
from src.translation.models import (
    FilterMode,
    ProofreadingRequest,
    TranslationDraft,
)


def _request(request_id, created_at, flags):
    languages = ["de", "es", "pt", "nl", "fr", "it"]
    return ProofreadingRequest(
        id=request_id,
        created_at=created_at,
        key_ids=("k1",),
        translation_keys=("KEY_ONE",),
        completion_status=dict(zip(languages, flags)),
    )


ALL_DONE = (True,) * 6
NONE_DONE = (False,) * 6
ALTERNATING = (True, False, True, False, True, False)


class TestProofreadingRequest:

    def test_status_keys_normalized_to_canonical_order(self):
        request = ProofreadingRequest(
            id="1",
            created_at=datetime(2024, 1, 1),
            key_ids=("1",),
            translation_keys=("A",),
            completion_status={"it": 1, "DE": 0, "es": 0, "pt": 0, "nl": 0, "fr": 0},
        )
        assert list(request.completion_status) == [
            Language.DE, Language.ES, Language.PT, Language.NL, Language.FR, Language.IT,
        ]
        assert request.completion_status[Language.IT] is True

    def test_missing_language_rejected(self):
        with pytest.raises(ValueError, match="missing"):
            ProofreadingRequest(
                id="1",
                created_at=datetime(2024, 1, 1),
                key_ids=("1",),
                translation_keys=("A",),
                completion_status={"de": True},
            )

    def test_non_proofreading_language_rejected(self):
        status = ProofreadingRequest.empty_status()
        status["sv"] = True
        with pytest.raises(ValueError, match="Unsupported"):
            ProofreadingRequest(
                id="1",
                created_at=datetime(2024, 1, 1),
                key_ids=("1",),
                translation_keys=("A",),
                completion_status=status,
            )

    def test_to_dict_uses_plain_codes_and_hides_idempotency_key(self):
        request = _request("7", datetime(2024, 1, 1), ALTERNATING)
        request.idempotency_key = "abc"
        payload = request.to_dict()
        assert payload["completion_status"]["de"] is True
        assert payload["completion_status"]["es"] is False
        assert "idempotency_key" not in payload


class TestTranslationDraft:

    def test_from_mapping_drops_unknown_and_blank(self):
        draft = TranslationDraft.from_mapping({"de": "Hallo", "xx": "?", "es": "  ", "FR": "Bonjour"})
        assert draft.texts == {Language.DE: "Hallo", Language.FR: "Bonjour"}
        assert draft.is_partial
        assert Language.ES in draft.missing

    def test_complete_draft(self):
        draft = TranslationDraft.from_mapping({lang.value: "x" for lang in DRAFT_LANGUAGES})
        assert not draft.is_partial
        assert draft.to_dict()["missing"] == []


class TestCompletionRate:

    def test_half_complete(self):
        assert progress.compute_completion_rate(_request("1", datetime(2024, 1, 1), ALTERNATING)) == 50

    def test_bounds(self):
        assert progress.compute_completion_rate(_request("1", datetime(2024, 1, 1), NONE_DONE)) == 0
        assert progress.compute_completion_rate(_request("1", datetime(2024, 1, 1), ALL_DONE)) == 100

    def test_rounds_to_whole_percent(self):
        flags = (True, False, False, False, False, False)
        assert progress.compute_completion_rate(_request("1", datetime(2024, 1, 1), flags)) == 17

    def test_is_complete(self):
        assert progress.is_complete(_request("1", datetime(2024, 1, 1), ALL_DONE))
        assert not progress.is_complete(_request("1", datetime(2024, 1, 1), ALTERNATING))

    @pytest.mark.parametrize("done", range(7))
    def test_rate_grows_with_each_language_and_hits_100_only_when_complete(self, done):
        flags = (True,) * done + (False,) * (6 - done)
        request = _request("1", datetime(2024, 1, 1), flags)
        rate = progress.compute_completion_rate(request)

        if done:
            fewer = (True,) * (done - 1) + (False,) * (7 - done)
            assert rate > progress.compute_completion_rate(_request("1", datetime(2024, 1, 1), fewer))
        assert 0 <= rate <= 100
        assert (rate == 100) is progress.is_complete(request)


class TestFilterRequests:

    @pytest.fixture
    def requests(self):
        return [
            _request("old", datetime(2024, 1, 1), ALL_DONE),
            _request("new", datetime(2024, 1, 3), NONE_DONE),
            _request("mid", datetime(2024, 1, 2), ALTERNATING),
        ]

    def test_all_sorted_newest_first(self, requests):
        assert [r.id for r in progress.filter_requests(requests, FilterMode.ALL)] == ["new", "mid", "old"]

    def test_complete_and_incomplete_partition(self, requests):
        complete = progress.filter_requests(requests, "complete")
        incomplete = progress.filter_requests(requests, "incomplete")
        assert [r.id for r in complete] == ["old"]
        assert [r.id for r in incomplete] == ["new", "mid"]
        assert {r.id for r in complete} | {r.id for r in incomplete} == {r.id for r in requests}

    def test_ties_keep_original_order(self):
        same_time = datetime(2024, 1, 1)
        items = [_request("a", same_time, NONE_DONE), _request("b", same_time, NONE_DONE)]
        assert [r.id for r in progress.filter_requests(items)] == ["a", "b"]

    def test_parse_filter_mode(self):
        assert progress.parse_filter_mode(None) is FilterMode.ALL
        assert progress.parse_filter_mode("") is FilterMode.ALL
        assert progress.parse_filter_mode(" Complete ") is FilterMode.COMPLETE
        with pytest.raises(ValueError):
            progress.parse_filter_mode("done")

    def test_summarize(self, requests):
        payload = progress.summarize(requests[2])
        assert payload["completion_rate"] == 50
        assert payload["is_complete"] is False
        assert payload["completed_languages"] == 3
        assert payload["total_languages"] == 6
        assert payload["languages"][0] == {"code": "de", "name": "German", "flag": "🇩🇪", "complete": True}
        assert [row["complete"] for row in payload["languages"]] == [True, False, True, False, True, False]
