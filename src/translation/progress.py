"""
Proofreading progress

Completion rate, completeness and list filtering for proofreading requests.
"""

from typing import Iterable, List, Union

from src.language_codes import describe_language
from src.translation.models import FilterMode, ProofreadingRequest


def completed_count(request: ProofreadingRequest) -> int:
    return sum(1 for done in request.completion_status.values() if done)


def compute_completion_rate(request: ProofreadingRequest) -> int:
    """Share of finished languages as a whole percentage (0..100)."""
    total = len(request.completion_status)
    if total == 0:
        return 0
    return int(round(100 * completed_count(request) / total))


def is_complete(request: ProofreadingRequest) -> bool:
    """True when every language flag is set."""
    return all(request.completion_status.values())


def parse_filter_mode(value: Union[str, FilterMode, None]) -> FilterMode:
    """Parse a filter mode, defaulting to ALL. Raises ValueError for unknown modes."""
    if value is None or value == "":
        return FilterMode.ALL
    if isinstance(value, FilterMode):
        return value
    return FilterMode(str(value).strip().lower())


def filter_requests(
    requests: Iterable[ProofreadingRequest],
    mode: Union[str, FilterMode] = FilterMode.ALL,
) -> List[ProofreadingRequest]:
    """
    Filter proofreading requests by completeness.

    The result is always ordered by creation time, most recent first. Ties
    keep their original relative order.
    """
    mode = parse_filter_mode(mode)

    if mode == FilterMode.COMPLETE:
        selected = [request for request in requests if is_complete(request)]
    elif mode == FilterMode.INCOMPLETE:
        selected = [request for request in requests if not is_complete(request)]
    else:
        selected = list(requests)

    return sorted(selected, key=lambda request: request.created_at, reverse=True)


def summarize(request: ProofreadingRequest) -> dict:
    """Serialize a request together with its derived progress fields."""
    payload = request.to_dict()
    payload["completion_rate"] = compute_completion_rate(request)
    payload["is_complete"] = is_complete(request)
    payload["completed_languages"] = completed_count(request)
    payload["total_languages"] = len(request.completion_status)
    payload["languages"] = [
        dict(describe_language(language), complete=done)
        for language, done in request.completion_status.items()
    ]
    return payload
