"""
Agent response normalization.

The agent gateway returns envelopes whose shape drifts between deployments:
the structured reply may sit under ``response.result`` (as an object or a JSON
string), inside ``response.message``, directly on ``response``, at the top
level, or in ``raw_response``, sometimes encoded twice. ``normalize_agent_response``
walks those locations in a fixed order and projects whatever it finds onto
``CanonicalResponse``. It never raises: undecodable or mistyped content is a
miss, not an error.
"""

from __future__ import annotations

import json
from dataclasses import fields
from typing import Any, Callable, Iterable, TypeVar

from observability import get_logger

from .models import (
    DEFAULT_INTENT,
    CanonicalResponse,
    Donor,
    EmergencyContact,
    Hospital,
    OrganDonationInfo,
    Scheme,
)

log = get_logger(__name__)

FAILURE_MESSAGE = "Sorry, something went wrong. Please try again."

# Strategies return a decoded object, a JSON string literal that still needs
# one more decode, or None for a miss.
CandidateStrategy = Callable[[Any], Any]
RecordT = TypeVar("RecordT")


def _truthy(value: Any) -> bool:
    # Agent payloads are produced by JavaScript: empty containers count as present.
    if isinstance(value, (dict, list, tuple)):
        return True
    return bool(value)


def _to_json_text(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError, RecursionError):
        pass
    try:
        return str(value)
    except RecursionError:
        return ""


def _coerce_text(value: Any) -> str:
    if not _truthy(value):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true"
    if isinstance(value, (dict, list, tuple)):
        return _to_json_text(value)
    return str(value)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return _truthy(value)


def _parse_candidate(text: str, source: str) -> dict[str, Any] | str | None:
    try:
        decoded = json.loads(text)
    except (ValueError, RecursionError):
        log.debug("normalizer.parse_failed", source=source, length=len(text))
        return None
    if isinstance(decoded, dict):
        return decoded
    if isinstance(decoded, str) and decoded:
        return decoded
    return None


def _inner_response(envelope: Any) -> dict[str, Any] | None:
    if not isinstance(envelope, dict):
        return None
    response = envelope.get("response")
    return response if isinstance(response, dict) else None


def _looks_like_agent_payload(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    return _truthy(value.get("intent")) or _truthy(value.get("emergency_numbers"))


def from_response_result(envelope: Any) -> dict[str, Any] | str | None:
    response = _inner_response(envelope)
    if response is None:
        return None
    result = response.get("result")
    if isinstance(result, dict):
        return result
    if isinstance(result, str) and result:
        return _parse_candidate(result, "response.result")
    return None


def from_response_message(envelope: Any) -> dict[str, Any] | str | None:
    response = _inner_response(envelope)
    if response is None:
        return None
    message = response.get("message")
    if isinstance(message, str) and message.strip().startswith("{"):
        return _parse_candidate(message, "response.message")
    return None


def from_agent_shaped_response(envelope: Any) -> dict[str, Any] | None:
    response = _inner_response(envelope)
    return response if _looks_like_agent_payload(response) else None


def from_agent_shaped_envelope(envelope: Any) -> dict[str, Any] | None:
    return envelope if _looks_like_agent_payload(envelope) else None


def from_raw_response(envelope: Any) -> dict[str, Any] | str | None:
    if not isinstance(envelope, dict):
        return None
    raw = envelope.get("raw_response")
    if isinstance(raw, str) and raw:
        return _parse_candidate(raw, "raw_response")
    return None


# Order matters: ambiguous payloads resolve to the first location that matches.
CANDIDATE_STRATEGIES: tuple[CandidateStrategy, ...] = (
    from_response_result,
    from_response_message,
    from_agent_shaped_response,
    from_agent_shaped_envelope,
    from_raw_response,
)


def first_candidate(
    envelope: Any,
    strategies: Iterable[CandidateStrategy] = CANDIDATE_STRATEGIES,
) -> dict[str, Any] | str | None:
    for strategy in strategies:
        candidate = strategy(envelope)
        if isinstance(candidate, (dict, str)):
            return candidate
    return None


def unwrap_double_encoded(candidate: dict[str, Any] | str) -> dict[str, Any] | str:
    if not isinstance(candidate, dict):
        return candidate
    message = candidate.get("message")
    if not isinstance(message, str) or not message.strip().startswith("{"):
        return candidate
    inner = _parse_candidate(message, "candidate.message")
    if isinstance(inner, dict) and (_truthy(inner.get("intent")) or _truthy(inner.get("message"))):
        return inner
    return candidate


def fallback_text(envelope: Any) -> str:
    """Best free-text fragment of an envelope that carried no structured reply."""
    fragment: Any = None
    response = _inner_response(envelope)
    if response is not None:
        fragment = response.get("message")
        if not _truthy(fragment):
            result = response.get("result")
            fragment = result.get("text") if isinstance(result, dict) else None
    if not _truthy(fragment) and isinstance(envelope, str):
        fragment = envelope
    if not _truthy(fragment):
        return ""
    return fragment if isinstance(fragment, str) else _to_json_text(fragment)


def default_response(message: str = "") -> CanonicalResponse:
    return CanonicalResponse(message=message)


def failure_response() -> CanonicalResponse:
    return default_response(FAILURE_MESSAGE)


def _project_records(value: Any, record_type: type[RecordT]) -> tuple[RecordT, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    names = [item.name for item in fields(record_type)]  # type: ignore[arg-type]
    return tuple(
        record_type(**{name: _coerce_text(item.get(name)) for name in names})
        for item in value
        if isinstance(item, dict)
    )


def _project_organ_info(value: Any) -> OrganDonationInfo:
    if not isinstance(value, dict):
        return OrganDonationInfo()
    return OrganDonationInfo(
        awareness=_coerce_text(value.get("awareness")),
        pledge_process=_coerce_text(value.get("pledge_process")),
        official_link=_coerce_text(value.get("official_link")),
    )


def project_candidate(candidate: dict[str, Any]) -> CanonicalResponse:
    message = candidate.get("message")
    if not _truthy(message):
        message = candidate.get("text")
    intent = candidate.get("intent")
    return CanonicalResponse(
        message=_coerce_text(message),
        intent=_coerce_text(intent) if _truthy(intent) else DEFAULT_INTENT,
        emergency_numbers=_project_records(candidate.get("emergency_numbers"), EmergencyContact),
        hospitals=_project_records(candidate.get("hospitals"), Hospital),
        donors=_project_records(candidate.get("donors"), Donor),
        schemes=_project_records(candidate.get("schemes"), Scheme),
        organ_donation_info=_project_organ_info(candidate.get("organ_donation_info")),
        consent_required=_coerce_bool(candidate.get("consent_required")),
        follow_up=_coerce_text(candidate.get("follow_up")),
    )


def normalize_agent_response(envelope: Any) -> CanonicalResponse:
    if isinstance(envelope, CanonicalResponse):
        return envelope
    if not _truthy(envelope):
        return default_response()

    if isinstance(envelope, str):
        decoded = _parse_candidate(envelope, "envelope")
        if isinstance(decoded, dict):
            envelope = decoded

    candidate = first_candidate(envelope)
    if candidate is None:
        return default_response(fallback_text(envelope))

    candidate = unwrap_double_encoded(candidate)

    if isinstance(candidate, str):
        parsed = _parse_candidate(candidate, "candidate")
        if not isinstance(parsed, dict):
            return default_response(candidate)
        candidate = parsed

    return project_candidate(candidate)
