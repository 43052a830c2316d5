from __future__ import annotations

import json

import pytest

from seva_agent_core import CanonicalResponse, normalize_agent_response
from seva_agent_core.normalizer import (
    CANDIDATE_STRATEGIES,
    fallback_text,
    first_candidate,
    from_agent_shaped_envelope,
    from_agent_shaped_response,
    from_raw_response,
    from_response_message,
    from_response_result,
    unwrap_double_encoded,
)

_LIST_FIELDS = ("emergency_numbers", "hospitals", "donors", "schemes")


def _deeply_nested(depth: int) -> dict:
    node: dict = {}
    for _ in range(depth):
        node = {"child": node}
    return node


def _assert_canonical(result: CanonicalResponse) -> None:
    payload = result.as_dict()
    assert isinstance(payload["message"], str)
    assert isinstance(payload["intent"], str) and payload["intent"]
    assert isinstance(payload["follow_up"], str)
    assert isinstance(payload["consent_required"], bool)
    for name in _LIST_FIELDS:
        assert isinstance(payload[name], list)
        for item in payload[name]:
            assert all(isinstance(value, str) for value in item.values())
    assert set(payload["organ_donation_info"]) == {"awareness", "pledge_process", "official_link"}
    assert all(isinstance(value, str) for value in payload["organ_donation_info"].values())


@pytest.mark.parametrize(
    "envelope",
    [
        None,
        {},
        "",
        0,
        42,
        True,
        [],
        ["unrelated", {"shape": 1}],
        {"success": True, "response": {"status": "ok"}},
        {"response": "plain string response"},
        {"response": {"result": 12, "message": None}},
        {"response": {"result": "{not valid json"}},
        {"response": {"message": "{also broken"}},
        {"raw_response": "[1, 2, 3]"},
        {"response": {"result": json.dumps(json.dumps({"intent": "schemes"}))}},
        {"intent": "hospital_finder", "hospitals": "should be a list", "organ_donation_info": "nope"},
        "[" * 5000,
        {"response": {"message": _deeply_nested(100_000)}},
        {"intent": "emergency", "follow_up": _deeply_nested(100_000)},
    ],
)
def test_normalizer_always_returns_canonical_shape(envelope):
    _assert_canonical(normalize_agent_response(envelope))


def test_missing_everything_yields_default():
    for envelope in (None, {}):
        result = normalize_agent_response(envelope)
        assert result == CanonicalResponse()
        assert result.message == ""
        assert result.intent == "general"


def test_double_encoded_message_is_unwrapped():
    envelope = {"response": {"message": json.dumps({"intent": "emergency", "message": "call now"})}}
    result = normalize_agent_response(envelope)
    assert result.intent == "emergency"
    assert result.message == "call now"


def test_malformed_result_falls_through_to_best_effort_text():
    result = normalize_agent_response({"response": {"result": "{not valid json", "message": "We are looking into it."}})
    assert result.message == "We are looking into it."
    assert result.intent == "general"
    assert result.hospitals == ()

    bare = normalize_agent_response({"response": {"result": "{not valid json"}})
    assert bare == CanonicalResponse()


def test_result_object_is_primary_source():
    envelope = {
        "success": True,
        "response": {
            "status": "success",
            "result": {
                "message": "Nearest blood donors found.",
                "intent": "blood_donor",
                "donors": [{"name": "Anil", "blood_group": "B+", "city": "Hyderabad", "distance": "1.2 km"}],
                "consent_required": True,
                "follow_up": "Shall I contact them?",
            },
            "message": "ignored when result is structured",
        },
    }
    result = normalize_agent_response(envelope)
    assert result.message == "Nearest blood donors found."
    assert result.intent == "blood_donor"
    assert result.donors[0].blood_group == "B+"
    assert result.consent_required is True
    assert result.follow_up == "Shall I contact them?"


def test_result_string_is_parsed():
    inner = {"intent": "organ_donation", "message": "Pledge today.", "organ_donation_info": {"awareness": "Saves lives"}}
    result = normalize_agent_response({"response": {"result": json.dumps(inner)}})
    assert result.intent == "organ_donation"
    assert result.organ_donation_info.awareness == "Saves lives"
    assert result.organ_donation_info.pledge_process == ""
    assert result.organ_donation_info.official_link == ""


def test_result_encoded_twice_is_decoded_as_a_string_candidate():
    inner = {"intent": "schemes", "message": "Two schemes match."}
    result = normalize_agent_response({"response": {"result": json.dumps(json.dumps(inner))}})
    assert result.intent == "schemes"
    assert result.message == "Two schemes match."


def test_agent_shaped_response_and_top_level_envelope():
    nested = normalize_agent_response({"response": {"intent": "emergency", "message": "Dial 108"}})
    assert nested.intent == "emergency"
    assert nested.message == "Dial 108"

    top_level = normalize_agent_response({"emergency_numbers": [{"name": "Police", "number": "100"}]})
    assert top_level.emergency_numbers[0].number == "100"
    assert top_level.emergency_numbers[0].description == ""


def test_raw_response_is_last_structured_source():
    result = normalize_agent_response({"raw_response": json.dumps({"intent": "hospital_finder", "text": "Two nearby"})})
    assert result.intent == "hospital_finder"
    assert result.message == "Two nearby"


def test_plain_text_envelopes_keep_their_text():
    assert normalize_agent_response({"response": {"message": "Hello there"}}).message == "Hello there"
    assert normalize_agent_response("Agent is warming up").message == "Agent is warming up"
    assert normalize_agent_response({"response": {"message": {"nested": 1}}}).message == '{"nested": 1}'


def test_string_envelope_with_json_object_is_decoded():
    envelope = json.dumps({"response": {"result": {"intent": "schemes", "message": "See schemes"}}})
    result = normalize_agent_response(envelope)
    assert result.intent == "schemes"
    assert result.message == "See schemes"


def test_list_fields_drop_non_sequences_and_non_object_items():
    result = normalize_agent_response(
        {
            "intent": "hospital_finder",
            "hospitals": {"name": "Not a list"},
            "schemes": [{"name": "PM-JAY", "link": None}, "stray", 7],
            "donors": ({"name": "Tuple donor", "distance": 3},),
        }
    )
    assert result.hospitals == ()
    assert len(result.schemes) == 1
    assert result.schemes[0].name == "PM-JAY"
    assert result.schemes[0].link == ""
    assert result.donors[0].distance == "3"


def test_scalar_coercion():
    result = normalize_agent_response(
        {"intent": "general", "message": "", "text": "from text", "consent_required": "false", "follow_up": 5}
    )
    assert result.message == "from text"
    assert result.consent_required is True
    assert result.follow_up == "5"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("false", True),
        ("no", True),
        ("0", True),
        ("maybe", True),
        ("", False),
        (1, True),
        (0, False),
        (None, False),
        ({}, True),
        (False, False),
    ],
)
def test_consent_required_uses_payload_truthiness(value, expected):
    result = normalize_agent_response({"intent": "x", "consent_required": value})
    assert result.consent_required is expected


def test_normalizing_canonical_output_is_idempotent():
    first = normalize_agent_response(
        {
            "response": {
                "result": {
                    "message": "Here are the emergency numbers.",
                    "intent": "emergency",
                    "emergency_numbers": [{"name": "Ambulance", "number": "108", "description": "24/7"}],
                    "hospitals": [{"name": "NIMS", "type": "Government"}],
                    "organ_donation_info": {"awareness": "a", "pledge_process": "b", "official_link": "c"},
                    "consent_required": True,
                    "follow_up": "Need directions?",
                }
            }
        }
    )
    assert normalize_agent_response(first.as_dict()) == first
    assert normalize_agent_response(first) is first


def test_cascade_precedence_prefers_result_over_message():
    envelope = {
        "response": {
            "result": {"intent": "from_result", "message": "result wins"},
            "message": json.dumps({"intent": "from_message", "message": "message loses"}),
        },
        "raw_response": json.dumps({"intent": "from_raw"}),
    }
    assert normalize_agent_response(envelope).intent == "from_result"


def test_strategies_report_misses_in_isolation():
    assert CANDIDATE_STRATEGIES[0] is from_response_result
    assert from_response_result({"response": {"result": "{bad"}}) is None
    assert from_response_result({"response": {"result": {}}}) == {}
    assert from_response_message({"response": {"message": "not json"}}) is None
    assert from_response_message({"response": {"message": '  {"intent": "x"}'}}) == {"intent": "x"}
    assert from_agent_shaped_response({"response": {"status": "ok"}}) is None
    assert from_agent_shaped_response({"response": {"emergency_numbers": []}}) == {"emergency_numbers": []}
    assert from_agent_shaped_envelope({"intent": ""}) is None
    assert from_agent_shaped_envelope("intent") is None
    assert from_raw_response({"raw_response": 5}) is None
    assert from_raw_response({"raw_response": "{broken"}) is None
    assert first_candidate({"nothing": "here"}) is None


def test_unwrap_only_replaces_agent_shaped_inner_objects():
    keep = {"message": json.dumps({"unrelated": True}), "intent": "general"}
    assert unwrap_double_encoded(keep) is keep
    broken = {"message": "{not json"}
    assert unwrap_double_encoded(broken) is broken
    assert unwrap_double_encoded({"message": json.dumps({"message": "inner"})}) == {"message": "inner"}


def test_fallback_text_prefers_response_message():
    assert fallback_text({"response": {"message": "first", "result": {"text": "second"}}}) == "first"
    assert fallback_text({"response": {"message": "", "result": {"text": "second"}}}) == "second"
    assert fallback_text({"response": {"message": 3.5}}) == "3.5"
    assert fallback_text(None) == ""
    assert fallback_text({"response": {"message": _deeply_nested(100_000)}}) == ""
