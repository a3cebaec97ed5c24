"""
Tests for the generative-response text normalizer.
"""
import pytest

from services.model_text import extract_model_text, walk_leaves


def test_plain_string_is_returned_unchanged():
    assert extract_model_text("hello") == "hello"
    assert extract_model_text("") == ""


def test_none_yields_empty_string():
    assert extract_model_text(None) == ""


@pytest.mark.parametrize("key", ["summary", "text", "output_text"])
def test_direct_text_fields(key):
    assert extract_model_text({key: "the summary", "other": "ignored"}) == "the summary"


def test_summary_wins_over_text():
    assert extract_model_text({"text": "second", "summary": "first"}) == "first"


def test_responses_output_shape_joins_fragments_with_blank_line():
    payload = {"output": [{"content": [{"text": "a"}, {"text": "b"}]}]}
    assert extract_model_text(payload) == "a\n\nb"


def test_responses_output_uses_element_text_when_no_content():
    payload = {"output": [{"text": "first"}, {"content": [{"type": "output_text", "text": "second"}]}]}
    assert extract_model_text(payload) == "first\n\nsecond"


def test_gemini_candidates_parts():
    payload = {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": "Summary"}, {"text": "Risks"}]}},
            {"content": {"parts": [{"text": "ignored second candidate"}]}},
        ]
    }
    assert extract_model_text(payload) == "Summary\n\nRisks"


def test_candidates_fall_back_to_output_text_field():
    assert extract_model_text({"candidates": [{"outputText": "plain"}]}) == "plain"
    assert extract_model_text({"candidates": [{"message": "from message"}]}) == "from message"


def test_choices_message_content_string():
    assert extract_model_text({"choices": [{"message": {"content": "hi"}}]}) == "hi"


def test_choices_legacy_text_and_message_string():
    assert extract_model_text({"choices": [{"text": "legacy"}]}) == "legacy"
    assert extract_model_text({"choices": [{"message": "direct"}]}) == "direct"


def test_choices_content_array_joined_by_newline():
    payload = {"choices": [{"message": {"content": [{"type": "text", "text": "x"}, "y"]}}]}
    assert extract_model_text(payload) == "x\ny"


def test_unknown_shape_walks_leaves_in_order():
    payload = {"data": {"title": "Report", "score": 3, "ok": True, "nested": {"deep": "kept"}}}
    assert extract_model_text(payload) == "Report\n\n3\n\ntrue\n\nkept"


def test_tree_walk_stops_at_depth_three():
    payload = {"a": {"b": {"c": "three", "d": {"e": "four"}}}}
    assert walk_leaves(payload) == ["three"]
    assert extract_model_text(payload) == "three"


def test_object_without_leaves_serializes_as_json():
    assert extract_model_text({}) == "{}"
    assert extract_model_text({"a": [None, {}]}) == '{"a": [null, {}]}'


def test_empty_text_field_is_returned_as_is():
    assert extract_model_text({"summary": ""}) == ""
    assert extract_model_text({"text": "", "choices": [{"message": {"content": "unused"}}]}) == ""


def test_non_string_text_field_falls_through_to_later_parsers():
    payload = {"summary": None, "choices": [{"message": {"content": "from choices"}}]}
    assert extract_model_text(payload) == "from choices"


def test_malformed_arrays_never_raise():
    for payload in (
        {"output": "not a list"},
        {"candidates": []},
        {"candidates": ["text"]},
        {"choices": [None]},
        {"choices": [{"message": {"content": 5}}]},
        [1, "two", {"three": 3}],
        42,
        object(),
    ):
        assert isinstance(extract_model_text(payload), str)


def test_self_referencing_payload_terminates():
    payload = {"name": "loop"}
    payload["self"] = payload
    assert extract_model_text(payload) == "loop\n\nloop\n\nloop"
