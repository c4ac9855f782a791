"""JSON Body Decoding — tests for comment skipping, depth guard and field matching.

Tests cover:
    - Line and block comments skipped, comment-like text inside strings kept
    - Nesting beyond max_depth rejected before decoding
    - Malformed JSON, NaN literals and bad UTF-8 raise InvalidBodyError
    - Field names matched case-insensitively through nested models/dataclasses
    - validate_body produces typed values and maps validation errors
"""

import pytest
from pydantic import BaseModel, Field

from dynamic_api.core.errors import InvalidBodyError
from dynamic_api.core.json_body import (
    decode_json, match_field_names, strip_comments, validate_body,
)
from tests.sample_clients import Member, MemberStatus, Order, OrderLine


# ─── strip_comments / decode_json ────────────────────────────────

def test_line_and_block_comments_skipped():
    raw = b"""
    {
        // who
        "full_name": "Ada", /* years */ "age": 36
    }
    """
    assert decode_json(raw, 32) == {"full_name": "Ada", "age": 36}


def test_comment_markers_inside_strings_kept():
    raw = b'{"url": "http://example.com/*x*/", "note": "a // b"}'
    assert decode_json(raw, 32) == {
        "url": "http://example.com/*x*/", "note": "a // b",
    }


def test_escaped_quote_does_not_end_string():
    raw = b'{"quote": "say \\"hi\\" // not a comment"}'
    assert decode_json(raw, 32) == {"quote": 'say "hi" // not a comment'}


def test_unterminated_block_comment_rejected():
    with pytest.raises(InvalidBodyError):
        decode_json(b'{"a": 1 /* never closed', 32)


def test_depth_at_limit_accepted():
    raw = ("[" * 32 + "]" * 32).encode()
    assert decode_json(raw, 32) is not None


def test_depth_beyond_limit_rejected():
    raw = ("[" * 33 + "]" * 33).encode()
    with pytest.raises(InvalidBodyError) as exc_info:
        decode_json(raw, 32)
    assert "depth" in exc_info.value.message


def test_brackets_inside_strings_do_not_count_toward_depth():
    assert strip_comments('{"x": "[[[[[["}', 2) == '{"x": "[[[[[["}'


def test_malformed_json_rejected():
    with pytest.raises(InvalidBodyError) as exc_info:
        decode_json(b'{"a": }', 32)
    assert exc_info.value.http_status == 400


def test_trailing_comma_rejected():
    with pytest.raises(InvalidBodyError):
        decode_json(b'{"a": 1,}', 32)


def test_nan_literal_rejected():
    with pytest.raises(InvalidBodyError):
        decode_json(b'{"a": NaN}', 32)


def test_invalid_utf8_rejected():
    with pytest.raises(InvalidBodyError):
        decode_json(b'{"a": "\xff"}', 32)


def test_comment_only_body_is_none():
    assert decode_json(b"// nothing here", 32) is None


def test_utf8_bom_accepted():
    assert decode_json(b'\xef\xbb\xbf{"a": 1}', 32) == {"a": 1}


# ─── match_field_names ──────────────────────────────────────────

def test_model_fields_matched_ignoring_case():
    data = {"FULL_NAME": "Ada", "Age": 36, "unknown": 1}
    assert match_field_names(data, Member) == {
        "full_name": "Ada", "age": 36, "unknown": 1,
    }


def test_exact_key_wins_over_case_variant():
    data = {"AGE": 1, "age": 2}
    assert match_field_names(data, Member)["age"] == 2


def test_nested_dataclasses_matched():
    data = {"Customer": "Bo", "LINES": [{"SKU": "x-1", "Quantity": 2}]}
    assert match_field_names(data, Order) == {
        "customer": "Bo", "lines": [{"sku": "x-1", "quantity": 2}],
    }


def test_aliases_matched():
    class Aliased(BaseModel):
        member_id: int = Field(alias="memberId")

    assert match_field_names({"MEMBERID": 3}, Aliased) == {"memberId": 3}


def test_lists_of_models_matched():
    data = [{"Full_Name": "Ada", "AGE": 1}]
    assert match_field_names(data, list[Member]) == [{"full_name": "Ada", "age": 1}]


# ─── validate_body ──────────────────────────────────────────────

def test_validate_body_builds_model():
    member = validate_body(
        {"fullName": "x", "FULL_NAME": "Ada", "age": "36", "status": "suspended"},
        Member,
    )
    assert member == Member(full_name="Ada", age=36, status=MemberStatus.SUSPENDED)


def test_validate_body_builds_dataclass():
    order = validate_body({"customer": "Bo", "lines": [{"sku": "a", "quantity": 1}]}, Order)
    assert order == Order(customer="Bo", lines=[OrderLine(sku="a", quantity=1)])


def test_validate_body_none_stays_none():
    assert validate_body(None, Member) is None


def test_validate_body_reports_field_errors():
    with pytest.raises(InvalidBodyError) as exc_info:
        validate_body({"full_name": "Ada", "age": "old"}, Member)
    assert "age" in exc_info.value.message
