"""Tests for field-mask composition (numeric segment escaping)."""

import pytest

from firestore_rest.domain.enums import EncodingErrorKind
from firestore_rest.domain.exceptions import EncodingError
from firestore_rest.infrastructure.firestore.field_mask import (
    build_field_mask,
    escape_field_path,
)


def test_numeric_segment_is_backtick_escaped() -> None:
    assert build_field_mask(["a.3.b"]) == ["a.`3`.b"]


def test_plain_path_is_unchanged() -> None:
    assert build_field_mask(["a.b"]) == ["a.b"]


def test_consecutive_numeric_segments_are_all_escaped() -> None:
    assert escape_field_path("a.1.2.b") == "a.`1`.`2`.b"


def test_numeric_top_level_key_is_escaped() -> None:
    """A bare numeric key would otherwise be rejected by the field-path parser."""
    assert escape_field_path("2024") == "`2024`"
    assert escape_field_path(7) == "`7`"


def test_already_quoted_segment_is_left_alone() -> None:
    assert escape_field_path("a.`3`.b") == "a.`3`.b"
    assert escape_field_path("`x.y`.z") == "`x.y`.z"


def test_mask_keeps_input_order_and_duplicates() -> None:
    assert build_field_mask(["b", "a", "b"]) == ["b", "a", "b"]


def test_mask_from_mapping_uses_keys() -> None:
    assert build_field_mask({"a": 1, "b": 2}) == ["a", "b"]


@pytest.mark.parametrize("path", ["", "a..b", ".a", "a.", "a.`b", "a.`b`c"])
def test_malformed_paths_raise_invalid_field_path(path: str) -> None:
    with pytest.raises(EncodingError) as exc_info:
        escape_field_path(path)
    assert exc_info.value.kind is EncodingErrorKind.INVALID_FIELD_PATH
    assert exc_info.value.details["field_path"] == path


def test_only_ascii_digit_segments_are_escaped() -> None:
    """A trailing newline or non-ASCII digits do not make a numeric segment."""
    assert escape_field_path("a.3\n.b") == "a.3\n.b"
    assert escape_field_path("a.٣.b") == "a.٣.b"
