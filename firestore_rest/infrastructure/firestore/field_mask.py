"""Field-mask composition for partial (merge) updates.

Firestore parses a bare numeric path segment (``a.3.b``) as something other
than a map key, so numeric segments are wrapped in back-ticks
(``a.`3`.b``) before they go into updateMask.fieldPaths.
"""

import re
from collections.abc import Iterable
from typing import Any

from firestore_rest.domain.exceptions import EncodingError

_NUMERIC_SEGMENT_RE = re.compile(r"[0-9]+")
_QUOTED_SEGMENT_RE = re.compile(r"`(?:[^`\\]|\\.)*`")


def _split_segments(field_path: str) -> list[str]:
    """Split on dots outside back-tick quoted segments."""
    segments: list[str] = []
    current: list[str] = []
    quoted = False
    escaped = False
    for ch in field_path:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\" and quoted:
            current.append(ch)
            escaped = True
        elif ch == "`":
            current.append(ch)
            quoted = not quoted
        elif ch == "." and not quoted:
            segments.append("".join(current))
            current = []
        else:
            current.append(ch)
    if quoted:
        raise EncodingError.invalid_field_path(field_path, "unbalanced back-tick")
    segments.append("".join(current))
    return segments


def escape_field_path(key: Any) -> str:
    """Back-tick every purely numeric segment of a dotted field path.

    Raises:
        EncodingError: on an empty path, an empty segment, or a stray back-tick.
    """
    field_path = str(key)
    if not field_path:
        raise EncodingError.invalid_field_path(field_path, "empty field path")
    escaped = []
    for segment in _split_segments(field_path):
        if not segment:
            raise EncodingError.invalid_field_path(field_path, "empty path segment")
        if "`" in segment:
            if not _QUOTED_SEGMENT_RE.fullmatch(segment):
                raise EncodingError.invalid_field_path(
                    field_path, f"malformed quoted segment {segment!r}"
                )
            escaped.append(segment)
        elif _NUMERIC_SEGMENT_RE.fullmatch(segment):
            escaped.append(f"`{segment}`")
        else:
            escaped.append(segment)
    return ".".join(escaped)


def build_field_mask(keys: Iterable[Any]) -> list[str]:
    """Return updateMask.fieldPaths for the given top-level keys, in input order.

    Duplicates are kept; deduplication is the caller's job.
    """
    return [escape_field_path(key) for key in keys]
