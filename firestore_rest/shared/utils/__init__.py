"""Shared utilities (datetime handling)."""

from firestore_rest.shared.utils.datetime import (
    ensure_utc,
    format_rfc3339,
    parse_rfc3339,
)

__all__ = ["ensure_utc", "format_rfc3339", "parse_rfc3339"]
