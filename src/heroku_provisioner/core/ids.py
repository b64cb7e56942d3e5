"""Composite identifiers for association resources.

Association resources (an app feature, an app collaborator) have no single
platform ID of their own, so they are identified by two component IDs joined
with a colon, e.g. ``"my-app:preboot"``.
"""

from __future__ import annotations

COMPOSITE_SEPARATOR = ":"


class InvalidIdentifierError(ValueError):
    """Raised when a composite identifier cannot be split into two parts."""


def build_composite_id(first: str, second: str) -> str:
    """Join two component identifiers into ``first:second``."""
    if COMPOSITE_SEPARATOR in first:
        raise InvalidIdentifierError(
            f"Composite ID component must not contain {COMPOSITE_SEPARATOR!r}: {first!r}"
        )
    return f"{first}{COMPOSITE_SEPARATOR}{second}"


def parse_composite_id(composite_id: str) -> tuple[str, str]:
    """Split ``first:second`` on the first colon only."""
    first, sep, second = composite_id.partition(COMPOSITE_SEPARATOR)
    if not sep:
        raise InvalidIdentifierError(f"Not a composite ID: {composite_id!r}")
    return first, second
