"""Field coercion shared by the function request bodies."""

from __future__ import annotations

import json
from typing import Any


def coerce_text(value: Any) -> Any:
    """Accept JSON numbers and booleans where text is expected.

    Falsy scalars such as ``0`` or ``false`` count as absent. Objects and
    arrays are passed through so validation rejects them.
    """

    if isinstance(value, (bool, int, float)):
        return json.dumps(value) if value else None
    return value


__all__ = ["coerce_text"]
