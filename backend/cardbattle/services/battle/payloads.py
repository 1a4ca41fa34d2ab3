from typing import Any, Dict, Optional


def as_dict(data) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}


def parse_int(value) -> Optional[int]:
    """Ids and indexes arrive as ints or numeric strings; anything else is None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_positive_int(value) -> Optional[int]:
    parsed = parse_int(value)
    return parsed if parsed is not None and parsed > 0 else None
