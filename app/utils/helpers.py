from typing import Any, Optional

def to_int_or_none(value: Any) -> Optional[int]:
    """Positive int from a form/JSON value; anything else (blank, 0, junk) -> None."""
    if isinstance(value, bool):
        return None
    try:
        v = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return v if v > 0 else None

def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")
