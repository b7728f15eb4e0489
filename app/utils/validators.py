import re

def clean_str(val: str | None, max_len: int = 255) -> str | None:
    """
    Collapse whitespace, trim, enforce max length. Returns None if empty after cleaning.
    """
    if val is None:
        return None
    s = re.sub(r"\s+", " ", str(val)).strip()
    if not s:
        return None
    return s[:max_len]

def clean_display_name(val: str | None) -> str | None:
    """Display names are shown in a dropdown and the leaderboard; keep them short."""
    return clean_str(val, max_len=120)
