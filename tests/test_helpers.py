import pytest

from app.utils.helpers import to_bool, to_int_or_none
from app.utils.validators import clean_display_name, clean_str


@pytest.mark.parametrize("raw, expected", [
    ("7", 7), (7, 7), (" 12 ", 12), ("0", None), (-3, None), ("", None), (None, None), ("abc", None), (True, None),
])
def test_to_int_or_none(raw, expected):
    assert to_int_or_none(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    (True, True), ("true", True), ("1", True), ("on", True), ("false", False), ("", False), (None, False), (0, False),
])
def test_to_bool(raw, expected):
    assert to_bool(raw) is expected


def test_clean_str_collapses_and_trims():
    assert clean_str("  a \n\t b  ") == "a b"
    assert clean_str("   ") is None
    assert clean_str("abcdef", max_len=3) == "abc"


def test_display_name_is_capped():
    assert len(clean_display_name("x" * 500)) == 120
