import pytest

from app.core.time_utils import format_seconds, parse_time


def test_format_seconds():
    assert format_seconds(754, "mm:ss") == "12:34"
    assert format_seconds(3725, "hh:mm:ss") == "1:02:05"
    assert format_seconds(725, "hh:mm:ss") == "12:05"
    assert format_seconds(42, "seconds") == "42"
    assert format_seconds(0, "mm:ss") == ""
    assert format_seconds(None) == ""


def test_format_rejects_unknown_format():
    with pytest.raises(ValueError):
        format_seconds(10, "days")


def test_parse_time():
    assert parse_time("12:34", "mm:ss") == 754
    assert parse_time("1:02:05", "hh:mm:ss") == 3725
    assert parse_time("90", "mm:ss") == 90
    assert parse_time("12.5", "seconds") == 12.5
    assert parse_time("  ", "mm:ss") == 0


def test_parse_time_rejects_bad_input():
    with pytest.raises(ValueError):
        parse_time("1:02:05", "mm:ss")
    with pytest.raises(ValueError):
        parse_time("ab:cd", "mm:ss")
