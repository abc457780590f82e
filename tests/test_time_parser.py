"""Tests for clock-time extraction and parsing."""

from datetime import time

import pytest

from spotter.errors import InvalidTime
from spotter.time_parser import extract_time_token, find_time_of_day, parse_time_of_day


@pytest.mark.parametrize(
    "token, expected",
    [
        ("noon", time(12, 0)),
        ("midnight", time(0, 0)),
        ("18:30", time(18, 30)),
        ("0:05", time(0, 5)),
        ("7", time(7, 0)),
        ("23", time(23, 0)),
        ("7pm", time(19, 0)),
        ("7:15 pm", time(19, 15)),
        ("12pm", time(12, 0)),
        ("12am", time(0, 0)),
        ("6AM", time(6, 0)),
    ],
)
def test_parse_time_of_day(token, expected):
    assert parse_time_of_day(token) == expected


@pytest.mark.parametrize("token", ["25", "13pm", "0am", "7:75", "soon", ""])
def test_parse_time_of_day_rejects_garbage(token):
    with pytest.raises(InvalidTime):
        parse_time_of_day(token)


def test_extract_prefers_am_pm_over_clock_time():
    """Qualified times outrank an earlier bare HH:MM."""
    assert extract_time_token("meet at 14:00 or maybe 3pm") == "3pm"


def test_extract_prefers_clock_time_over_bare_number():
    assert extract_time_token("3 sets of squats at 18:30") == "18:30"


def test_extract_named_times():
    assert extract_time_token("lunch protein at noon") == "noon"
    assert extract_time_token("creatine at midnight") == "midnight"


def test_extract_bare_number_fallback():
    # Known heuristic: a lone quantity is read as an hour
    assert extract_time_token("do 3 sets") == "3"


def test_extract_returns_none_without_time():
    assert extract_time_token("remind me to stretch") is None


def test_find_time_of_day_treats_invalid_token_as_absent():
    assert find_time_of_day("gym at 25") is None
    assert find_time_of_day("gym at 6:45am") == time(6, 45)
