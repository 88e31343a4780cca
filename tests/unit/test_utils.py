#!/usr/bin/env python3
"""
Tests for time helpers
"""

from datetime import datetime, timedelta, timezone

import pytest

from memorystore_autoscaler.core.utils import (
    convert_millisec_to_human_readable,
    datetime_to_millis,
    millis_to_datetime,
    parse_rfc3339_millis,
)


@pytest.mark.parametrize("millis,expected", [
    (1500, "1.5 Sec"),
    (90_000, "1.5 Min"),
    (5_400_000, "1.5 Hrs"),
    (129_600_000, "1.5 Days"),
])
def test_human_readable_durations(millis, expected):
    assert convert_millisec_to_human_readable(millis) == expected


@pytest.mark.parametrize("value,expected", [
    ("2024-01-01T12:00:00Z", 1_704_110_400_000),
    ("2024-01-01T12:00:00.5Z", 1_704_110_400_500),
    ("2024-01-01T12:00:00.999999999Z", 1_704_110_400_999),
    ("2024-01-01T14:00:00+02:00", 1_704_110_400_000),
    ("", 0),
    (None, 0),
    ("yesterday", 0),
])
def test_parse_rfc3339(value, expected):
    assert parse_rfc3339_millis(value) == expected


def test_millis_datetime_conversion():
    value = datetime(2024, 1, 1, 12, 0, 0, 250_000, tzinfo=timezone.utc)
    assert datetime_to_millis(value) == 1_704_110_400_250
    assert millis_to_datetime(1_704_110_400_250) == value


def test_zero_and_none():
    assert millis_to_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert millis_to_datetime(None) is None
    assert datetime_to_millis(None) == 0


def test_other_timezones():
    value = datetime(2024, 1, 1, 13, 0, 0, tzinfo=timezone(timedelta(hours=1)))
    assert datetime_to_millis(value) == 1_704_110_400_000
