#!/usr/bin/env python3
"""
Time helpers shared by the scaler components
"""

import re
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

_FRACTION = re.compile(r"\.(\d+)")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_millis() -> int:
    """Current wall clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def convert_millisec_to_human_readable(millisec: float) -> str:
    """Render a duration as seconds, minutes, hours or days with one decimal"""
    seconds = millisec / 1000
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 60:
        return f"{seconds:.1f} Sec"
    if minutes < 60:
        return f"{minutes:.1f} Min"
    if hours < 24:
        return f"{hours:.1f} Hrs"
    return f"{days:.1f} Days"


def parse_rfc3339_millis(value: Optional[str]) -> int:
    """
    Convert an RFC3339 timestamp (as returned by the operations API) to epoch
    milliseconds. Nanosecond fractions are truncated. Returns 0 when the value
    is missing or cannot be parsed.
    """
    if not value or not isinstance(value, str):
        return 0

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return 0

    return datetime_to_millis(parsed)


def millis_to_datetime(millis: Optional[int]) -> Optional[datetime]:
    """Epoch milliseconds to an aware UTC datetime; None maps to None"""
    if millis is None:
        return None
    return _EPOCH + timedelta(milliseconds=millis)


def datetime_to_millis(value: Optional[datetime]) -> int:
    """Aware or naive (assumed UTC) datetime to epoch milliseconds; None maps to 0"""
    if value is None:
        return 0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return delta.days * 86_400_000 + delta.seconds * 1000 + delta.microseconds // 1000
