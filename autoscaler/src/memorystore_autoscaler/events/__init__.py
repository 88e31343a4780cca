#!/usr/bin/env python3
"""
Downstream scaling events
"""

from .base import EventType, ScalingEvent
from .publisher import DownstreamPublisher, create_redis_client

__all__ = [
    "EventType",
    "ScalingEvent",
    "DownstreamPublisher",
    "create_redis_client",
]
