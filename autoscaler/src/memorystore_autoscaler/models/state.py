#!/usr/bin/env python3
"""
Persisted scaling state and long-running operation handles
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class ScalingState:
    """
    Scaling state of one cluster. Timestamps are epoch milliseconds.

    scaling_operation_id is set exactly while a resize is in flight; when it
    is None the requested size, previous size and method are None as well.
    """
    last_scaling_timestamp: int = 0
    last_scaling_complete_timestamp: Optional[int] = 0
    scaling_operation_id: Optional[str] = None
    scaling_requested_size: Optional[int] = None
    scaling_previous_size: Optional[int] = None
    scaling_method: Optional[str] = None
    created_on: int = 0
    updated_on: int = 0


@dataclass
class OperationMetadata:
    """Timing details of a long-running operation, epoch milliseconds (0 when absent)"""
    create_time: int = 0
    end_time: int = 0
    requested_cancellation: bool = False


@dataclass
class Operation:
    """Status of a long-running resize operation"""
    name: str
    done: bool = False
    error: Optional[Dict[str, Any]] = None
    metadata: Optional[OperationMetadata] = None
