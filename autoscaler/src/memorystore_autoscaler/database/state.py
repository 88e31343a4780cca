#!/usr/bin/env python3
"""
Scaling state storage interface and the field layout shared by the backends
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Protocol

from memorystore_autoscaler.models import ClusterRequest, ScalingState
from memorystore_autoscaler.core.utils import datetime_to_millis, millis_to_datetime

STATE_TABLE_NAME = "memorystoreClusterAutoscaler"

TIMESTAMP = "timestamp"
STRING = "string"
NUMBER = "number"


@dataclass(frozen=True)
class StateField:
    """One persisted field: attribute name on ScalingState, storage name and type"""
    attr: str
    name: str
    type: str


STATE_FIELDS: List[StateField] = [
    StateField("last_scaling_timestamp", "lastScalingTimestamp", TIMESTAMP),
    StateField("created_on", "createdOn", TIMESTAMP),
    StateField("updated_on", "updatedOn", TIMESTAMP),
    StateField("last_scaling_complete_timestamp", "lastScalingCompleteTimestamp", TIMESTAMP),
    StateField("scaling_operation_id", "scalingOperationId", STRING),
    StateField("scaling_requested_size", "scalingRequestedSize", NUMBER),
    StateField("scaling_previous_size", "scalingPreviousSize", NUMBER),
    StateField("scaling_method", "scalingMethod", STRING),
]


class StateStore(Protocol):
    """Persists one ScalingState record per cluster"""

    @property
    def now(self) -> int:
        ...

    @property
    def cluster_key(self) -> str:
        ...

    def init(self) -> ScalingState:
        ...

    def get(self) -> ScalingState:
        ...

    def update_state(self, state: ScalingState) -> None:
        ...

    def close(self) -> None:
        ...


def get_cluster_key(cluster: ClusterRequest) -> str:
    return f"projects/{cluster.project_id}/regions/{cluster.region_id}/clusters/{cluster.cluster_id}"


def get_state_project_id(cluster: ClusterRequest) -> str:
    return cluster.state_project_id if cluster.state_project_id is not None else cluster.project_id


def initial_state(now: int) -> ScalingState:
    return ScalingState(
        created_on=now,
        updated_on=now,
        last_scaling_timestamp=0,
        last_scaling_complete_timestamp=0,
    )


def state_to_record(state: ScalingState,
                    encode_timestamp: Callable[[Any], Any] = millis_to_datetime) -> Dict[str, Any]:
    """Map a ScalingState to storage names, converting timestamps with encode_timestamp"""
    record = {}
    for field in STATE_FIELDS:
        value = getattr(state, field.attr)
        if field.type == TIMESTAMP and value is not None:
            value = encode_timestamp(value)
        record[field.name] = value
    return record


def state_from_record(record: Mapping[str, Any]) -> ScalingState:
    """
    Map a stored record back to a ScalingState.

    Fields absent from the record default to 0 for timestamps and None
    otherwise. Stored datetimes become epoch milliseconds.
    """
    values = {}
    for field in STATE_FIELDS:
        if field.name in record:
            value = record[field.name]
            if isinstance(value, datetime):
                value = datetime_to_millis(value)
        else:
            value = 0 if field.type == TIMESTAMP else None
        values[field.attr] = value
    return ScalingState(**values)
