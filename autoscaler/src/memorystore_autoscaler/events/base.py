#!/usr/bin/env python3
"""
Downstream events emitted after a scaling attempt
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Dict, Any
from dataclasses import dataclass, field
from enum import Enum

from memorystore_autoscaler.models import ClusterRequest


class EventType(str, Enum):
    """Event types published downstream"""
    SCALING = "SCALING"
    SCALING_FAILURE = "SCALING_FAILURE"


@dataclass
class ScalingEvent:
    """A scaling attempt, as published to downstream consumers"""

    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    source: str = "memorystore-cluster-autoscaler-scaler"

    @classmethod
    def for_cluster(cls, event_type: EventType, cluster: ClusterRequest, suggested_size: int) -> 'ScalingEvent':
        """Build the event payload describing a scaling attempt on the cluster"""
        return cls(
            event_type=event_type,
            data={
                "projectId": cluster.project_id,
                "regionId": cluster.region_id,
                "clusterId": cluster.cluster_id,
                "currentSize": cluster.current_size,
                "suggestedSize": suggested_size,
                "units": cluster.units,
                "metrics": [metric.model_dump(exclude_none=True) for metric in cluster.metrics],
            },
        )

    def to_stream_fields(self) -> Dict[str, str]:
        """Flat string fields for a Redis stream entry"""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
            "data": json.dumps(self.data, default=str),
        }
