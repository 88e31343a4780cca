#!/usr/bin/env python3
"""
Shared fixtures and fakes for the scaler unit tests
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest
from prometheus_client import CollectorRegistry

from memorystore_autoscaler.config import Settings
from memorystore_autoscaler.core.counters import ScalerCounters
from memorystore_autoscaler.core.scaler import Scaler
from memorystore_autoscaler.models import ClusterRequest, ScalingState

NOW = 1_700_000_000_000

# Fires no built-in rule and leaves plenty of memory headroom
NEUTRAL_METRICS = {
    "cpu_maximum_utilization": 65,
    "cpu_average_utilization": 55,
    "memory_maximum_utilization": 20,
    "memory_average_utilization": 55,
    "maximum_evicted_keys": 0,
    "average_evicted_keys": 0,
}


def build_cluster(metrics: Optional[Dict[str, Any]] = None, **overrides) -> ClusterRequest:
    """Cluster request with neutral metrics; metrics entries override the defaults"""
    values = dict(NEUTRAL_METRICS)
    values.update(metrics or {})
    fields = {
        "project_id": "my-project",
        "region_id": "us-central1",
        "cluster_id": "my-cluster",
        "current_size": 5,
        "min_size": 3,
        "max_size": 10,
        "step_size": 1,
        "metrics": [{"name": name, "value": value} for name, value in values.items()],
    }
    fields.update(overrides)
    return ClusterRequest(**fields)


class InMemoryStateStore:
    """StateStore keeping a single record in memory and recording every write"""

    cluster_key = "projects/my-project/regions/us-central1/clusters/my-cluster"

    def __init__(self, state: Optional[ScalingState] = None, now: int = NOW):
        self.state = state
        self.now = now
        self.updates: List[ScalingState] = []
        self.closed = False

    def init(self) -> ScalingState:
        self.state = ScalingState(created_on=self.now, updated_on=self.now)
        return self.state

    def get(self) -> ScalingState:
        if self.state is None:
            return self.init()
        return self.state

    def update_state(self, state: ScalingState) -> None:
        self.updates.append(state)
        self.state = replace(state, created_on=self.state.created_on if self.state else 0, updated_on=self.now)

    def close(self) -> None:
        self.closed = True


def sample(counters: ScalerCounters, name: str, **labels) -> Optional[float]:
    """Current value of a counter sample, None when the label set was never used"""
    return counters.registry.get_sample_value(name, labels or None)


@pytest.fixture
def make_cluster():
    return build_cluster


@pytest.fixture
def counters():
    return ScalerCounters(registry=CollectorRegistry())


@pytest.fixture
def store():
    return InMemoryStateStore()


@pytest.fixture
def cluster_api():
    api = Mock()
    api.resize.return_value = "projects/my-project/locations/us-central1/operations/op-1"
    return api


@pytest.fixture
def publisher():
    return Mock()


@pytest.fixture
def scaler(counters, cluster_api, publisher, store):
    return Scaler(
        settings=Settings(),
        counters=counters,
        cluster_api=cluster_api,
        publisher=publisher,
        state_store_factory=lambda cluster: store,
        clock=lambda: NOW,
    )
