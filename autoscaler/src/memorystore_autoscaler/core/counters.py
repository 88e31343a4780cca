#!/usr/bin/env python3
"""
Scaler counters for Prometheus
Track scaling outcomes, denials and request handling
"""

import logging
import math
from typing import Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, push_to_gateway

from memorystore_autoscaler.models import ClusterRequest

logger = logging.getLogger(__name__)

# Attribute (label) names
CLUSTER_PROJECT_ID = "cluster_project_id"
CLUSTER_INSTANCE_ID = "cluster_instance_id"
SCALING_METHOD = "scaling_method"
SCALING_DIRECTION = "scaling_direction"
SCALING_DENIED_REASON = "scaling_denied_reason"

SCALING_LABELS = [CLUSTER_PROJECT_ID, CLUSTER_INSTANCE_ID, SCALING_METHOD, SCALING_DIRECTION]

# 25 exponential buckets: 0s, 11s, 24s, 40s ... 63 minutes
SCALING_DURATION_BUCKETS = [math.floor(60_000 * (2 ** (n / 4) - 1)) for n in range(25)]


def get_counter_attributes(cluster: ClusterRequest, requested_size: Optional[int],
                           previous_size: Optional[int] = None,
                           scaling_method: Optional[str] = None) -> Dict[str, str]:
    """
    Build the label set for a scaling counter.

    previous_size defaults to the cluster's current size and scaling_method to
    the cluster's method. The direction is empty when requested_size is falsy.
    """
    if previous_size is None:
        previous_size = cluster.current_size
    if scaling_method is None:
        scaling_method = cluster.scaling_method

    direction = ""
    if requested_size:
        if requested_size > previous_size:
            direction = "SCALE_UP"
        elif requested_size < previous_size:
            direction = "SCALE_DOWN"
        else:
            direction = "SCALE_SAME"

    return {
        CLUSTER_PROJECT_ID: cluster.project_id,
        CLUSTER_INSTANCE_ID: cluster.cluster_id,
        SCALING_METHOD: scaling_method or "",
        SCALING_DIRECTION: direction,
    }


class ScalerCounters:
    """Owns the scaler's Prometheus metrics and pushes them after each invocation"""

    def __init__(self, registry: Optional[CollectorRegistry] = None,
                 pushgateway_url: Optional[str] = None,
                 job_name: str = "memorystore-cluster-autoscaler-scaler"):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.pushgateway_url = pushgateway_url
        self.job_name = job_name
        self.flush_enabled = True

        self.scaling_success = Counter(
            'scaler_scaling_success',
            'The number of Memorystore Cluster scaling events that succeeded',
            SCALING_LABELS,
            registry=self.registry
        )
        self.scaling_denied = Counter(
            'scaler_scaling_denied',
            'The number of Memorystore Cluster scaling events denied',
            SCALING_LABELS + [SCALING_DENIED_REASON],
            registry=self.registry
        )
        self.scaling_failed = Counter(
            'scaler_scaling_failed',
            'The number of Memorystore Cluster scaling events that failed',
            SCALING_LABELS,
            registry=self.registry
        )
        self.requests_success = Counter(
            'scaler_requests_success',
            'The number of scaling request messages handled successfully',
            registry=self.registry
        )
        self.requests_failed = Counter(
            'scaler_requests_failed',
            'The number of scaling request messages that failed',
            registry=self.registry
        )
        self.scaling_duration = Histogram(
            'scaler_scaling_duration_ms',
            'The time taken to complete the scaling operation, in milliseconds',
            SCALING_LABELS,
            buckets=SCALING_DURATION_BUCKETS,
            registry=self.registry
        )

    def inc_scaling_success(self, cluster: ClusterRequest, requested_size: Optional[int],
                            previous_size: Optional[int] = None,
                            scaling_method: Optional[str] = None):
        self.scaling_success.labels(
            **get_counter_attributes(cluster, requested_size, previous_size, scaling_method)
        ).inc()

    def inc_scaling_failed(self, cluster: ClusterRequest, requested_size: Optional[int],
                           previous_size: Optional[int] = None,
                           scaling_method: Optional[str] = None):
        self.scaling_failed.labels(
            **get_counter_attributes(cluster, requested_size, previous_size, scaling_method)
        ).inc()

    def inc_scaling_denied(self, cluster: ClusterRequest, requested_size: Optional[int], reason: str):
        attributes = get_counter_attributes(cluster, requested_size)
        attributes[SCALING_DENIED_REASON] = reason
        self.scaling_denied.labels(**attributes).inc()

    def inc_requests_success(self):
        self.requests_success.inc()

    def inc_requests_failed(self):
        self.requests_failed.inc()

    def record_scaling_duration(self, duration_ms: float, cluster: ClusterRequest,
                                requested_size: Optional[int],
                                previous_size: Optional[int] = None,
                                scaling_method: Optional[str] = None):
        self.scaling_duration.labels(
            **get_counter_attributes(cluster, requested_size, previous_size, scaling_method)
        ).observe(math.floor(duration_ms))

    def set_flush_enabled(self, enabled: bool):
        """Batch callers disable per-request flushing and flush once at the end"""
        self.flush_enabled = enabled

    def try_flush(self) -> bool:
        """
        Push the registry to the Pushgateway, if one is configured.

        Returns:
            True when metrics were pushed
        """
        if not self.flush_enabled or not self.pushgateway_url:
            return False
        try:
            push_to_gateway(self.pushgateway_url, job=self.job_name, registry=self.registry)
            logger.debug(f"Pushed scaler counters to {self.pushgateway_url}")
            return True
        except Exception as e:
            logger.error(f"Failed to push counters to {self.pushgateway_url}: {e}")
            return False
