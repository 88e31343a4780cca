#!/usr/bin/env python3
"""
Scaling orchestration: reconcile any pending operation, compute a size
suggestion, then deny or resize and persist the new state
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, Optional

from memorystore_autoscaler.clients.cache import ClientCache
from memorystore_autoscaler.clients.cluster_api import ClusterControlClient
from memorystore_autoscaler.config import Settings, settings as default_settings
from memorystore_autoscaler.core.cooldown import within_cooldown_period
from memorystore_autoscaler.core.counters import ScalerCounters
from memorystore_autoscaler.core.logging_config import get_cluster_logger
from memorystore_autoscaler.core.reconciliation import OperationReconciler
from memorystore_autoscaler.core.scaling_methods import get_scaling_method
from memorystore_autoscaler.core.scaling_profiles import get_scaling_rule_set
from memorystore_autoscaler.core.utils import convert_millisec_to_human_readable
from memorystore_autoscaler.database import build_state_store
from memorystore_autoscaler.database.state import StateStore
from memorystore_autoscaler.events import DownstreamPublisher, EventType, create_redis_client
from memorystore_autoscaler.exceptions import ClusterApiError, ConfigurationError
from memorystore_autoscaler.models import ClusterRequest

logger = logging.getLogger(__name__)


class ScalingOutcome(str, Enum):
    """Result of one scaling request"""
    IN_PROGRESS = "IN_PROGRESS"
    MAX_SIZE = "MAX_SIZE"
    CURRENT_SIZE = "CURRENT_SIZE"
    WITHIN_COOLDOWN = "WITHIN_COOLDOWN"
    SCALING = "SCALING"
    SCALING_FAILURE = "SCALING_FAILURE"


class Scaler:
    """
    Composes the scaler: settings, client cache, counters, cluster control
    client, event publisher and state stores. Collaborators can be injected;
    otherwise they are built on first use from settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_cache: Optional[ClientCache] = None,
        counters: Optional[ScalerCounters] = None,
        cluster_api: Optional[ClusterControlClient] = None,
        publisher: Optional[DownstreamPublisher] = None,
        state_store_factory: Optional[Callable[[ClusterRequest], StateStore]] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        self.settings = settings or default_settings
        self.client_cache = client_cache or ClientCache()
        self.counters = counters or ScalerCounters(
            pushgateway_url=self.settings.prometheus.pushgateway_url,
            job_name=self.settings.prometheus.job_name
        )
        self._cluster_api = cluster_api
        self._publisher = publisher
        self._state_store_factory = state_store_factory
        self.clock = clock

    @property
    def cluster_api(self) -> ClusterControlClient:
        if self._cluster_api is None:
            api = self.settings.cluster_api
            self._cluster_api = self.client_cache.get(
                "cluster_api", (api.redis_base_url, api.valkey_base_url),
                lambda: ClusterControlClient(api)
            )
        return self._cluster_api

    @property
    def publisher(self) -> DownstreamPublisher:
        if self._publisher is None:
            redis_settings = self.settings.redis
            client = self.client_cache.get(
                "redis", (redis_settings.host, redis_settings.port, redis_settings.db),
                lambda: create_redis_client(redis_settings)
            )
            self._publisher = DownstreamPublisher(client=client, redis_settings=redis_settings)
        return self._publisher

    @property
    def reconciler(self) -> OperationReconciler:
        return OperationReconciler(self.cluster_api, self.counters)

    def state_store_for(self, cluster: ClusterRequest) -> StateStore:
        if self._state_store_factory is not None:
            return self._state_store_factory(cluster)
        return build_state_store(cluster, self.settings, self.client_cache, clock=self.clock)

    def get_suggested_size(self, cluster: ClusterRequest):
        """
        Resolve the rule set and method for the cluster and compute its size.

        Returns:
            (suggested size, cluster carrying any corrected profile/method name)
        """
        rule_set, cluster = get_scaling_rule_set(cluster)
        method, cluster = get_scaling_method(cluster)
        return method.calculate_size(cluster, rule_set), cluster

    def process_scaling_request(self, cluster: ClusterRequest, store: StateStore) -> ScalingOutcome:
        """
        Handle one scaling request for a cluster.

        Args:
            cluster: Cluster request from the poller
            store: State store of the cluster

        Returns:
            The denial reason, or whether the resize was started or failed
        """
        log = get_cluster_logger(logger, cluster)
        log.info("----- Scaling request received")

        saved = self.reconciler.read_and_reconcile(cluster, store)
        suggested_size, cluster = self.get_suggested_size(cluster)

        if saved.scaling_operation_id:
            log.info(
                f"----- has {cluster.current_size} {cluster.units}, no scaling possible "
                f"- last scaling operation ({saved.scaling_method} to {saved.scaling_requested_size}) "
                f"is still in progress. Started: "
                f"{convert_millisec_to_human_readable(store.now - (saved.last_scaling_timestamp or 0))} ago."
            )
            return self._deny(cluster, suggested_size, ScalingOutcome.IN_PROGRESS)

        if suggested_size == cluster.current_size and cluster.current_size == cluster.max_size:
            log.info(f"----- has {cluster.current_size} {cluster.units}, no scaling possible - at maxSize")
            return self._deny(cluster, suggested_size, ScalingOutcome.MAX_SIZE)

        if suggested_size == cluster.current_size:
            log.info(f"----- has {cluster.current_size} {cluster.units}, no scaling needed at the moment")
            return self._deny(cluster, suggested_size, ScalingOutcome.CURRENT_SIZE)

        if within_cooldown_period(cluster, suggested_size, saved, store.now):
            log.info(f"----- has {cluster.current_size} {cluster.units}, no scaling possible - within cooldown period")
            return self._deny(cluster, suggested_size, ScalingOutcome.WITHIN_COOLDOWN)

        try:
            operation_id = self.cluster_api.resize(cluster, suggested_size)
            if operation_id is None:
                raise ClusterApiError(f"Resize of {cluster.display_name} to {suggested_size} returned no operation")
            store.update_state(replace(
                saved,
                scaling_operation_id=operation_id,
                scaling_requested_size=suggested_size,
                last_scaling_timestamp=store.now,
                last_scaling_complete_timestamp=None,
                scaling_previous_size=cluster.current_size,
                scaling_method=cluster.scaling_method,
            ))
            outcome = ScalingOutcome.SCALING
        except ConfigurationError:
            raise
        except Exception as e:
            log.error(f"----- Unsuccessful scaling attempt: {e}")
            self.counters.inc_scaling_failed(cluster, suggested_size)
            outcome = ScalingOutcome.SCALING_FAILURE

        self.publisher.publish(EventType(outcome.value), cluster, suggested_size)
        return outcome

    def _deny(self, cluster: ClusterRequest, suggested_size: int, reason: ScalingOutcome) -> ScalingOutcome:
        self.counters.inc_scaling_denied(cluster, suggested_size, reason.value)
        return reason

    def handle(self, cluster: ClusterRequest) -> ScalingOutcome:
        """Build the cluster's state store, process the request and close the store"""
        store = self.state_store_for(cluster)
        try:
            return self.process_scaling_request(cluster, store)
        finally:
            store.close()


def process_scaling_request(cluster: ClusterRequest, store: StateStore,
                            scaler: Optional[Scaler] = None) -> ScalingOutcome:
    """Module-level entry point; uses a default Scaler when none is given"""
    return (scaler or Scaler()).process_scaling_request(cluster, store)
