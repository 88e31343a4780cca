#!/usr/bin/env python3
"""
Operation reconciliation
Folds the outcome of a previously started resize operation back into the
persisted scaling state
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone

from memorystore_autoscaler.clients.cluster_api import ClusterControlClient
from memorystore_autoscaler.core.counters import ScalerCounters
from memorystore_autoscaler.core.logging_config import get_cluster_logger
from memorystore_autoscaler.database.state import StateStore
from memorystore_autoscaler.exceptions import ConfigurationError, OperationStatusError
from memorystore_autoscaler.models import ClusterRequest, ScalingState

logger = logging.getLogger(__name__)


def _iso(millis: int) -> str:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).isoformat()


def clear_operation(state: ScalingState, **changes) -> ScalingState:
    """Copy of the state with the in-flight operation fields cleared"""
    return replace(
        state,
        scaling_operation_id=None,
        scaling_requested_size=None,
        scaling_previous_size=None,
        scaling_method=None,
        **changes
    )


class OperationReconciler:
    """
    Reconciles the stored in-flight operation of a cluster.

    Transitions, given a stored operation id:
      - status fetch fails: assume it completed (success counters, complete
        timestamp = start timestamp)
      - not done: state unchanged
      - done with error: operation cleared, both timestamps reset to 0,
        failure counter
      - done: complete timestamp from the operation end time, success and
        duration counters

    The resulting state is always written back before returning.
    """

    def __init__(self, cluster_api: ClusterControlClient, counters: ScalerCounters):
        self.cluster_api = cluster_api
        self.counters = counters

    def read_and_reconcile(self, cluster: ClusterRequest, store: StateStore) -> ScalingState:
        saved = store.get()

        if saved.scaling_operation_id:
            saved = self.reconcile(cluster, saved)

        store.update_state(saved)
        return saved

    def reconcile(self, cluster: ClusterRequest, saved: ScalingState) -> ScalingState:
        log = get_cluster_logger(logger, cluster)
        try:
            operation = self.cluster_api.get_operation(saved.scaling_operation_id, cluster.engine)
            if operation is None:
                raise OperationStatusError(f"GetOperation({saved.scaling_operation_id}) returned no results")
            if operation.metadata is None:
                raise OperationStatusError(
                    f"GetOperation({saved.scaling_operation_id}) could not decode OperationMetadata"
                )
        except ConfigurationError:
            raise
        except Exception as e:
            log.error(
                f"Failed to retrieve state of operation, assume completed. "
                f"ID: {saved.scaling_operation_id}: {e}"
            )
            return self._resolve_success(cluster, saved, saved.last_scaling_timestamp)

        metadata = operation.metadata
        started = _iso(metadata.create_time)

        if not operation.done:
            if metadata.requested_cancellation:
                log.info(
                    f"----- Last scaling request for {saved.scaling_requested_size} "
                    f"CANCEL REQUESTED. Started: {started}"
                )
            else:
                log.info(
                    f"----- Last scaling request for {saved.scaling_requested_size} "
                    f"IN PROGRESS. Started: {started}"
                )
            return saved

        completed = _iso(metadata.end_time)

        if operation.error:
            message = operation.error.get("message") if isinstance(operation.error, dict) else operation.error
            log.error(
                f"----- Last scaling request for size {saved.scaling_requested_size} FAILED: "
                f"{message}. Started: {started}, completed: {completed}"
            )
            self.counters.inc_scaling_failed(
                cluster,
                saved.scaling_requested_size or 0,
                saved.scaling_previous_size,
                saved.scaling_method,
            )
            return clear_operation(saved, last_scaling_timestamp=0, last_scaling_complete_timestamp=0)

        log.info(
            f"----- Last scaling request for size {saved.scaling_requested_size} SUCCEEDED. "
            f"Started: {started}, completed: {completed}"
        )
        if metadata.end_time:
            complete_timestamp = metadata.end_time
        else:
            log.warning(f"Failed to parse operation endTime for {saved.scaling_operation_id}")
            complete_timestamp = saved.last_scaling_timestamp
        return self._resolve_success(cluster, saved, complete_timestamp)

    def _resolve_success(self, cluster: ClusterRequest, saved: ScalingState, complete_timestamp: int) -> ScalingState:
        self.counters.record_scaling_duration(
            (complete_timestamp or 0) - (saved.last_scaling_timestamp or 0),
            cluster,
            saved.scaling_requested_size or 0,
            saved.scaling_previous_size,
            saved.scaling_method,
        )
        self.counters.inc_scaling_success(
            cluster,
            saved.scaling_requested_size or 0,
            saved.scaling_previous_size,
            saved.scaling_method,
        )
        return clear_operation(saved, last_scaling_complete_timestamp=complete_timestamp)
