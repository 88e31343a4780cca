#!/usr/bin/env python3
"""
Functionality shared by every size calculation method: rule analysis,
direction resolution, method-specific suggestion, then the memory and range
clamps
"""

import logging
import math
from typing import Optional

from memorystore_autoscaler.exceptions import MissingMetricError
from memorystore_autoscaler.models import ClusterRequest, Direction, EngineAnalysis, RuleSet
from memorystore_autoscaler.core.logging_config import get_cluster_logger
from memorystore_autoscaler.core.rules_engine import get_engine_analysis, get_scaling_direction

logger = logging.getLogger(__name__)

# Smallest shard count the platform accepts, whatever minSize says
CLUSTER_SIZE_MIN = 1

MAX_UTILIZATION_METRIC = "memory_maximum_utilization"


def get_scale_suggestion_message(cluster: ClusterRequest, suggested_size: int, direction: Direction) -> str:
    if direction == Direction.NONE:
        return "no change suggested"
    if suggested_size == cluster.current_size:
        return f"the suggested size is equal to the current size: {cluster.current_size} {cluster.units}"
    if suggested_size > cluster.max_size:
        return f"cannot scale to {suggested_size} because it is higher than MAX {cluster.max_size} {cluster.units}"
    if suggested_size < cluster.min_size:
        return f"Cannot scale to {suggested_size} because it is lower than MIN {cluster.min_size} {cluster.units}"
    return f"suggesting to scale from {cluster.current_size} to {suggested_size} {cluster.units}."


def get_max_memory_utilization(cluster: ClusterRequest) -> float:
    for metric in cluster.metrics:
        if metric.name == MAX_UTILIZATION_METRIC and metric.value is not None:
            return metric.value
    raise MissingMetricError(MAX_UTILIZATION_METRIC)


def ensure_min_free_memory(cluster: ClusterRequest, suggested_size: int, direction: Direction) -> int:
    """
    Raise the suggestion to the smallest size that keeps the configured
    share of memory free at the current keyspace size. This can turn a
    scale in into a scale out.
    """
    log = get_cluster_logger(logger, cluster)

    current_utilization = get_max_memory_utilization(cluster)
    used_shards = cluster.current_size * (current_utilization / 100)
    safe_size = math.ceil(used_shards / (1 - cluster.min_free_memory_percent / 100))

    suggested_usage_pct = round(used_shards / suggested_size * 100) if suggested_size else 0
    safe_usage_pct = round(used_shards / safe_size * 100) if safe_size else 0
    log.debug(
        f"\tCurrent memory utilization: {current_utilization:.2f}%; safe utilization is at "
        f"{safe_size} {cluster.units}: {safe_usage_pct}% (utilization at suggested "
        f"{suggested_size} {cluster.units}: {suggested_usage_pct}%)"
    )

    if suggested_size < safe_size:
        log.debug(
            f"\tModifying scale {direction.value} to {safe_size} {cluster.units} "
            f"(from {suggested_size} {cluster.units}) to ensure safe scaling "
            f"(used {used_shards:.2f} {cluster.units}, "
            f"minFreeMemoryPercent {cluster.min_free_memory_percent}%)"
        )
        return safe_size
    return suggested_size


def ensure_valid_cluster_size(cluster: ClusterRequest, suggested_size: int, direction: Direction) -> int:
    """Clamp to [min_size, max_size], then to CLUSTER_SIZE_MIN"""
    log = get_cluster_logger(logger, cluster)

    size = suggested_size
    if suggested_size > cluster.max_size:
        log.debug(f"\tClamping the suggested size of {suggested_size} {cluster.units} to configured maximum {cluster.max_size}")
        size = cluster.max_size
    elif suggested_size < cluster.min_size:
        log.debug(f"\tClamping the suggested size of {suggested_size} {cluster.units} to configured minimum {cluster.min_size}")
        size = cluster.min_size

    # No upper platform bound here; it depends on the replica count
    if size < CLUSTER_SIZE_MIN:
        size = CLUSTER_SIZE_MIN
        log.debug(
            f"\tModifying scale {direction.value} to {size} {cluster.units} "
            f"to ensure minimally valid {CLUSTER_SIZE_MIN} {cluster.units}"
        )
    return size


class ScalingMethod:
    """
    Base class for size calculation methods.

    Subclasses implement suggest_size; calculate_size runs the shared
    pipeline around it.
    """

    name: str = ""
    uses_rules: bool = True

    def suggest_size(self, cluster: ClusterRequest, direction: Direction,
                     analysis: Optional[EngineAnalysis]) -> int:
        raise NotImplementedError

    def calculate_size(self, cluster: ClusterRequest, rule_set: Optional[RuleSet]) -> int:
        return calculate_scaling_decision(
            cluster,
            rule_set if self.uses_rules else None,
            self.suggest_size,
        )


def calculate_scaling_decision(cluster: ClusterRequest, rule_set: Optional[RuleSet], suggest_fn) -> int:
    """
    Compute the final size suggestion for a cluster.

    Args:
        cluster: Cluster request
        rule_set: Rules used to pick a direction; None skips analysis and scales out
        suggest_fn: Method specific callable (cluster, direction, analysis) -> size

    Returns:
        Suggested size after the memory and range clamps
    """
    log = get_cluster_logger(logger, cluster)
    log.debug(f"---- {cluster.scaling_method} size suggestions ----")
    log.debug(f"\tMin={cluster.min_size}, Current={cluster.current_size}, Max={cluster.max_size} {cluster.units}")

    analysis = get_engine_analysis(cluster, rule_set)
    direction = get_scaling_direction(analysis) if analysis is not None else Direction.OUT
    log.debug(f"\tScaling direction: {direction.value}")

    suggested_size = suggest_fn(cluster, direction, analysis)
    log.debug(f"\tInitial scaling suggestion: {get_scale_suggestion_message(cluster, suggested_size, direction)}")

    safe_size = ensure_min_free_memory(cluster, suggested_size, direction)
    final_size = ensure_valid_cluster_size(cluster, safe_size, direction)

    log.debug(f"\tFinal scaling suggestion: {get_scale_suggestion_message(cluster, final_size, direction)}")
    return final_size
