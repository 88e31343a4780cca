#!/usr/bin/env python3
"""
Linear scaling method.

Sizes the cluster in proportion to how far each scaling metric is from the
threshold of the rule that matched it:

    suggested = ceil(current_size * value / threshold)

The largest candidate across the direction's scaling metrics wins. The
optional scale_in_limit / scale_out_limit cap how far one step may move.
A limit of 0 is treated the same as an unset limit.
"""

import logging
import math
from typing import List, Optional

from memorystore_autoscaler.models import (
    ClusterRequest,
    Direction,
    EngineAnalysis,
    MetricValue,
    ScalingMethodName,
)
from memorystore_autoscaler.core.logging_config import get_cluster_logger
from .base import ScalingMethod

logger = logging.getLogger(__name__)


def get_metrics_for_scaling(cluster: ClusterRequest, direction: Direction,
                            analysis: Optional[EngineAnalysis]) -> List[MetricValue]:
    """Matched conditions usable for a linear calculation, as metric/threshold pairs"""
    if analysis is None:
        return []

    matched_conditions = analysis.matched_conditions.get(direction)
    scaling_metrics = analysis.scaling_metrics.get(direction)
    if not matched_conditions or not scaling_metrics:
        return []

    log = get_cluster_logger(logger, cluster)
    metrics = []
    for condition in matched_conditions:
        metric_name = condition.fact
        if metric_name not in scaling_metrics:
            continue

        if condition.fact_result is None:
            log.error(
                f"Unable to use this metric for linear scaling. No value for metric {metric_name} "
                f"on the cluster. Consider removing this metric from scalingMetrics or adding a "
                f"value to the condition for the fact with this name."
            )
            continue

        threshold = condition.value
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            log.error(
                f"Unable to use this metric for linear scaling. No numeric threshold value for "
                f"{metric_name}. Consider removing this metric from scalingMetrics or adding a "
                f"numeric value to the condition for the fact with this name."
            )
            continue

        if threshold == 0:
            log.error(
                f"Unable to use this metric for linear scaling. The threshold value for "
                f"{metric_name} is 0 and cannot be used as a divisor. Consider removing this "
                f"metric from scalingMetrics or using a non-zero threshold."
            )
            continue

        metrics.append(MetricValue(name=metric_name, value=condition.fact_result, threshold=threshold))

    return metrics


class LinearMethod(ScalingMethod):
    name = ScalingMethodName.LINEAR.value

    def suggest_size(self, cluster: ClusterRequest, direction: Direction,
                     analysis: Optional[EngineAnalysis]) -> int:
        if analysis is None or direction == Direction.NONE:
            return cluster.current_size

        suggested_size = None
        for metric in get_metrics_for_scaling(cluster, direction, analysis):
            candidate = math.ceil(cluster.current_size * (metric.value / metric.threshold))
            suggested_size = max(suggested_size or 0, candidate)

        if suggested_size is None:
            suggested_size = cluster.current_size

        if direction == Direction.IN:
            if cluster.scale_in_limit:
                suggested_size = max(suggested_size, cluster.current_size - cluster.scale_in_limit)
            if suggested_size < cluster.current_size:
                return suggested_size
        elif direction == Direction.OUT:
            if cluster.scale_out_limit:
                suggested_size = min(suggested_size, cluster.current_size + cluster.scale_out_limit)
            if suggested_size > cluster.current_size:
                return suggested_size

        return cluster.current_size
