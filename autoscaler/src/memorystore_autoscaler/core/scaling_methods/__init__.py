"""
Registry of size calculation methods, selected by name
"""

import logging
from typing import Dict, Tuple

from memorystore_autoscaler.models import ClusterRequest, ScalingMethodName
from memorystore_autoscaler.core.logging_config import get_cluster_logger
from .base import (
    ScalingMethod,
    calculate_scaling_decision,
    ensure_min_free_memory,
    ensure_valid_cluster_size,
    CLUSTER_SIZE_MIN,
)
from .stepwise import StepwiseMethod
from .linear import LinearMethod
from .direct import DirectMethod

logger = logging.getLogger(__name__)

DEFAULT_METHOD_NAME = ScalingMethodName.STEPWISE.value

SCALING_METHODS: Dict[str, ScalingMethod] = {
    ScalingMethodName.STEPWISE.value: StepwiseMethod(),
    ScalingMethodName.LINEAR.value: LinearMethod(),
    ScalingMethodName.DIRECT.value: DirectMethod(),
}


def get_scaling_method(cluster: ClusterRequest) -> Tuple[ScalingMethod, ClusterRequest]:
    """
    Look up the cluster's scaling method.

    An unknown name falls back to STEPWISE; the returned cluster then carries
    the default method name so downstream telemetry is attributed to it.
    """
    log = get_cluster_logger(logger, cluster)
    method_name = (cluster.scaling_method or "").upper()
    method = SCALING_METHODS.get(method_name)
    if method is None:
        log.warning(f"Unknown scaling method '{cluster.scaling_method}'")
        method = SCALING_METHODS[DEFAULT_METHOD_NAME]
        cluster = cluster.model_copy(update={"scaling_method": DEFAULT_METHOD_NAME})
    log.info(f"Using scaling method: {cluster.scaling_method}")
    return method, cluster


__all__ = [
    "ScalingMethod",
    "StepwiseMethod",
    "LinearMethod",
    "DirectMethod",
    "SCALING_METHODS",
    "DEFAULT_METHOD_NAME",
    "CLUSTER_SIZE_MIN",
    "get_scaling_method",
    "calculate_scaling_decision",
    "ensure_min_free_memory",
    "ensure_valid_cluster_size",
]
