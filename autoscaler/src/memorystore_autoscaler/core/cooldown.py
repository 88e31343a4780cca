#!/usr/bin/env python3
"""
Cooldown gate: decides whether enough time has passed since the last scaling
action to allow another one
"""

import logging

from memorystore_autoscaler.models import ClusterRequest, ScalingState
from memorystore_autoscaler.core.logging_config import get_cluster_logger
from memorystore_autoscaler.core.utils import convert_millisec_to_human_readable

logger = logging.getLogger(__name__)

MS_IN_1_MIN = 60_000


def within_cooldown_period(cluster: ClusterRequest, suggested_size: int,
                           state: ScalingState, now: int) -> bool:
    """
    Check whether the cluster is still cooling down.

    Args:
        cluster: Cluster request
        suggested_size: Size the scaler wants to move to
        state: Reconciled scaling state
        now: Current time, epoch milliseconds

    Returns:
        True while the relevant cooldown has not elapsed (scaling denied)
    """
    log = get_cluster_logger(logger, cluster)
    log.debug("----- Verifying if scaling is allowed -----")

    scale_out_suggested = suggested_size - cluster.current_size > 0
    last_scaling_millisec = (
        state.last_scaling_complete_timestamp
        if state.last_scaling_complete_timestamp
        else state.last_scaling_timestamp
    ) or 0

    if scale_out_suggested:
        description = "scale out"
        cooling_millisec = cluster.scale_out_cooling_minutes * MS_IN_1_MIN
    else:
        description = "scale in"
        cooling_millisec = cluster.scale_in_cooling_minutes * MS_IN_1_MIN

    if last_scaling_millisec == 0:
        cooldown_period_over = True
        log.debug("\tNo previous scaling operation found for this cluster")
    else:
        elapsed_millisec = now - last_scaling_millisec
        cooldown_period_over = elapsed_millisec >= cooling_millisec
        log.debug(f"\tLast scaling operation was {convert_millisec_to_human_readable(elapsed_millisec)} ago.")
        log.debug(f"\tCooldown period for {description} is {convert_millisec_to_human_readable(cooling_millisec)}.")

    if cooldown_period_over:
        log.info("\t=> Autoscale allowed")
        return False

    log.info("\t=> Autoscale NOT allowed yet")
    return True
