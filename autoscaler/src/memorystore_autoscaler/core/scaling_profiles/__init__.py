"""
Registry of rule profiles, selected by name
"""

import logging
from typing import Dict, Tuple

from memorystore_autoscaler.models import ClusterRequest, RuleSet, ScalingProfileName
from memorystore_autoscaler.core.logging_config import get_cluster_logger
from memorystore_autoscaler.core.rules_engine import parse_rule
from memorystore_autoscaler.exceptions import RuleSetError
from .profiles import cpu, memory, cpu_and_memory

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = ScalingProfileName.CPU_AND_MEMORY.value
CUSTOM_PROFILE_NAME = ScalingProfileName.CUSTOM.value

SCALING_PROFILES: Dict[str, RuleSet] = {
    ScalingProfileName.CPU_AND_MEMORY.value: cpu_and_memory.rule_set,
    ScalingProfileName.CPU.value: cpu.rule_set,
    ScalingProfileName.MEMORY.value: memory.rule_set,
}


def build_custom_rule_set(cluster: ClusterRequest) -> RuleSet:
    """Key the cluster's inline rules by name, validating each one"""
    log = get_cluster_logger(logger, cluster)
    rule_set = {}
    for index, definition in enumerate(cluster.scaling_rules or []):
        if not isinstance(definition, dict):
            raise RuleSetError(f"Custom scaling rule #{index} is not an object")
        name = definition.get("name") or f"#{index}"
        rule = parse_rule(name, definition)
        log.info(f"\tCustom scaling rule: {rule.name}")
        rule_set[rule.name] = rule
    return rule_set


def get_scaling_rule_set(cluster: ClusterRequest) -> Tuple[RuleSet, ClusterRequest]:
    """
    Resolve the rule set for the cluster's scaling profile.

    CUSTOM uses the cluster's inline rules; CUSTOM without rules and unknown
    profile names fall back to CPU_AND_MEMORY, and the returned cluster then
    carries the default profile name.
    """
    log = get_cluster_logger(logger, cluster)
    profile_name = (cluster.scaling_profile or "").upper()

    if profile_name == CUSTOM_PROFILE_NAME and cluster.scaling_rules:
        rule_set = build_custom_rule_set(cluster)
    elif profile_name in SCALING_PROFILES:
        rule_set = SCALING_PROFILES[profile_name]
    else:
        log.warning(f"Unknown scaling profile '{cluster.scaling_profile}'")
        rule_set = SCALING_PROFILES[DEFAULT_PROFILE_NAME]
        cluster = cluster.model_copy(update={"scaling_profile": DEFAULT_PROFILE_NAME})

    log.info(f"Using scaling profile: {cluster.scaling_profile}")
    return rule_set, cluster


__all__ = [
    "SCALING_PROFILES",
    "DEFAULT_PROFILE_NAME",
    "CUSTOM_PROFILE_NAME",
    "build_custom_rule_set",
    "get_scaling_rule_set",
]
