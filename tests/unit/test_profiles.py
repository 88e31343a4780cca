#!/usr/bin/env python3
"""
Tests for the built-in rule profiles and custom rules
"""

import pytest

from memorystore_autoscaler.core.rules_engine import get_engine_analysis, get_scaling_direction
from memorystore_autoscaler.core.scaling_profiles import (
    DEFAULT_PROFILE_NAME,
    SCALING_PROFILES,
    get_scaling_rule_set,
)
from memorystore_autoscaler.exceptions import RuleSetError
from memorystore_autoscaler.models import Direction

from conftest import build_cluster

CUSTOM_RULES = [
    {
        "name": "custom-high-cpu",
        "conditions": {"all": [{"fact": "cpu_maximum_utilization", "operator": "greaterThan", "value": 50}]},
        "event": {"type": "OUT", "params": {"message": "cpu above 50", "scalingMetrics": ["cpu_maximum_utilization"]}},
    },
]


def direction_for(profile, **metrics):
    analysis = get_engine_analysis(build_cluster(metrics=metrics), SCALING_PROFILES[profile])
    return get_scaling_direction(analysis)


class TestBuiltInProfiles:
    """Directions produced by the built-in rules"""

    def test_profile_contents(self):
        assert len(SCALING_PROFILES["CPU"]) == 4
        assert len(SCALING_PROFILES["MEMORY"]) == 4
        assert len(SCALING_PROFILES["CPU_AND_MEMORY"]) == 8

    @pytest.mark.parametrize("profile,metrics,expected", [
        ("CPU", {"cpu_maximum_utilization": 85}, Direction.OUT),
        ("CPU", {"cpu_average_utilization": 75}, Direction.OUT),
        ("CPU", {"cpu_maximum_utilization": 50, "cpu_average_utilization": 35}, Direction.IN),
        ("CPU", {"cpu_average_utilization": 45}, Direction.IN),
        ("CPU", {}, Direction.NONE),
        ("CPU", {"memory_maximum_utilization": 95}, Direction.NONE),
        ("MEMORY", {"memory_maximum_utilization": 85}, Direction.OUT),
        ("MEMORY", {"memory_average_utilization": 75}, Direction.OUT),
        ("MEMORY", {"memory_average_utilization": 45}, Direction.IN),
        ("MEMORY", {"memory_average_utilization": 45, "maximum_evicted_keys": 3}, Direction.NONE),
        ("CPU_AND_MEMORY", {"cpu_average_utilization": 45, "memory_maximum_utilization": 85}, Direction.OUT),
    ])
    def test_direction(self, profile, metrics, expected):
        assert direction_for(profile, **metrics) == expected


class TestProfileSelection:
    """Profile lookup by name"""

    def test_named_profile(self):
        rule_set, cluster = get_scaling_rule_set(build_cluster(scaling_profile="memory"))
        assert rule_set is SCALING_PROFILES["MEMORY"]
        assert cluster.scaling_profile == "memory"

    def test_unknown_profile_falls_back(self):
        rule_set, cluster = get_scaling_rule_set(build_cluster(scaling_profile="GPU"))
        assert rule_set is SCALING_PROFILES[DEFAULT_PROFILE_NAME]
        assert cluster.scaling_profile == DEFAULT_PROFILE_NAME

    def test_custom_profile_uses_inline_rules(self):
        rule_set, cluster = get_scaling_rule_set(
            build_cluster(scaling_profile="CUSTOM", scaling_rules=CUSTOM_RULES)
        )
        assert list(rule_set) == ["custom-high-cpu"]
        assert cluster.scaling_profile == "CUSTOM"

    def test_custom_profile_without_rules_falls_back(self):
        rule_set, cluster = get_scaling_rule_set(build_cluster(scaling_profile="CUSTOM"))
        assert rule_set is SCALING_PROFILES[DEFAULT_PROFILE_NAME]
        assert cluster.scaling_profile == DEFAULT_PROFILE_NAME

    def test_malformed_custom_rule_raises(self):
        rules = [{"name": "broken", "conditions": {"all": [{"fact": "x", "operator": "near", "value": 1}]},
                  "event": {"type": "OUT"}}]
        with pytest.raises(RuleSetError):
            get_scaling_rule_set(build_cluster(scaling_profile="CUSTOM", scaling_rules=rules))

    def test_custom_rules_accept_camel_case_payload(self):
        cluster = build_cluster(scalingProfile="CUSTOM", scalingRules=CUSTOM_RULES,
                                metrics={"cpu_maximum_utilization": 60})
        rule_set, cluster = get_scaling_rule_set(cluster)
        assert get_scaling_direction(get_engine_analysis(cluster, rule_set)) == Direction.OUT
