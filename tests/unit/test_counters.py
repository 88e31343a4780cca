#!/usr/bin/env python3
"""
Tests for the scaler counters
"""

from unittest.mock import patch

from memorystore_autoscaler.core.counters import (
    SCALING_DURATION_BUCKETS,
    ScalerCounters,
    get_counter_attributes,
)

from conftest import build_cluster, sample


class TestCounterAttributes:
    """Label derivation"""

    def test_defaults_to_current_size_and_method(self):
        attributes = get_counter_attributes(build_cluster(scaling_method="LINEAR"), 7)
        assert attributes == {
            "cluster_project_id": "my-project",
            "cluster_instance_id": "my-cluster",
            "scaling_method": "LINEAR",
            "scaling_direction": "SCALE_UP",
        }

    def test_scale_down_against_previous_size(self):
        attributes = get_counter_attributes(build_cluster(), 4, previous_size=8, scaling_method="DIRECT")
        assert attributes["scaling_direction"] == "SCALE_DOWN"
        assert attributes["scaling_method"] == "DIRECT"

    def test_same_size(self):
        assert get_counter_attributes(build_cluster(), 5)["scaling_direction"] == "SCALE_SAME"

    def test_no_direction_without_requested_size(self):
        assert get_counter_attributes(build_cluster(), 0)["scaling_direction"] == ""
        assert get_counter_attributes(build_cluster(), None)["scaling_direction"] == ""


class TestScalerCounters:
    """Counter updates and flushing"""

    def test_denied_counter_carries_reason(self, counters):
        counters.inc_scaling_denied(build_cluster(), 5, "CURRENT_SIZE")
        counters.inc_scaling_denied(build_cluster(), 5, "CURRENT_SIZE")

        assert sample(
            counters, "scaler_scaling_denied_total",
            cluster_project_id="my-project",
            cluster_instance_id="my-cluster",
            scaling_method="STEPWISE",
            scaling_direction="SCALE_SAME",
            scaling_denied_reason="CURRENT_SIZE",
        ) == 2

    def test_request_counters(self, counters):
        counters.inc_requests_success()
        counters.inc_requests_failed()
        counters.inc_requests_failed()

        assert sample(counters, "scaler_requests_success_total") == 1
        assert sample(counters, "scaler_requests_failed_total") == 2

    def test_duration_is_floored(self, counters):
        counters.record_scaling_duration(1500.9, build_cluster(), 6)

        labels = dict(
            cluster_project_id="my-project",
            cluster_instance_id="my-cluster",
            scaling_method="STEPWISE",
            scaling_direction="SCALE_UP",
        )
        assert sample(counters, "scaler_scaling_duration_ms_sum", **labels) == 1500
        assert sample(counters, "scaler_scaling_duration_ms_bucket", le="11352.0", **labels) == 1

    def test_duration_buckets(self):
        assert len(SCALING_DURATION_BUCKETS) == 25
        assert SCALING_DURATION_BUCKETS[:4] == [0, 11352, 24852, 40907]
        assert SCALING_DURATION_BUCKETS == sorted(SCALING_DURATION_BUCKETS)

    def test_counters_are_isolated_per_registry(self):
        first, second = ScalerCounters(), ScalerCounters()
        first.inc_requests_success()
        assert sample(second, "scaler_requests_success_total") == 0

    def test_flush_without_pushgateway_is_noop(self, counters):
        with patch("memorystore_autoscaler.core.counters.push_to_gateway") as push:
            assert counters.try_flush() is False
        push.assert_not_called()

    def test_flush_pushes_registry(self):
        counters = ScalerCounters(pushgateway_url="pushgateway:9091", job_name="scaler")
        with patch("memorystore_autoscaler.core.counters.push_to_gateway") as push:
            assert counters.try_flush() is True
        push.assert_called_once_with("pushgateway:9091", job="scaler", registry=counters.registry)

    def test_flush_can_be_disabled(self):
        counters = ScalerCounters(pushgateway_url="pushgateway:9091")
        counters.set_flush_enabled(False)
        with patch("memorystore_autoscaler.core.counters.push_to_gateway") as push:
            assert counters.try_flush() is False
            counters.set_flush_enabled(True)
            assert counters.try_flush() is True
        assert push.call_count == 1

    def test_flush_failure_is_logged_not_raised(self):
        counters = ScalerCounters(pushgateway_url="pushgateway:9091")
        with patch("memorystore_autoscaler.core.counters.push_to_gateway", side_effect=OSError("refused")):
            assert counters.try_flush() is False
