#!/usr/bin/env python3
"""
Tests for the local, message and HTTP adapters
"""

import base64
import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from memorystore_autoscaler.api import scale_cluster_http, scale_cluster_local, scale_cluster_message
from memorystore_autoscaler.api.server import APIServer
from memorystore_autoscaler.core.scaler import ScalingOutcome

from conftest import NEUTRAL_METRICS, sample


def cluster_payload(**overrides):
    payload = {
        "projectId": "my-project",
        "regionId": "us-central1",
        "clusterId": "my-cluster",
        "currentSize": 5,
        "minSize": 3,
        "maxSize": 10,
        "scalingMethod": "STEPWISE",
        "metrics": [{"name": name, "value": value} for name, value in NEUTRAL_METRICS.items()],
    }
    payload.update(overrides)
    return payload


def encode(payload):
    return base64.b64encode(json.dumps(payload).encode("utf-8"))


class TestLocalAdapter:
    """In-process requests"""

    def test_success(self, scaler, counters, store):
        assert scale_cluster_local(cluster_payload(), scaler) == ScalingOutcome.CURRENT_SIZE
        assert sample(counters, "scaler_requests_success_total") == 1
        assert sample(counters, "scaler_requests_failed_total") == 0
        assert store.closed

    def test_invalid_payload_is_counted(self, scaler, counters):
        payload = cluster_payload()
        del payload["currentSize"]

        assert scale_cluster_local(payload, scaler) is None
        assert sample(counters, "scaler_requests_failed_total") == 1
        assert sample(counters, "scaler_requests_success_total") == 0

    def test_configuration_error_is_counted(self, scaler, counters):
        assert scale_cluster_local(cluster_payload(metrics=[]), scaler) is None
        assert sample(counters, "scaler_requests_failed_total") == 1

    def test_unknown_engine_is_counted_as_failed(self, scaler, counters, cluster_api):
        assert scale_cluster_local(cluster_payload(engine="MEMCACHED"), scaler) is None
        assert sample(counters, "scaler_requests_failed_total") == 1
        assert sample(counters, "scaler_requests_success_total") == 0
        cluster_api.resize.assert_not_called()

    def test_valkey_engine_is_accepted(self, scaler, counters):
        assert scale_cluster_local(cluster_payload(engine="VALKEY"), scaler) == ScalingOutcome.CURRENT_SIZE
        assert sample(counters, "scaler_requests_success_total") == 1

    def test_counters_are_flushed(self, scaler):
        with patch.object(scaler.counters, "try_flush") as flush:
            scale_cluster_local(cluster_payload(), scaler)
            scale_cluster_local({}, scaler)
        assert flush.call_count == 2


class TestMessageAdapter:
    """Base64 JSON messages"""

    def test_success(self, scaler, counters):
        assert scale_cluster_message(encode(cluster_payload()), scaler) == ScalingOutcome.CURRENT_SIZE
        assert sample(counters, "scaler_requests_success_total") == 1

    def test_accepts_text(self, scaler):
        data = encode(cluster_payload()).decode("ascii")
        assert scale_cluster_message(data, scaler) == ScalingOutcome.CURRENT_SIZE

    def test_undecodable_message_is_counted(self, scaler, counters):
        assert scale_cluster_message(b"not base64 json!", scaler) is None
        assert sample(counters, "scaler_requests_failed_total") == 1


class TestHttpAdapter:
    """FastAPI server"""

    @pytest.fixture
    def http(self, scaler):
        return TestClient(APIServer(scaler).app)

    def test_scale_success_returns_empty_200(self, http, counters):
        resp = http.post("/scale", json=cluster_payload())

        assert resp.status_code == 200
        assert resp.content == b""
        assert sample(counters, "scaler_requests_success_total") == 1

    def test_scale_failure_returns_generic_500(self, http, counters):
        resp = http.post("/scale", json=cluster_payload(metrics=[]))

        assert resp.status_code == 500
        assert resp.text == "An exception occurred"
        assert resp.headers["content-type"].startswith("text/plain")
        assert sample(counters, "scaler_requests_failed_total") == 1

    def test_scale_rejects_non_json_body(self, http, counters):
        resp = http.post("/scale", content=b"{not json", headers={"Content-Type": "application/json"})

        assert resp.status_code == 500
        assert resp.text == "An exception occurred"
        assert sample(counters, "scaler_requests_failed_total") == 1

    def test_health(self, http):
        resp = http.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_metrics(self, http):
        http.post("/scale", json=cluster_payload())

        resp = http.get("/metrics")

        assert resp.status_code == 200
        assert "scaler_requests_success_total 1.0" in resp.text

    def test_scale_cluster_http_returns_bool(self, scaler):
        assert scale_cluster_http(cluster_payload(), scaler) is True
        assert scale_cluster_http("garbage", scaler) is False
