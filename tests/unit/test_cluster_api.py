#!/usr/bin/env python3
"""
Tests for the cluster control REST client
"""

from unittest.mock import Mock

import pytest
import requests

from memorystore_autoscaler.clients.cluster_api import OPERATION_METADATA_TYPES, ClusterControlClient
from memorystore_autoscaler.config import ClusterApiSettings
from memorystore_autoscaler.exceptions import ClusterApiError, OperationStatusError, UnknownEngineError

from conftest import build_cluster

OPERATION_ID = "projects/my-project/locations/us-central1/operations/op-1"


def response(payload=None, status=200):
    resp = Mock()
    resp.content = b"{}" if payload is not None else b""
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} error")
    return resp


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    settings = ClusterApiSettings(
        redis_base_url="https://redis.example.com/v1/",
        valkey_base_url="https://memorystore.example.com/v1",
        access_token="token-123",
        timeout=5,
    )
    return ClusterControlClient(settings, session=session)


class TestResize:
    """Resize requests"""

    def test_redis_resize(self, client, session):
        session.patch.return_value = response({"name": OPERATION_ID})

        assert client.resize(build_cluster(), 6) == OPERATION_ID

        name = "projects/my-project/locations/us-central1/clusters/my-cluster"
        session.patch.assert_called_once_with(
            f"https://redis.example.com/v1/{name}",
            params={"updateMask": "shard_count"},
            json={"name": name, "shardCount": 6},
            timeout=5,
        )

    def test_valkey_resize_targets_instances(self, client, session):
        session.patch.return_value = response({"name": OPERATION_ID})

        client.resize(build_cluster(engine="VALKEY"), 4)

        url = session.patch.call_args[0][0]
        assert url == "https://memorystore.example.com/v1/projects/my-project/locations/us-central1/instances/my-cluster"

    def test_empty_response_has_no_operation(self, client, session):
        session.patch.return_value = response()
        assert client.resize(build_cluster(), 6) is None

    def test_http_error_raises(self, client, session):
        session.patch.return_value = response({"error": {}}, status=403)
        with pytest.raises(ClusterApiError):
            client.resize(build_cluster(), 6)

    def test_unknown_engine_raises(self, client, session):
        with pytest.raises(UnknownEngineError):
            client.resize(build_cluster().model_copy(update={"engine": "MEMCACHED"}), 6)
        session.patch.assert_not_called()

    def test_bearer_token_header(self, client, session):
        assert session.headers["Authorization"] == "Bearer token-123"


class TestGetOperation:
    """Operation status polling"""

    def payload(self, engine="REDIS", **overrides):
        body = {
            "name": OPERATION_ID,
            "done": True,
            "metadata": {
                "@type": OPERATION_METADATA_TYPES[engine],
                "createTime": "2024-01-01T12:00:00.123456789Z",
                "endTime": "2024-01-01T12:05:00Z",
            },
        }
        body.update(overrides)
        return body

    def test_decodes_operation(self, client, session):
        session.get.return_value = response(self.payload())

        operation = client.get_operation(OPERATION_ID, "REDIS")

        session.get.assert_called_once_with(f"https://redis.example.com/v1/{OPERATION_ID}", timeout=5)
        assert operation.done is True
        assert operation.error is None
        assert operation.metadata.create_time == 1_704_110_400_123
        assert operation.metadata.end_time == 1_704_110_700_000
        assert operation.metadata.requested_cancellation is False

    def test_operation_error_is_returned(self, client, session):
        session.get.return_value = response(self.payload(error={"code": 8, "message": "out of capacity"}))
        assert client.get_operation(OPERATION_ID, "REDIS").error["message"] == "out of capacity"

    def test_missing_metadata_raises(self, client, session):
        session.get.return_value = response(self.payload(metadata=None))
        with pytest.raises(OperationStatusError):
            client.get_operation(OPERATION_ID, "REDIS")

    def test_metadata_for_other_engine_raises(self, client, session):
        session.get.return_value = response(self.payload(engine="VALKEY"))
        with pytest.raises(OperationStatusError):
            client.get_operation(OPERATION_ID, "REDIS")

    def test_empty_response_raises(self, client, session):
        session.get.return_value = response()
        with pytest.raises(OperationStatusError):
            client.get_operation(OPERATION_ID, "VALKEY")

    def test_transport_error_raises(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(OperationStatusError):
            client.get_operation(OPERATION_ID, "REDIS")

    def test_unknown_engine_raises(self, client):
        with pytest.raises(UnknownEngineError):
            client.get_operation(OPERATION_ID, "MEMCACHED")
