#!/usr/bin/env python3
"""
Client for the Memorystore cluster control REST APIs (Redis Cluster and Valkey)
"""

import logging
from typing import Any, Dict, Optional

import requests

from memorystore_autoscaler.config import ClusterApiSettings
from memorystore_autoscaler.exceptions import ClusterApiError, OperationStatusError, UnknownEngineError
from memorystore_autoscaler.models import ClusterRequest, Engine, Operation, OperationMetadata
from memorystore_autoscaler.core.utils import parse_rfc3339_millis

logger = logging.getLogger(__name__)

OPERATION_METADATA_TYPES = {
    Engine.REDIS.value: "type.googleapis.com/google.cloud.redis.cluster.v1.OperationMetadata",
    Engine.VALKEY.value: "type.googleapis.com/google.cloud.memorystore.v1.OperationMetadata",
}


class ClusterControlClient:
    """Resizes clusters and polls the resulting long-running operations"""

    def __init__(self, api_settings: ClusterApiSettings, session: Optional[requests.Session] = None):
        """
        Initialize the client

        Args:
            api_settings: Base URLs, timeout and credentials
            session: Optional preconfigured requests session
        """
        self.settings = api_settings
        self.timeout = api_settings.timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": api_settings.user_agent,
            "Content-Type": "application/json",
        })
        if api_settings.access_token:
            self.session.headers["Authorization"] = f"Bearer {api_settings.access_token}"

    def _base_url(self, engine: str) -> str:
        if engine == Engine.REDIS.value:
            return self.settings.redis_base_url.rstrip("/")
        if engine == Engine.VALKEY.value:
            return self.settings.valkey_base_url.rstrip("/")
        raise UnknownEngineError(engine)

    def resource_name(self, cluster: ClusterRequest) -> str:
        """Full resource name of the cluster in its engine's API"""
        if cluster.engine == Engine.REDIS.value:
            return f"projects/{cluster.project_id}/locations/{cluster.region_id}/clusters/{cluster.cluster_id}"
        if cluster.engine == Engine.VALKEY.value:
            return f"projects/{cluster.project_id}/locations/{cluster.region_id}/instances/{cluster.cluster_id}"
        raise UnknownEngineError(cluster.engine)

    def resize(self, cluster: ClusterRequest, size: int) -> Optional[str]:
        """
        Request a new shard count for the cluster.

        Returns:
            Name of the long-running operation, or None if the API returned none
        """
        name = self.resource_name(cluster)
        url = f"{self._base_url(cluster.engine)}/{name}"
        logger.info(f"----- {cluster.display_name}: Scaling Memorystore cluster to {size} {cluster.units} -----")

        try:
            response = self.session.patch(
                url,
                params={"updateMask": "shard_count"},
                json={"name": name, "shardCount": size},
                timeout=self.timeout
            )
            response.raise_for_status()
            operation = response.json() if response.content else {}
        except requests.exceptions.RequestException as e:
            raise ClusterApiError(f"Resize of {name} to {size} failed: {e}") from e
        except ValueError as e:
            raise ClusterApiError(f"Resize of {name} returned an invalid body: {e}") from e

        operation_name = (operation or {}).get("name") or None
        logger.debug(f"Started the scaling operation: {operation_name}")
        return operation_name

    def get_operation(self, operation_id: str, engine: str) -> Operation:
        """
        Fetch the status of a long-running operation.

        Raises:
            UnknownEngineError: engine is not REDIS or VALKEY
            OperationStatusError: the call failed, returned nothing, or its
                metadata could not be decoded
        """
        url = f"{self._base_url(engine)}/{operation_id}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json() if response.content else None
        except requests.exceptions.RequestException as e:
            raise OperationStatusError(f"GetOperation({operation_id}) failed: {e}") from e
        except ValueError as e:
            raise OperationStatusError(f"GetOperation({operation_id}) returned an invalid body: {e}") from e

        if not payload:
            raise OperationStatusError(f"GetOperation({operation_id}) returned no results")

        return Operation(
            name=payload.get("name", operation_id),
            done=bool(payload.get("done", False)),
            error=payload.get("error"),
            metadata=self.decode_metadata(operation_id, engine, payload.get("metadata")),
        )

    @staticmethod
    def decode_metadata(operation_id: str, engine: str, metadata: Optional[Dict[str, Any]]) -> OperationMetadata:
        if not metadata or metadata.get("@type") not in OPERATION_METADATA_TYPES.values():
            raise OperationStatusError(
                f"GetOperation({operation_id}) could not decode OperationMetadata: no metadata in response"
            )
        if metadata["@type"] != OPERATION_METADATA_TYPES[engine]:
            raise OperationStatusError(
                f"GetOperation({operation_id}) could not decode OperationMetadata: "
                f"unexpected type {metadata['@type']} for engine {engine}"
            )
        return OperationMetadata(
            create_time=parse_rfc3339_millis(metadata.get("createTime")),
            end_time=parse_rfc3339_millis(metadata.get("endTime")),
            requested_cancellation=bool(metadata.get("requestedCancellation", False)),
        )

    def close(self):
        self.session.close()
