#!/usr/bin/env python3
"""
Document-store backend for the scaling state, on MongoDB
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from memorystore_autoscaler.exceptions import StateStorageError
from memorystore_autoscaler.models import ClusterRequest, ScalingState
from memorystore_autoscaler.core.utils import now_millis
from .state import (
    STATE_TABLE_NAME,
    get_cluster_key,
    get_state_project_id,
    initial_state,
    state_from_record,
    state_to_record,
)

logger = logging.getLogger(__name__)


def create_mongo_client(connection_string: str, timeout_ms: int = 5000) -> MongoClient:
    """Connect to MongoDB and verify the server answers"""
    try:
        client = MongoClient(connection_string, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
        # Test connection
        client.admin.command('ping')
        logger.info("Connected to MongoDB state storage")
        return client
    except PyMongoError as e:
        logger.critical(f"Failed to connect to MongoDB state storage: {e}")
        raise StateStorageError(f"Failed to connect to MongoDB: {e}") from e


class MongoStateStore:
    """Scaling state for one cluster, stored as a document keyed by the cluster path"""

    def __init__(self, cluster: ClusterRequest, collection: Collection,
                 clock: Optional[Callable[[], int]] = None):
        self.state_project_id = get_state_project_id(cluster)
        self.collection = collection
        self._cluster_key = get_cluster_key(cluster)
        self._clock = clock or now_millis

    @property
    def now(self) -> int:
        return self._clock()

    @property
    def cluster_key(self) -> str:
        return self._cluster_key

    @property
    def storage_path(self) -> str:
        return f"projects/{self.state_project_id}/{self.collection.full_name}/{self._cluster_key}"

    @staticmethod
    def convert_to_storage(state: ScalingState) -> Dict[str, Any]:
        """Convert to a MongoDB document body (timestamps as UTC datetimes)"""
        return state_to_record(state)

    @staticmethod
    def convert_from_storage(document: Mapping[str, Any]) -> ScalingState:
        """Create from a MongoDB document"""
        return state_from_record(document)

    def init(self) -> ScalingState:
        """Write a zero-valued state document, replacing any existing one"""
        state = initial_state(self.now)
        try:
            self.collection.replace_one(
                {"_id": self._cluster_key},
                self.convert_to_storage(state),
                upsert=True
            )
        except PyMongoError as e:
            logger.critical(f"Failed to write to MongoDB state storage {self.storage_path}: {e}")
            raise StateStorageError(f"Failed to initialize state for {self._cluster_key}: {e}") from e
        logger.debug(f"Initialized scaling state for {self._cluster_key}")
        return state

    def get(self) -> ScalingState:
        try:
            document = self.collection.find_one({"_id": self._cluster_key})
        except PyMongoError as e:
            logger.critical(f"Failed to read from MongoDB state storage {self.storage_path}: {e}")
            raise StateStorageError(f"Failed to read state for {self._cluster_key}: {e}") from e

        if document is None:
            return self.init()
        return self.convert_from_storage(document)

    def update_state(self, state: ScalingState) -> None:
        """Persist the state; createdOn is never overwritten"""
        state = replace(state, updated_on=self.now)
        document = self.convert_to_storage(state)
        document.pop("createdOn", None)
        try:
            self.collection.update_one(
                {"_id": self._cluster_key},
                {"$set": document},
                upsert=True
            )
        except PyMongoError as e:
            logger.critical(f"Failed to write to MongoDB state storage {self.storage_path}: {e}")
            raise StateStorageError(f"Failed to update state for {self._cluster_key}: {e}") from e

    def close(self) -> None:
        # The client is owned by the client cache
        pass


def get_state_collection(client: MongoClient, database_name: str,
                         collection_name: str = STATE_TABLE_NAME) -> Collection:
    return client[database_name][collection_name]
