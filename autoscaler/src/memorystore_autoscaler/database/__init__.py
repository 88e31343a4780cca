"""
Database package for the scaler

Persists per-cluster scaling state in a document store (MongoDB) or a
relational database (SQLAlchemy), selected per cluster.
"""

import logging
from typing import Callable, Optional

from memorystore_autoscaler.clients.cache import ClientCache
from memorystore_autoscaler.config import Settings
from memorystore_autoscaler.models import ClusterRequest

from .state import (
    StateStore,
    StateField,
    STATE_FIELDS,
    STATE_TABLE_NAME,
    get_cluster_key,
    state_from_record,
    state_to_record,
)
from .mongodb import MongoStateStore, create_mongo_client, get_state_collection
from .sql import SqlStateStore, ScalingStateRow, create_sql_engine, create_session_factory

logger = logging.getLogger(__name__)

DOCUMENT_BACKENDS = ("firestore", "mongodb")
RELATIONAL_BACKENDS = ("spanner", "sql")


def build_state_store(cluster: ClusterRequest, settings: Settings, client_cache: ClientCache,
                      clock: Optional[Callable[[], int]] = None) -> StateStore:
    """
    Build the state store for a cluster.

    The backend is chosen by cluster.state_database.name, falling back to the
    configured default backend. firestore/mongodb select the document store,
    spanner/sql the relational one; unknown names use the document store.
    """
    state_database = cluster.state_database
    backend = (state_database.name if state_database else settings.state.default_backend or "").lower()

    if backend in RELATIONAL_BACKENDS:
        database_url = settings.state.sql_url
        engine = client_cache.get("sql", database_url, lambda: create_sql_engine(database_url))
        return SqlStateStore(cluster, create_session_factory(engine), clock=clock)

    if backend not in DOCUMENT_BACKENDS:
        logger.warning(f"Unknown state database '{backend}', using the document store")

    database_name = (state_database.database_id if state_database else None) or settings.state.mongodb_database
    mongo_url = settings.state.mongodb_url
    client = client_cache.get(
        "mongodb", mongo_url,
        lambda: create_mongo_client(mongo_url, settings.state.mongodb_timeout_ms)
    )
    collection = get_state_collection(client, database_name, settings.state.collection_name)
    return MongoStateStore(cluster, collection, clock=clock)


__all__ = [
    "StateStore",
    "StateField",
    "STATE_FIELDS",
    "STATE_TABLE_NAME",
    "get_cluster_key",
    "state_from_record",
    "state_to_record",
    "MongoStateStore",
    "SqlStateStore",
    "ScalingStateRow",
    "create_mongo_client",
    "create_sql_engine",
    "create_session_factory",
    "get_state_collection",
    "build_state_store",
]
