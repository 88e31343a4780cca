#!/usr/bin/env python3
"""
Relational backend for the scaling state, on SQLAlchemy
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Optional

from sqlalchemy import Column, DateTime, Integer, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from memorystore_autoscaler.exceptions import StateStorageError
from memorystore_autoscaler.models import ClusterRequest, ScalingState
from memorystore_autoscaler.core.utils import millis_to_datetime, now_millis
from .state import (
    STATE_FIELDS,
    STATE_TABLE_NAME,
    get_cluster_key,
    get_state_project_id,
    initial_state,
    state_from_record,
    state_to_record,
)

logger = logging.getLogger(__name__)

Base = declarative_base()


def _naive_utc(millis: int):
    """Timestamps are stored as naive UTC datetimes, the form the columns hand back"""
    return millis_to_datetime(millis).replace(tzinfo=None)


class ScalingStateRow(Base):
    """ORM model for one cluster's scaling state"""

    __tablename__ = STATE_TABLE_NAME

    id = Column(String, primary_key=True)

    last_scaling_timestamp = Column("lastScalingTimestamp", DateTime())
    created_on = Column("createdOn", DateTime())
    updated_on = Column("updatedOn", DateTime())
    last_scaling_complete_timestamp = Column("lastScalingCompleteTimestamp", DateTime())
    scaling_operation_id = Column("scalingOperationId", String, nullable=True)
    scaling_requested_size = Column("scalingRequestedSize", Integer, nullable=True)
    scaling_previous_size = Column("scalingPreviousSize", Integer, nullable=True)
    scaling_method = Column("scalingMethod", String, nullable=True)


def create_sql_engine(database_url: str) -> Engine:
    """Create the engine and the state table if it does not exist"""
    kwargs = {"pool_pre_ping": True}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection keeps the in-memory database alive
        kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    try:
        engine = create_engine(database_url, **kwargs)
        Base.metadata.create_all(engine)
        logger.info(f"Connected to SQL state storage: {engine.url.render_as_string(hide_password=True)}")
        return engine
    except SQLAlchemyError as e:
        logger.critical(f"Failed to connect to SQL state storage: {e}")
        raise StateStorageError(f"Failed to connect to SQL state storage: {e}") from e


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


class SqlStateStore:
    """Scaling state for one cluster, stored as a row keyed by the cluster path"""

    def __init__(self, cluster: ClusterRequest, session_factory: sessionmaker,
                 clock: Optional[Callable[[], int]] = None):
        self.state_project_id = get_state_project_id(cluster)
        self.state_database = cluster.state_database
        self.session_factory = session_factory
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
        instance_id = self.state_database.instance_id if self.state_database else None
        database_id = self.state_database.database_id if self.state_database else None
        return (
            f"projects/{self.state_project_id}/instances/{instance_id}"
            f"/databases/{database_id}/tables/{STATE_TABLE_NAME}"
        )

    @staticmethod
    def convert_to_storage(state: ScalingState) -> Dict[str, Any]:
        """Convert to column values keyed by column name (timestamps as naive UTC datetimes)"""
        return state_to_record(state, encode_timestamp=_naive_utc)

    @staticmethod
    def convert_from_storage(row: Mapping[str, Any]) -> ScalingState:
        """Create from column values keyed by column name"""
        return state_from_record(row)

    @staticmethod
    def _row_to_mapping(row: ScalingStateRow) -> Dict[str, Any]:
        return {field.name: getattr(row, field.attr) for field in STATE_FIELDS}

    def _write(self, values: Dict[str, Any]):
        """Upsert the given column values; columns not present are left untouched"""
        attributes = {field.attr: values[field.name] for field in STATE_FIELDS if field.name in values}
        try:
            with self.session_factory.begin() as session:
                session.merge(ScalingStateRow(id=self._cluster_key, **attributes))
        except SQLAlchemyError as e:
            logger.critical(f"Failed to write to SQL state storage {self.storage_path}: {e}")
            raise StateStorageError(f"Failed to write state for {self._cluster_key}: {e}") from e

    def init(self) -> ScalingState:
        """Write a zero-valued state row"""
        state = initial_state(self.now)
        self._write(self.convert_to_storage(state))
        logger.debug(f"Initialized scaling state for {self._cluster_key}")
        return state

    def get(self) -> ScalingState:
        try:
            with self.session_factory() as session:
                row = session.get(ScalingStateRow, self._cluster_key)
                values = self._row_to_mapping(row) if row is not None else None
        except SQLAlchemyError as e:
            logger.critical(f"Failed to read from SQL state storage {self.storage_path}: {e}")
            raise StateStorageError(f"Failed to read state for {self._cluster_key}: {e}") from e

        if values is None:
            return self.init()
        return self.convert_from_storage(values)

    def update_state(self, state: ScalingState) -> None:
        """Persist the state; createdOn is never overwritten"""
        state = replace(state, updated_on=self.now)
        values = self.convert_to_storage(state)
        values.pop("createdOn", None)
        self._write(values)

    def close(self) -> None:
        # The engine is owned by the client cache
        pass
