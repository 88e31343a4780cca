#!/usr/bin/env python3
"""
Publishes scaling events to a Redis stream for downstream consumers
"""

import logging
from typing import Optional

import redis

from memorystore_autoscaler.config import RedisSettings
from memorystore_autoscaler.models import ClusterRequest
from .base import EventType, ScalingEvent

logger = logging.getLogger(__name__)


def create_redis_client(redis_settings: RedisSettings) -> redis.Redis:
    return redis.Redis(
        host=redis_settings.host,
        port=redis_settings.port,
        db=redis_settings.db,
        password=redis_settings.password,
        decode_responses=True,
        socket_connect_timeout=redis_settings.connection_timeout,
        socket_timeout=redis_settings.connection_timeout,
        retry_on_timeout=True
    )


class DownstreamPublisher:
    """
    Appends scaling events to the stream named by the cluster's
    downstream_stream. Clusters without a stream publish nothing. Publish
    failures are logged and swallowed so they never affect the scaling
    outcome.
    """

    def __init__(self, client: Optional[redis.Redis] = None,
                 redis_settings: Optional[RedisSettings] = None):
        self._client = client
        self.redis_settings = redis_settings or RedisSettings()

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = create_redis_client(self.redis_settings)
        return self._client

    def publish(self, event_type: EventType, cluster: ClusterRequest, suggested_size: int) -> bool:
        """
        Publish a scaling event

        Returns:
            True if an event was written to the stream
        """
        stream = cluster.downstream_stream
        if not stream:
            return False

        event = ScalingEvent.for_cluster(event_type, cluster, suggested_size)
        try:
            self.client.xadd(
                stream,
                event.to_stream_fields(),
                maxlen=self.redis_settings.stream_maxlen,
                approximate=True
            )
            logger.debug(f"Published event {event.event_type.value} ({event.event_id}) to {stream}")
            return True
        except redis.RedisError as e:
            logger.error(f"Failed to publish event {event.event_type.value} to {stream}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error publishing event {event.event_type.value}: {e}")
            return False
