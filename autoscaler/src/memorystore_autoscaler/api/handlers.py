#!/usr/bin/env python3
"""
Entry points that turn an inbound payload into a scaling request.

Every handler catches all errors, counts the request as failed and returns
instead of raising.
"""

import base64
import json
import logging
from typing import Any, Dict, Optional, Union

from memorystore_autoscaler.core.scaler import Scaler, ScalingOutcome
from memorystore_autoscaler.models import ClusterRequest

logger = logging.getLogger(__name__)


def _describe(payload: Any) -> str:
    if isinstance(payload, dict):
        return f"{payload.get('projectId')}/{payload.get('regionId')}/{payload.get('clusterId')}"
    return "<unparsed payload>"


def _process(payload: Union[Dict[str, Any], ClusterRequest], scaler: Scaler) -> ScalingOutcome:
    cluster = payload if isinstance(payload, ClusterRequest) else ClusterRequest.model_validate(payload)
    outcome = scaler.handle(cluster)
    scaler.counters.inc_requests_success()
    return outcome


def scale_cluster_local(payload: Union[Dict[str, Any], ClusterRequest], scaler: Scaler) -> Optional[ScalingOutcome]:
    """Process a cluster payload in-process (batch runs and tests)"""
    try:
        return _process(payload, scaler)
    except Exception as e:
        logger.error(f"Failed to process scaling request for {_describe(payload)}: {e}", exc_info=True)
        scaler.counters.inc_requests_failed()
        return None
    finally:
        scaler.counters.try_flush()


def scale_cluster_message(data: Union[str, bytes], scaler: Scaler) -> Optional[ScalingOutcome]:
    """Process a base64-encoded JSON cluster payload, as delivered by a message bus"""
    try:
        payload = json.loads(base64.b64decode(data).decode("utf-8"))
    except Exception as e:
        logger.error(f"Failed to parse scaling request message: {e}")
        scaler.counters.inc_requests_failed()
        scaler.counters.try_flush()
        return None

    try:
        return _process(payload, scaler)
    except Exception as e:
        logger.error(f"Failed to process scaling request for {_describe(payload)}: {e}", exc_info=True)
        scaler.counters.inc_requests_failed()
        return None
    finally:
        scaler.counters.try_flush()


def scale_cluster_http(payload: Any, scaler: Scaler) -> bool:
    """Process a cluster payload received over HTTP; True on success"""
    try:
        _process(payload, scaler)
        return True
    except Exception as e:
        logger.error(f"Failed to process http scaling request for {_describe(payload)}: {e}", exc_info=True)
        scaler.counters.inc_requests_failed()
        return False
