#!/usr/bin/env python3
"""
Cache of external service clients, keyed by the target they talk to
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, Tuple

logger = logging.getLogger(__name__)


class ClientCache:
    """
    Lazily constructs and memoizes clients.

    One client is built per distinct (kind, identity) pair, e.g. one Mongo
    client per connection URL or one SQL engine per database URL. Clients are
    safe to share between invocations.
    """

    def __init__(self):
        self._clients: Dict[Tuple[str, Hashable], Any] = {}
        self._lock = threading.Lock()

    def get(self, kind: str, identity: Hashable, factory: Callable[[], Any]) -> Any:
        """Return the cached client for (kind, identity), building it on first use"""
        key = (kind, identity)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                logger.debug(f"Creating {kind} client for {identity}")
                client = factory()
                self._clients[key] = client
            return client

    def __contains__(self, key: Tuple[str, Hashable]) -> bool:
        return key in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    def clear(self):
        """Drop every cached client, closing those that support it"""
        with self._lock:
            for (kind, identity), client in self._clients.items():
                close = getattr(client, "close", None) or getattr(client, "dispose", None)
                if callable(close):
                    try:
                        close()
                    except Exception as e:
                        logger.warning(f"Failed to close {kind} client for {identity}: {e}")
            self._clients.clear()
