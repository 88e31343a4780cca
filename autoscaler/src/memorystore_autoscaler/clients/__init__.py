"""
Clients for external services
"""

from .cache import ClientCache
from .cluster_api import ClusterControlClient, OPERATION_METADATA_TYPES

__all__ = [
    "ClientCache",
    "ClusterControlClient",
    "OPERATION_METADATA_TYPES",
]
