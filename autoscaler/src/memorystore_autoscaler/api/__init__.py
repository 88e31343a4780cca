"""
Adapters exposing the scaler to transports
"""

from .handlers import scale_cluster_local, scale_cluster_message, scale_cluster_http

__all__ = [
    "scale_cluster_local",
    "scale_cluster_message",
    "scale_cluster_http",
]
