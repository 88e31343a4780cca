"""
Memorystore Cluster Autoscaler - scaler component

Decides whether and how far to resize a Memorystore cluster from its
utilization metrics, and applies the decision while respecting cooldowns and
in-flight operations.
"""

__version__ = "1.0.0"
