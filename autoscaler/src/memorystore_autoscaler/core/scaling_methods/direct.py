"""
Direct scaling method. Always suggests the configured maximum size; rules are
not evaluated.
"""

from typing import Optional

from memorystore_autoscaler.models import ClusterRequest, Direction, EngineAnalysis, ScalingMethodName
from .base import ScalingMethod


class DirectMethod(ScalingMethod):
    name = ScalingMethodName.DIRECT.value
    uses_rules = False

    def suggest_size(self, cluster: ClusterRequest, direction: Direction,
                     analysis: Optional[EngineAnalysis]) -> int:
        return cluster.max_size
