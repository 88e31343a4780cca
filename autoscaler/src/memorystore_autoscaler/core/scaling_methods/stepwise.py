"""
Stepwise scaling method, the default. Adds or removes a fixed number of shards.
"""

from typing import Optional

from memorystore_autoscaler.models import ClusterRequest, Direction, EngineAnalysis, ScalingMethodName
from .base import ScalingMethod


class StepwiseMethod(ScalingMethod):
    name = ScalingMethodName.STEPWISE.value

    def suggest_size(self, cluster: ClusterRequest, direction: Direction,
                     analysis: Optional[EngineAnalysis]) -> int:
        if direction == Direction.OUT:
            return cluster.current_size + cluster.step_size
        if direction == Direction.IN:
            return cluster.current_size - cluster.step_size
        return cluster.current_size
