"""
Data models for the scaler
"""

from .cluster import (
    ClusterRequest,
    MetricValue,
    StateDatabase,
    Engine,
    Direction,
    ScalingMethodName,
    ScalingProfileName,
)
from .rules import (
    Condition,
    Rule,
    RuleEvent,
    RuleSet,
    MatchedCondition,
    EngineAnalysis,
)
from .state import ScalingState, Operation, OperationMetadata

__all__ = [
    "ClusterRequest",
    "MetricValue",
    "StateDatabase",
    "Engine",
    "Direction",
    "ScalingMethodName",
    "ScalingProfileName",
    "Condition",
    "Rule",
    "RuleEvent",
    "RuleSet",
    "MatchedCondition",
    "EngineAnalysis",
    "ScalingState",
    "Operation",
    "OperationMetadata",
]
