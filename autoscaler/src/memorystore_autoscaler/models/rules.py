#!/usr/bin/env python3
"""
Rule definitions and rule analysis results
"""

from typing import Dict, Any, List, Optional, Set
from dataclasses import dataclass, field

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from memorystore_autoscaler.models.cluster import Direction


class Condition(BaseModel):
    """A single fact/operator/value comparison"""
    fact: str = Field(..., description="Metric name looked up in the fact table")
    operator: str = Field(..., description="Comparison operator name")
    value: Any = Field(..., description="Threshold the fact is compared against")


class RuleConditions(BaseModel):
    """Flat conjunction of conditions; every entry must hold for the rule to fire"""
    all: List[Condition]


class RuleEventParams(BaseModel):
    message: str = ""
    scaling_metrics: List[str] = Field(default_factory=list)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class RuleEvent(BaseModel):
    type: str = Field(..., description="IN or OUT")
    params: RuleEventParams = Field(default_factory=RuleEventParams)


class Rule(BaseModel):
    """A named rule: when all conditions hold, the event's direction is suggested"""
    name: str
    conditions: RuleConditions
    event: RuleEvent


RuleSet = Dict[str, Rule]


@dataclass
class MatchedCondition:
    """A satisfied condition of a firing rule together with the fact value it saw"""
    fact: str
    operator: str
    value: Any
    fact_result: Optional[float]


@dataclass
class EngineAnalysis:
    """Outcome of evaluating a rule set against a cluster's metrics"""
    firing_rule_count: Dict[Direction, int] = field(
        default_factory=lambda: {Direction.IN: 0, Direction.OUT: 0}
    )
    matched_conditions: Dict[Direction, List[MatchedCondition]] = field(
        default_factory=lambda: {Direction.IN: [], Direction.OUT: []}
    )
    scaling_metrics: Dict[Direction, Set[str]] = field(
        default_factory=lambda: {Direction.IN: set(), Direction.OUT: set()}
    )
