#!/usr/bin/env python3
"""
Rule analysis: evaluates flat threshold rules against a cluster's metrics
"""

import logging
import operator
from typing import Dict, Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from memorystore_autoscaler.exceptions import RuleSetError
from memorystore_autoscaler.models import (
    ClusterRequest,
    Direction,
    EngineAnalysis,
    MatchedCondition,
    Rule,
    RuleSet,
)
from memorystore_autoscaler.core.logging_config import get_cluster_logger

logger = logging.getLogger(__name__)


def _numeric(fn: Callable[[float, float], bool]) -> Callable[[Any, Any], bool]:
    def compare(fact_value, threshold) -> bool:
        if isinstance(fact_value, bool) or isinstance(threshold, bool):
            return False
        if not isinstance(fact_value, (int, float)) or not isinstance(threshold, (int, float)):
            return False
        return fn(fact_value, threshold)
    return compare


def _contains(fact_value, threshold) -> bool:
    return isinstance(threshold, (list, tuple, set)) and fact_value in threshold


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "equal": operator.eq,
    "notEqual": operator.ne,
    "lessThan": _numeric(operator.lt),
    "lessThanInclusive": _numeric(operator.le),
    "greaterThan": _numeric(operator.gt),
    "greaterThanInclusive": _numeric(operator.ge),
    "in": _contains,
    "notIn": lambda fact_value, threshold: isinstance(threshold, (list, tuple, set)) and not _contains(fact_value, threshold),
}


def parse_rule(name: str, definition: Union[Rule, Mapping[str, Any]]) -> Rule:
    """Validate a rule definition, raising RuleSetError when it is malformed"""
    if isinstance(definition, Rule):
        rule = definition
    else:
        try:
            rule = Rule.model_validate(definition)
        except ValidationError as e:
            raise RuleSetError(f"Malformed scaling rule '{name}': {e}") from e

    for condition in rule.conditions.all:
        if condition.operator not in OPERATORS:
            raise RuleSetError(
                f"Scaling rule '{rule.name}' uses unknown operator '{condition.operator}'"
            )
    return rule


def get_engine_analysis(cluster: ClusterRequest, rule_set: Optional[RuleSet]) -> Optional[EngineAnalysis]:
    """
    Run every rule of the rule set against the cluster's metrics.

    Returns None when no rule set is supplied. A rule fires when all of its
    conditions hold; a condition whose fact is missing never holds.
    """
    if not rule_set:
        return None

    log = get_cluster_logger(logger, cluster)
    log.debug(f"---- {cluster.scaling_method} rules engine ----")

    rules = [parse_rule(name, definition) for name, definition in rule_set.items()]
    facts = cluster.facts
    analysis = EngineAnalysis()

    for rule in rules:
        matched = []
        fired = True
        for condition in rule.conditions.all:
            fact_value = facts.get(condition.fact)
            if fact_value is None:
                fired = False
                break
            if not OPERATORS[condition.operator](fact_value, condition.value):
                fired = False
                break
            matched.append(MatchedCondition(
                fact=condition.fact,
                operator=condition.operator,
                value=condition.value,
                fact_result=fact_value,
            ))

        if not fired:
            continue

        event_type = rule.event.type
        log.debug(f"\tRule firing: {rule.event.params.message} => {event_type}")

        if event_type not in (Direction.IN.value, Direction.OUT.value):
            log.debug(f"\tIgnoring unexpectedly firing rule of type {event_type}")
            continue

        direction = Direction(event_type)
        analysis.firing_rule_count[direction] += 1
        analysis.matched_conditions[direction].extend(matched)
        analysis.scaling_metrics[direction].update(rule.event.params.scaling_metrics)

    return analysis


def get_scaling_direction(analysis: Optional[EngineAnalysis]) -> Direction:
    """OUT wins over IN; NONE when nothing fired"""
    if not analysis:
        return Direction.NONE

    if analysis.firing_rule_count[Direction.OUT] > 0:
        return Direction.OUT

    if analysis.firing_rule_count[Direction.IN] > 0:
        return Direction.IN

    return Direction.NONE
