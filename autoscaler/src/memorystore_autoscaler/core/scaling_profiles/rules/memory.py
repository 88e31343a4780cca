"""
Memory utilization rules
"""

from memorystore_autoscaler.models import Rule
from .cpu import NO_EVICTIONS

memory_high_maximum_utilization = Rule.model_validate({
    "name": "memory-high-maximum-utilization",
    "conditions": {
        "all": [
            {"fact": "memory_maximum_utilization", "operator": "greaterThan", "value": 80},
        ],
    },
    "event": {
        "type": "OUT",
        "params": {
            "message": "high maximum memory utilization",
            "scalingMetrics": ["memory_maximum_utilization"],
        },
    },
})

memory_high_average_utilization = Rule.model_validate({
    "name": "memory-high-average-utilization",
    "conditions": {
        "all": [
            {"fact": "memory_average_utilization", "operator": "greaterThan", "value": 70},
        ],
    },
    "event": {
        "type": "OUT",
        "params": {
            "message": "high average memory utilization",
            "scalingMetrics": ["memory_average_utilization"],
        },
    },
})

memory_low_maximum_utilization = Rule.model_validate({
    "name": "memory-low-maximum-utilization",
    "conditions": {
        "all": [
            {"fact": "memory_maximum_utilization", "operator": "lessThan", "value": 60},
            {"fact": "memory_average_utilization", "operator": "lessThan", "value": 40},
            *NO_EVICTIONS,
        ],
    },
    "event": {
        "type": "IN",
        "params": {
            "message": "low maximum memory utilization",
            "scalingMetrics": ["memory_maximum_utilization"],
        },
    },
})

memory_low_average_utilization = Rule.model_validate({
    "name": "memory-low-average-utilization",
    "conditions": {
        "all": [
            {"fact": "memory_average_utilization", "operator": "lessThan", "value": 50},
            *NO_EVICTIONS,
        ],
    },
    "event": {
        "type": "IN",
        "params": {
            "message": "low average memory utilization",
            "scalingMetrics": ["memory_average_utilization"],
        },
    },
})
