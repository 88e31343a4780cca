"""
CPU utilization rules. Low-utilization rules only fire while no keys are
being evicted.
"""

from memorystore_autoscaler.models import Rule

NO_EVICTIONS = [
    {"fact": "maximum_evicted_keys", "operator": "equal", "value": 0},
    {"fact": "average_evicted_keys", "operator": "equal", "value": 0},
]

cpu_high_maximum_utilization = Rule.model_validate({
    "name": "cpu-high-maximum-utilization",
    "conditions": {
        "all": [
            {"fact": "cpu_maximum_utilization", "operator": "greaterThan", "value": 80},
        ],
    },
    "event": {
        "type": "OUT",
        "params": {
            "message": "high maximum CPU utilization",
            "scalingMetrics": ["cpu_maximum_utilization"],
        },
    },
})

cpu_high_average_utilization = Rule.model_validate({
    "name": "cpu-high-average-utilization",
    "conditions": {
        "all": [
            {"fact": "cpu_average_utilization", "operator": "greaterThan", "value": 70},
        ],
    },
    "event": {
        "type": "OUT",
        "params": {
            "message": "high average CPU utilization",
            "scalingMetrics": ["cpu_average_utilization"],
        },
    },
})

cpu_low_maximum_utilization = Rule.model_validate({
    "name": "cpu-low-maximum-utilization",
    "conditions": {
        "all": [
            {"fact": "cpu_maximum_utilization", "operator": "lessThan", "value": 60},
            {"fact": "cpu_average_utilization", "operator": "lessThan", "value": 40},
            *NO_EVICTIONS,
        ],
    },
    "event": {
        "type": "IN",
        "params": {
            "message": "low maximum CPU utilization",
            "scalingMetrics": ["cpu_maximum_utilization"],
        },
    },
})

cpu_low_average_utilization = Rule.model_validate({
    "name": "cpu-low-average-utilization",
    "conditions": {
        "all": [
            {"fact": "cpu_average_utilization", "operator": "lessThan", "value": 50},
            *NO_EVICTIONS,
        ],
    },
    "event": {
        "type": "IN",
        "params": {
            "message": "low average CPU utilization",
            "scalingMetrics": ["cpu_average_utilization"],
        },
    },
})
