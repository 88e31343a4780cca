"""Memory-only profile"""

from memorystore_autoscaler.core.scaling_profiles.rules import memory

rule_set = {rule.name: rule for rule in (
    memory.memory_high_maximum_utilization,
    memory.memory_high_average_utilization,
    memory.memory_low_maximum_utilization,
    memory.memory_low_average_utilization,
)}
