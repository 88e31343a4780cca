"""CPU-only profile"""

from memorystore_autoscaler.core.scaling_profiles.rules import cpu

rule_set = {rule.name: rule for rule in (
    cpu.cpu_high_maximum_utilization,
    cpu.cpu_high_average_utilization,
    cpu.cpu_low_maximum_utilization,
    cpu.cpu_low_average_utilization,
)}
