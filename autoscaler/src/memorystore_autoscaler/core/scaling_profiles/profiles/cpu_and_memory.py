"""Default profile: every CPU and memory rule"""

from memorystore_autoscaler.core.scaling_profiles.profiles import cpu, memory

rule_set = {**cpu.rule_set, **memory.rule_set}
