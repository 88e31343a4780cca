"""
Core scaler modules: rule analysis, size calculation, cooldown, operation
reconciliation and orchestration
"""
