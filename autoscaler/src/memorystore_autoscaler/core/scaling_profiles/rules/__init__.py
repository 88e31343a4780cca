"""
Built-in scaling rules
"""
