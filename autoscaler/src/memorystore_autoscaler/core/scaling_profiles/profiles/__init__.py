"""
Built-in scaling profiles
"""
