"""
Utility package: configuration and logging.
"""
