# ABOUTME: Utilities package initialization for the Backstage backend plugins
# ABOUTME: Contains shared utilities for logging

"""
Shared utilities:
    - logging.py: Structured logging with correlation IDs
"""
