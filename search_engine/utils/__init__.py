"""
Shared utilities: logging, errors and JSON output.
"""
