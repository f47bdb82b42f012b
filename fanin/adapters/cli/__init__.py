"""Command-line interface adapters.

Provides CLI commands for running aggregations:
- fail_fast, fail_partial, fail_soft, completion_order: fan out and report
- services: list the configured services
"""
