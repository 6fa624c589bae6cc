"""Identifier generation for rules, executions and records."""

from cuid2 import cuid_wrapper

_next_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """New CUID2 string; used as the primary key of every stored row."""
    return _next_cuid()
