"""Execution engine support."""

from .context import RunContext

__all__ = ["RunContext"]
