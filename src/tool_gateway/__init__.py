"""Tool gateway: uniform module tool calls and dependency-ordered batches."""

__version__ = "0.1.0"
