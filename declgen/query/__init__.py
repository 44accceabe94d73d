"""AST query service interfaces and the libclang implementation."""

from .base import Declaration, QueryService, QuerySession

__all__ = ["Declaration", "QueryService", "QuerySession"]
