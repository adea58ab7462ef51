"""
aiql/core/exceptions.py
=======================
Custom exception hierarchy for the AIQL reasoning core.

Reasoning operations never raise: an unprovable goal, a failed
unification or an inconsistent knowledge base are reported as values.
Exceptions are reserved for the boundaries (loading, validation,
configuration) and carry structured context so callers can handle
different failure modes programmatically.
"""

from __future__ import annotations
from typing import Any, List, Optional


class AIQLError(Exception):
    """Base exception for all AIQL reasoning errors."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.context = context or {}


class MalformedNodeError(AIQLError):
    """Raised when plain data cannot be turned into a node, statement or expression."""

    def __init__(self, message: str, payload: Any = None, context: Optional[dict] = None):
        super().__init__(message, context)
        self.payload = payload


class ValidationError(AIQLError):
    """Raised when validators find problems in otherwise well-formed nodes."""

    def __init__(self, message: str, errors: List[str], context: Optional[dict] = None):
        super().__init__(message, context)
        self.errors = errors


class OntologyLoadError(AIQLError):
    """Raised when an ontology file cannot be parsed or is structurally invalid."""

    pass


class ConfigurationError(AIQLError):
    """Raised when a configuration value is out of range or unknown."""

    pass
