"""Exception taxonomy for ledger operations.

Oracle conflicts are deliberately absent: a disagreeing or failed oracle is a
business outcome that moves the market to the dispute window, not an error.
"""

from __future__ import annotations


class OmniOracleError(Exception):
    """Base for all errors raised by the ledger core."""


class ValidationError(OmniOracleError):
    """Operation rejected before any state was touched."""

    def __init__(self, message: str, code: str = "invalid") -> None:
        super().__init__(message)
        self.code = code


class NotFoundError(OmniOracleError):
    """Operation referenced an unknown record."""

    code = "not_found"

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvariantViolation(OmniOracleError):
    """Probabilities left their bounds or stopped summing to one. Never expected."""
