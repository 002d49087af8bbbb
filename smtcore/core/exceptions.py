"""
smtcore/core/exceptions.py
==========================
Custom exception hierarchy for SMT-Core.

All exceptions carry structured context so callers can
programmatically handle different failure modes.

Theory conflicts and boolean conflicts are NOT exceptions: they are
ordinary control flow inside the search and end up as learned clauses
or as an ``UNSATISFIABLE`` verdict.
"""

from __future__ import annotations

from typing import Optional


class SMTCoreError(Exception):
    """Base exception for all SMT-Core errors."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.context = context or {}


class ParseError(SMTCoreError):
    """Raised when a problem description cannot be read.

    Carries the 1-based line number and the offending line (when known)
    so the CLI can point at the exact input location.
    """

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message, context)
        self.line_number = line_number
        self.line = line


class DimacsParseError(ParseError):
    """Malformed DIMACS CNF input (prelude, clause tokens or counts)."""

    pass


class EUFParseError(ParseError):
    """Malformed EUF equality declarations."""

    pass


class InvalidLiteralError(SMTCoreError):
    """Raised when a clause mentions literal 0 or a variable outside
    the declared range (in EUF mode: an atom index with no declaration)."""

    def __init__(self, message: str, literal: int, variable_count: int):
        super().__init__(
            message,
            context={"literal": literal, "variable_count": variable_count},
        )
        self.literal = literal
        self.variable_count = variable_count


class TheoryError(SMTCoreError):
    """Raised when the theory layer is misused (unknown term, bad checkpoint)."""

    pass


class ResourceLimitExceeded(SMTCoreError):
    """Raised when the configured conflict budget runs out before a verdict."""

    def __init__(self, message: str, conflicts: int):
        super().__init__(message, context={"conflicts": conflicts})
        self.conflicts = conflicts
