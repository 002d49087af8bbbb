"""
smtcore/__init__.py — Public API exports
"""

from smtcore.api.drivers import (
    format_result,
    solve_euf,
    solve_sat,
    solve_text,
    verify_model,
)
from smtcore.core.config import SMTConfig, SolverConfig, TheoryConfig
from smtcore.core.exceptions import (
    DimacsParseError,
    EUFParseError,
    InvalidLiteralError,
    ParseError,
    ResourceLimitExceeded,
    SMTCoreError,
    TheoryError,
)
from smtcore.core.types import (
    CNFFormula,
    EqualityAtom,
    EUFProblem,
    SolveResult,
    SolverStats,
    Term,
    Verdict,
)
from smtcore.sat.cdcl import CDCLSolver, solve
from smtcore.theory.congruence import Conflict, CongruenceClosure
from smtcore.theory.euf import EUFTheory
from smtcore.theory.terms import TermStore
from smtcore.version import __version__

__all__ = [
    "solve",
    "solve_sat",
    "solve_euf",
    "solve_text",
    "format_result",
    "verify_model",
    "CDCLSolver",
    "TermStore",
    "CongruenceClosure",
    "Conflict",
    "EUFTheory",
    "SMTConfig",
    "SolverConfig",
    "TheoryConfig",
    "CNFFormula",
    "EqualityAtom",
    "EUFProblem",
    "SolveResult",
    "SolverStats",
    "Term",
    "Verdict",
    "SMTCoreError",
    "ParseError",
    "DimacsParseError",
    "EUFParseError",
    "InvalidLiteralError",
    "TheoryError",
    "ResourceLimitExceeded",
    "__version__",
]
