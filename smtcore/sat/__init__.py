"""smtcore/sat — Boolean search engine."""

from smtcore.sat.cdcl import CDCLSolver, solve

__all__ = ["CDCLSolver", "solve"]
