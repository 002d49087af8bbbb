"""
smtcore/core/validators.py
==========================
Input validation utilities for SMT-Core.

Validates:
    - Literals (non-zero, within the declared variable range)
    - Clauses (duplicate literals collapsed, tautologies detected)
    - Formulas (variable count non-negative, every clause valid)
    - EUF problems (atoms reference known terms, clause variables
      reference declared atoms)

These validators run at API boundaries, not in hot search paths.
All validation failures raise **SMTCoreError** subclasses already defined.
Silent failures are forbidden: every bad input produces a typed exception
with structured context.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from smtcore.core.exceptions import InvalidLiteralError, SMTCoreError
from smtcore.core.types import Clause, CNFFormula, EUFProblem, lit_var

logger = logging.getLogger(__name__)


# ─── LITERALS ─────────────────────────────────────────────────────

def validate_literal(lit: int, variable_count: int) -> None:
    """Raise InvalidLiteralError unless ``lit`` names a variable in 1..n."""
    if isinstance(lit, bool) or not isinstance(lit, int):
        raise InvalidLiteralError(
            f"Literal {lit!r} is not an integer", literal=lit, variable_count=variable_count
        )
    if lit == 0:
        raise InvalidLiteralError(
            "Literal 0 is reserved as the clause terminator",
            literal=lit,
            variable_count=variable_count,
        )
    if lit_var(lit) > variable_count:
        raise InvalidLiteralError(
            f"Literal {lit} refers to variable {lit_var(lit)} but only "
            f"{variable_count} variable(s) are declared",
            literal=lit,
            variable_count=variable_count,
        )


# ─── CLAUSES ──────────────────────────────────────────────────────

def normalize_clause(literals: Iterable[int], variable_count: int) -> Optional[Clause]:
    """Validate and canonicalise a clause.

    Duplicate literals are collapsed (first occurrence wins the order).
    Returns None for a tautology (both v and -v present): such a clause
    is satisfied by every assignment and is discarded.
    """
    seen = set()
    out: List[int] = []
    for lit in literals:
        validate_literal(lit, variable_count)
        if -lit in seen:
            return None
        if lit not in seen:
            seen.add(lit)
            out.append(lit)
    return tuple(out)


def normalize_formula(formula: CNFFormula) -> Tuple[List[Clause], int]:
    """Validate every clause of ``formula``.

    Returns:
        clauses:     normalised clauses, tautologies removed
        tautologies: number of discarded tautological clauses
    """
    if formula.variable_count < 0:
        raise SMTCoreError(
            "Variable count must be non-negative",
            context={"variable_count": formula.variable_count},
        )
    clauses: List[Clause] = []
    tautologies = 0
    for clause in formula.clauses:
        normalized = normalize_clause(clause, formula.variable_count)
        if normalized is None:
            tautologies += 1
            continue
        clauses.append(normalized)
    if tautologies:
        logger.warning("Discarded %d tautological clause(s)", tautologies)
    return clauses, tautologies


# ─── EUF ──────────────────────────────────────────────────────────

def validate_euf_problem(problem: EUFProblem) -> None:
    """Check the atom table against the term store and the clause set.

    Raises:
        SMTCoreError:        an atom references a term id the store lacks
        InvalidLiteralError: a clause references an undeclared atom
    """
    n_terms = len(problem.store)
    for index, atom in enumerate(problem.atoms, start=1):
        for side in (atom.lhs, atom.rhs):
            if not 0 <= side < n_terms:
                raise SMTCoreError(
                    f"Atom {index} references unknown term id {side}",
                    context={"atom": index, "term": side, "term_count": n_terms},
                )
    for clause in problem.formula.clauses:
        for lit in clause:
            validate_literal(lit, len(problem.atoms))
