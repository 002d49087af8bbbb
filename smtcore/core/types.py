"""
smtcore/core/types.py
=====================
Foundation type system for SMT-Core.
Every module imports from here. No circular dependencies.

Conventions:
  - A variable is a positive int 1..n.
  - A literal is a non-zero int in DIMACS style: +v asserts v, -v negates it.
  - A clause is a tuple of literals (a disjunction); a formula is a list of
    clauses (a conjunction).
  - A term is an int id handed out by a TermStore; ``Term`` is the
    structural record behind that id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

if TYPE_CHECKING:
    from smtcore.theory.terms import TermStore


Literal = int
Clause = Tuple[int, ...]
TermId = int


def lit_var(lit: Literal) -> int:
    """Variable of a DIMACS literal."""
    return lit if lit > 0 else -lit


def lit_sign(lit: Literal) -> bool:
    """True when the literal asserts its variable (positive literal)."""
    return lit > 0


# ─────────────────────────────────────────────
#  ENUMERATIONS
# ─────────────────────────────────────────────

class Verdict(Enum):
    SATISFIABLE   = "sat"
    UNSATISFIABLE = "unsat"


class ClauseKind(Enum):
    """Where a clause came from.

    ORIGINAL: part of the input, never deleted
    LEARNED:  derived by conflict analysis, may be deleted by reduce_db
    THEORY:   explanation produced by a theory, lives only as an antecedent
    """
    ORIGINAL = "original"
    LEARNED  = "learned"
    THEORY   = "theory"


# ─────────────────────────────────────────────
#  PROBLEM TYPES
# ─────────────────────────────────────────────

@dataclass
class CNFFormula:
    """A conjunction of clauses over variables 1..variable_count."""
    variable_count: int
    clauses:        List[Clause] = field(default_factory=list)

    def __post_init__(self):
        self.clauses = [tuple(c) for c in self.clauses]

    @property
    def clause_count(self) -> int:
        return len(self.clauses)

    def is_satisfied_by(self, assignment: Dict[int, bool]) -> bool:
        """Every clause has at least one literal true under ``assignment``."""
        return all(
            any(assignment.get(lit_var(l)) == lit_sign(l) for l in clause)
            for clause in self.clauses
        )


@dataclass(frozen=True)
class Term:
    """Structural record of an interned term: symbol(args...).

    A constant is a term with no arguments. Arguments are term ids of the
    same TermStore, so structurally equal terms share one id.
    """
    symbol: str
    args:   Tuple[TermId, ...] = ()

    @property
    def is_constant(self) -> bool:
        return not self.args

    @property
    def arity(self) -> int:
        return len(self.args)


@dataclass(frozen=True)
class EqualityAtom:
    """Boolean variable ↔ (in)equality between two terms.

    positive=True:  the variable being true means lhs = rhs
    positive=False: declared with ``/=``; the variable being true means
                    lhs ≠ rhs
    """
    lhs:      TermId
    rhs:      TermId
    positive: bool = True

    def is_equality_under(self, value: bool) -> bool:
        """Whether assigning ``value`` to the atom's variable asserts lhs = rhs."""
        return value == self.positive


@dataclass
class EUFProblem:
    """Parsed EUF input: interned terms, atom table (atom i ↔ variable i+1),
    and the boolean skeleton over atom variables."""
    store:   "TermStore"
    atoms:   List[EqualityAtom]
    formula: CNFFormula


# ─────────────────────────────────────────────
#  RESULTS
# ─────────────────────────────────────────────

@dataclass
class SolverStats:
    decisions:           int = 0
    propagations:        int = 0
    conflicts:           int = 0
    theory_conflicts:    int = 0
    theory_propagations: int = 0
    learned_clauses:     int = 0
    deleted_clauses:     int = 0
    restarts:            int = 0
    max_level:           int = 0

    def summary(self) -> str:
        return (
            f"decisions={self.decisions} propagations={self.propagations} "
            f"conflicts={self.conflicts} theory_conflicts={self.theory_conflicts} "
            f"learned={self.learned_clauses} deleted={self.deleted_clauses} "
            f"restarts={self.restarts}"
        )


@dataclass
class SolveResult:
    """Outcome of a solve: exactly one of the two verdicts.

    assignment: variable → truth value for every variable 1..n
                (empty when unsatisfiable).
    classes:    EUF mode only: final equivalence classes, rendered as
                strings, for model reconstruction.
    """
    verdict:    Verdict
    assignment: Dict[int, bool]        = field(default_factory=dict)
    stats:      SolverStats            = field(default_factory=SolverStats)
    classes:    Optional[List[Set[str]]] = None

    @property
    def satisfiable(self) -> bool:
        return self.verdict is Verdict.SATISFIABLE

    def literals(self) -> List[Literal]:
        """Satisfying assignment as signed literals ordered by variable."""
        return [v if self.assignment[v] else -v for v in sorted(self.assignment)]

    def true_variables(self) -> List[int]:
        return [v for v in sorted(self.assignment) if self.assignment[v]]

    def __str__(self) -> str:
        if not self.satisfiable:
            return "SolveResult(UNSATISFIABLE)"
        return f"SolveResult(SATISFIABLE, {len(self.assignment)} vars)"
