"""
smtcore/theory/euf.py
=====================
Theory of equality with uninterpreted functions (EUF), bridged onto the
CDCL engine.

Each boolean variable v (1-based) is bound to ``atoms[v-1]``, an equality
between two terms. Whenever the search engine assigns v, the bridge
asserts the corresponding equality or disequality in a
CongruenceClosure; when the engine backtracks, the bridge rewinds the
closure to the checkpoint it took when that level was opened. The two
never drift apart: one checkpoint per open decision level, popped in
step with the trail.

Theory conflicts become clauses:

    minimal:  ¬r₁ ∨ … ∨ ¬rₖ  where r₁…rₖ are the atom literals on the
              proof-forest path that forces the violated disequality
    all:      the negation of every atom literal currently asserted

Both are sound. The second is larger and learns less.

Theory propagation: after every round of assertions, any unassigned atom
whose truth is already entailed by the classes is returned together with
its explanation, and becomes an implied literal on the trail.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from smtcore.core.config import TheoryConfig
from smtcore.core.types import Clause, EqualityAtom, Literal, lit_var
from smtcore.theory.base import Theory
from smtcore.theory.congruence import Conflict, CongruenceClosure
from smtcore.theory.terms import TermStore

logger = logging.getLogger(__name__)


class EUFTheory(Theory):
    """DPLL(T) bridge between trail events and a CongruenceClosure.

    Usage:
        theory = EUFTheory(store, atoms)
        solver = CDCLSolver(len(atoms), clauses, theory=theory)
        result = solver.solve()
        theory.model_classes()   # final equivalence classes when SAT
    """

    def __init__(
        self,
        store: TermStore,
        atoms: Sequence[EqualityAtom],
        config: Optional[TheoryConfig] = None,
    ) -> None:
        self.store = store
        self.atoms = list(atoms)
        self.config = config or TheoryConfig()
        self.cc = CongruenceClosure(store)

        self._marks: List[int] = []          # cc checkpoint per open level
        self._asserted: List[Literal] = []   # atom literals in trail order
        self._asserted_lim: List[int] = []
        self._assigned: Dict[int, bool] = {}
        self._scan_mark: Optional[int] = None  # journal depth at the last scan

    @property
    def level(self) -> int:
        return len(self._marks)

    # ─── TRAIL EVENTS ──────────────────────────────────────────────

    def on_new_level(self) -> None:
        self._marks.append(self.cc.checkpoint())
        self._asserted_lim.append(len(self._asserted))

    def on_backtrack(self, level: int) -> None:
        if level >= len(self._marks):
            return
        self._scan_mark = None
        self.cc.undo_to(self._marks[level])
        start = self._asserted_lim[level]
        for lit in self._asserted[start:]:
            del self._assigned[lit_var(lit)]
        del self._asserted[start:]
        del self._asserted_lim[level:]
        del self._marks[level:]
        logger.debug("EUF backtrack to level %d (%d literal(s) live)", level, len(self._asserted))

    def on_assign(self, lit: Literal) -> Optional[Clause]:
        var = lit_var(lit)
        if var > len(self.atoms):
            return None
        atom = self.atoms[var - 1]
        self._assigned[var] = lit > 0
        self._asserted.append(lit)
        if atom.is_equality_under(lit > 0):
            conflict = self.cc.assert_equal(atom.lhs, atom.rhs, reason=lit)
        else:
            conflict = self.cc.assert_not_equal(atom.lhs, atom.rhs, reason=lit)
        if conflict is None:
            return None
        return self._conflict_clause(conflict)

    def _conflict_clause(self, conflict: Conflict) -> Clause:
        if self.config.conflict_explanation == "all":
            reasons = list(self._asserted)
        else:
            reasons = list(conflict.reasons)
        clause = tuple(-r for r in reasons)
        logger.debug(
            "EUF conflict %s = %s: clause %s",
            self.store.render(conflict.left), self.store.render(conflict.right), clause,
        )
        return clause

    # ─── THEORY PROPAGATION ────────────────────────────────────────

    def implied_literals(self) -> List[Tuple[Literal, Clause]]:
        """Unassigned atoms whose value the current classes newly decide.

        Only atoms with a side in a class touched since the previous call
        are re-examined; every atom is re-examined after a backtrack. The
        engine enqueues each returned literal, so nothing entailed is lost.
        """
        if not self.config.theory_propagation:
            return []
        mark = self.cc.checkpoint()
        if self._scan_mark is None:
            touched = None
        else:
            touched = self.cc.touched_since(self._scan_mark)
        self._scan_mark = mark
        if touched is not None and not touched:
            return []

        implied: List[Tuple[Literal, Clause]] = []
        rep = self.cc.representative
        for var, atom in enumerate(self.atoms, start=1):
            if var in self._assigned:
                continue
            if touched is not None and rep(atom.lhs) not in touched and rep(atom.rhs) not in touched:
                continue
            if self.cc.are_equal(atom.lhs, atom.rhs):
                lit = var if atom.positive else -var
                reasons = self._justify(self.cc.explain(atom.lhs, atom.rhs))
            elif self.cc.are_disequal(atom.lhs, atom.rhs):
                lit = -var if atom.positive else var
                reasons = self._justify(self.cc.explain_disequal(atom.lhs, atom.rhs))
            else:
                continue
            implied.append((lit, (lit,) + tuple(-r for r in reasons)))
        return implied

    def _justify(self, reasons: List[Literal]) -> List[Literal]:
        if self.config.conflict_explanation == "all":
            return list(self._asserted)
        return reasons

    # ─── MODEL ─────────────────────────────────────────────────────

    def model_classes(self) -> List[Set[str]]:
        """Current equivalence classes as sets of rendered terms."""
        return [
            {self.store.render(t) for t in group}
            for group in self.cc.classes()
        ]

    def is_consistent_with(self, assignment: Dict[int, bool]) -> bool:
        """Re-check an assignment from scratch in a fresh closure."""
        cc = CongruenceClosure(self.store)
        equalities = []
        disequalities = []
        for var, atom in enumerate(self.atoms, start=1):
            if var not in assignment:
                continue
            if atom.is_equality_under(assignment[var]):
                equalities.append(atom)
            else:
                disequalities.append(atom)
        for atom in equalities:
            if cc.assert_equal(atom.lhs, atom.rhs) is not None:
                return False
        for atom in disequalities:
            if cc.assert_not_equal(atom.lhs, atom.rhs) is not None:
                return False
        return True
