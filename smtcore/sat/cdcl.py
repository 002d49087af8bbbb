"""
smtcore/sat/cdcl.py
===================
Conflict-driven clause learning (CDCL) boolean search engine.

Algorithm (Marques-Silva & Sakallah 1996; Moskewicz et al. 2001;
Eén & Sörensson 2003):

    loop:
        propagate            unit propagation over two watched literals,
                             interleaved with theory notifications
        on conflict:
            analyze          walk the trail backwards resolving antecedents
                             until one literal of the conflict level remains
                             (first unique implication point)
            backjump         to the second-highest level in the learned
                             clause, then let the clause propagate
        otherwise:
            decide           VSIDS (or lowest-index) variable, saved phase

    SAT   when every variable is assigned without conflict
    UNSAT when a conflict is derived at decision level 0

Internal literal encoding: variable v ≥ 1 maps to code 2v (positive) and
2v+1 (negative), so negation is ``code ^ 1`` and the variable is
``code >> 1``. The public surface uses DIMACS integers only.

Theory integration (DPLL(T)): every literal that enters the trail is
forwarded to the attached ``Theory`` once boolean propagation reaches a
fixpoint; theory conflicts and theory implications come back as clauses
and go through exactly the same analysis as propositional ones.
"""

from __future__ import annotations

import heapq
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from smtcore.core.config import SolverConfig
from smtcore.core.exceptions import ResourceLimitExceeded
from smtcore.core.types import (
    Clause,
    ClauseKind,
    CNFFormula,
    Literal,
    SolveResult,
    SolverStats,
    Verdict,
)
from smtcore.core.validators import normalize_clause, normalize_formula
from smtcore.theory.base import EmptyTheory, Theory

logger = logging.getLogger(__name__)

# Literal values, indexed by literal code
TRUE = 1
FALSE = 0
UNDEF = -1

_RESCALE_LIMIT = 1e100


def to_code(lit: Literal) -> int:
    return (lit << 1) if lit > 0 else ((-lit) << 1) | 1


def to_dimacs(code: int) -> Literal:
    v = code >> 1
    return -v if code & 1 else v


def luby(y: float, x: int) -> float:
    """Finite subsequences of the Luby sequence: 1 1 2 1 1 2 4 1 1 2 ..."""
    size, seq = 1, 0
    while size < x + 1:
        seq += 1
        size = 2 * size + 1
    while size - 1 != x:
        size = (size - 1) >> 1
        seq -= 1
        x = x % size
    return y ** seq


class _Clause:
    """A clause in the database. ``lits[0]`` and ``lits[1]`` are watched."""

    __slots__ = ("lits", "kind", "activity", "removed")

    def __init__(self, lits: List[int], kind: ClauseKind):
        self.lits = lits
        self.kind = kind
        self.activity = 0.0
        self.removed = False

    def __len__(self) -> int:
        return len(self.lits)

    def __repr__(self) -> str:
        body = " ".join(str(to_dimacs(c)) for c in self.lits)
        return f"_Clause({self.kind.value}: {body})"


class CDCLSolver:
    """Trail-based CDCL solver with an optional background theory.

    Usage:
        solver = CDCLSolver(3, [(1, 2), (-1, 3), (-3,)])
        result = solver.solve()
        result.satisfiable      # True
        result.literals()       # [-1, 2, -3]

    The solver is single-shot: ``solve()`` may be called repeatedly but
    always returns the verdict of the first run.
    """

    def __init__(
        self,
        num_vars: int,
        clauses: Iterable[Sequence[Literal]],
        theory: Optional[Theory] = None,
        config: Optional[SolverConfig] = None,
    ) -> None:
        self.num_vars = num_vars
        self.config = config or SolverConfig()
        self.theory = theory or EmptyTheory()
        self.stats = SolverStats()

        n_codes = 2 * (num_vars + 1)
        self._assigns: List[int] = [UNDEF] * n_codes
        self._level: List[int] = [0] * (num_vars + 1)
        self._reason: List[Optional[_Clause]] = [None] * (num_vars + 1)
        self._polarity: List[bool] = [self.config.default_phase] * (num_vars + 1)
        self._activity: List[float] = [0.0] * (num_vars + 1)
        self._seen: List[bool] = [False] * (num_vars + 1)
        self._watches: List[List[Tuple[_Clause, int]]] = [[] for _ in range(n_codes)]

        self._trail: List[int] = []
        self._trail_lim: List[int] = []
        self._qhead = 0          # next trail index for boolean propagation
        self._thead = 0          # next trail index to hand to the theory

        self._original: List[_Clause] = []
        self._learned: List[_Clause] = []
        self._units: List[int] = []
        self._var_inc = 1.0
        self._cla_inc = 1.0
        self._order: List[Tuple[float, int]] = []
        self._ok = True
        self._result: Optional[SolveResult] = None

        for v in range(1, num_vars + 1):
            self._push_order(v)

        for clause in clauses:
            self._add_clause(clause)
        self._max_learned = max(
            len(self._original) * self.config.learned_clause_limit_factor, 100.0
        )

    # ─── CLAUSE DATABASE ───────────────────────────────────────────

    def _add_clause(self, literals: Sequence[Literal]) -> None:
        normalized = normalize_clause(literals, self.num_vars)
        if normalized is None:
            logger.debug("Dropping tautological clause %s", tuple(literals))
            return
        if not normalized:
            logger.debug("Empty clause in input; formula is unsatisfiable")
            self._ok = False
            return
        codes = [to_code(l) for l in normalized]
        if len(codes) == 1:
            self._units.append(codes[0])
            return
        clause = _Clause(codes, ClauseKind.ORIGINAL)
        self._attach(clause)
        self._original.append(clause)

    def _attach(self, clause: _Clause) -> None:
        lits = clause.lits
        self._watches[lits[0] ^ 1].append((clause, lits[1]))
        self._watches[lits[1] ^ 1].append((clause, lits[0]))

    def _locked(self, clause: _Clause) -> bool:
        first = clause.lits[0]
        v = first >> 1
        return self._reason[v] is clause and self._assigns[first] == TRUE

    def _reduce_db(self) -> None:
        """Drop the less active half of the learned clauses.

        Binary clauses and clauses currently acting as antecedents are kept.
        Watch lists are cleaned lazily during propagation.
        """
        self._learned.sort(key=lambda c: (len(c) > 2, c.activity))
        keep_from = len(self._learned) // 2
        kept: List[_Clause] = []
        removed = 0
        for i, clause in enumerate(self._learned):
            if i < keep_from and len(clause) > 2 and not self._locked(clause):
                clause.removed = True
                removed += 1
            else:
                kept.append(clause)
        self._learned = kept
        self.stats.deleted_clauses += removed
        logger.debug("reduce_db: removed %d learned clause(s), %d kept", removed, len(kept))

    # ─── ASSIGNMENT ────────────────────────────────────────────────

    @property
    def decision_level(self) -> int:
        return len(self._trail_lim)

    def value(self, var: int) -> Optional[bool]:
        """Current truth value of ``var`` (None when unassigned)."""
        v = self._assigns[var << 1]
        return None if v == UNDEF else v == TRUE

    def _enqueue(self, code: int, reason: Optional[_Clause]) -> None:
        v = code >> 1
        self._assigns[code] = TRUE
        self._assigns[code ^ 1] = FALSE
        self._level[v] = self.decision_level
        self._reason[v] = reason
        self._trail.append(code)

    def _new_decision_level(self) -> None:
        self.theory.on_new_level()
        self._trail_lim.append(len(self._trail))
        if self.decision_level > self.stats.max_level:
            self.stats.max_level = self.decision_level

    def _cancel_until(self, level: int) -> None:
        """Undo every assignment above ``level`` (non-chronological backtrack)."""
        if self.decision_level <= level:
            return
        self.theory.on_backtrack(level)
        start = self._trail_lim[level]
        for i in range(len(self._trail) - 1, start - 1, -1):
            code = self._trail[i]
            v = code >> 1
            self._assigns[code] = UNDEF
            self._assigns[code ^ 1] = UNDEF
            self._reason[v] = None
            if self.config.phase_saving:
                self._polarity[v] = not (code & 1)
            self._push_order(v)
        del self._trail[start:]
        del self._trail_lim[level:]
        self._qhead = min(self._qhead, start)
        self._thead = min(self._thead, start)

    # ─── PROPAGATION ───────────────────────────────────────────────

    def _bcp(self) -> Optional[_Clause]:
        """Boolean constraint propagation over the two-watched-literal index."""
        assigns = self._assigns
        watches = self._watches
        while self._qhead < len(self._trail):
            p = self._trail[self._qhead]
            self._qhead += 1
            self.stats.propagations += 1
            false_lit = p ^ 1
            ws = watches[p]
            i = j = 0
            end = len(ws)
            while i < end:
                clause, blocker = ws[i]
                i += 1
                if clause.removed:
                    continue
                if assigns[blocker] == TRUE:
                    ws[j] = (clause, blocker)
                    j += 1
                    continue
                lits = clause.lits
                if lits[0] == false_lit:
                    lits[0], lits[1] = lits[1], false_lit
                first = lits[0]
                if assigns[first] == TRUE:
                    ws[j] = (clause, first)
                    j += 1
                    continue
                for k in range(2, len(lits)):
                    if assigns[lits[k]] != FALSE:
                        lits[1], lits[k] = lits[k], false_lit
                        watches[lits[1] ^ 1].append((clause, first))
                        break
                else:
                    ws[j] = (clause, first)
                    j += 1
                    if assigns[first] == FALSE:
                        while i < end:
                            ws[j] = ws[i]
                            j += 1
                            i += 1
                        del ws[j:]
                        self._qhead = len(self._trail)
                        return clause
                    self._enqueue(first, clause)
            del ws[j:]
        return None

    def _theory_clause(self, literals: Sequence[Literal]) -> _Clause:
        return _Clause([to_code(l) for l in literals], ClauseKind.THEORY)

    def _propagate(self) -> Optional[_Clause]:
        """Propagate to a joint boolean + theory fixpoint.

        Returns the conflicting clause (every literal false) or None.
        """
        while True:
            conflict = self._bcp()
            if conflict is not None:
                return conflict

            while self._thead < len(self._trail):
                code = self._trail[self._thead]
                self._thead += 1
                explanation = self.theory.on_assign(to_dimacs(code))
                if explanation is not None:
                    self.stats.theory_conflicts += 1
                    logger.debug("Theory conflict: %s", explanation)
                    return self._theory_clause(explanation)

            progressed = False
            for lit, explanation in self.theory.implied_literals():
                code = to_code(lit)
                value = self._assigns[code]
                if value == TRUE:
                    continue
                reason = self._theory_clause(explanation)
                if value == FALSE:
                    self.stats.theory_conflicts += 1
                    return reason
                self._enqueue(code, reason)
                self.stats.theory_propagations += 1
                progressed = True
            if not progressed and self._qhead == len(self._trail):
                return None

    # ─── CONFLICT ANALYSIS ─────────────────────────────────────────

    def _conflict_level(self, conflict: _Clause) -> int:
        return max((self._level[c >> 1] for c in conflict.lits), default=0)

    def _analyze(self, conflict: _Clause) -> Tuple[List[int], int]:
        """First-UIP conflict analysis.

        Returns:
            learnt:   learned clause, ``learnt[0]`` is the asserting literal
                      and ``learnt[1]`` (if any) has the backjump level
            bt_level: level to backjump to
        """
        seen = self._seen
        level = self._level
        current = self.decision_level
        learnt: List[int] = [0]
        path = 0
        p: Optional[int] = None
        index = len(self._trail) - 1
        clause: Optional[_Clause] = conflict

        while True:
            assert clause is not None, "implication graph broken: missing antecedent"
            if clause.kind is ClauseKind.LEARNED:
                self._bump_clause(clause)
            lits = clause.lits if p is None else clause.lits[1:]
            for q in lits:
                v = q >> 1
                if not seen[v] and level[v] > 0:
                    self._bump_var(v)
                    seen[v] = True
                    if level[v] >= current:
                        path += 1
                    else:
                        learnt.append(q)
            while not seen[self._trail[index] >> 1]:
                index -= 1
            p = self._trail[index]
            index -= 1
            clause = self._reason[p >> 1]
            seen[p >> 1] = False
            path -= 1
            if path <= 0:
                break
        learnt[0] = p ^ 1

        to_clear = list(learnt)
        if self.config.minimize_learned and len(learnt) > 2:
            abstract = 0
            for q in learnt[1:]:
                abstract |= self._abstract_level(q >> 1)
            kept = [learnt[0]]
            for q in learnt[1:]:
                if self._reason[q >> 1] is None or not self._lit_redundant(q, abstract, to_clear):
                    kept.append(q)
            learnt = kept

        bt_level = 0
        if len(learnt) > 1:
            best = 1
            for i in range(2, len(learnt)):
                if level[learnt[i] >> 1] > level[learnt[best] >> 1]:
                    best = i
            learnt[1], learnt[best] = learnt[best], learnt[1]
            bt_level = level[learnt[1] >> 1]

        for q in to_clear:
            seen[q >> 1] = False
        return learnt, bt_level

    def _abstract_level(self, v: int) -> int:
        return 1 << (self._level[v] & 31)

    def _lit_redundant(self, p: int, abstract_levels: int, to_clear: List[int]) -> bool:
        """Whether ``p`` is implied by the other literals of the learned clause.

        Explicit stack instead of recursion; literals marked along a failed
        walk are unmarked before returning.
        """
        seen = self._seen
        stack = [p]
        top = len(to_clear)
        while stack:
            q = stack.pop()
            reason = self._reason[q >> 1]
            for l in reason.lits[1:]:
                v = l >> 1
                if seen[v] or self._level[v] == 0:
                    continue
                if self._reason[v] is not None and (self._abstract_level(v) & abstract_levels):
                    seen[v] = True
                    stack.append(l)
                    to_clear.append(l)
                else:
                    for c in to_clear[top:]:
                        seen[c >> 1] = False
                    del to_clear[top:]
                    return False
        return True

    def _record_learnt(self, learnt: List[int]) -> None:
        self.stats.learned_clauses += 1
        if len(learnt) == 1:
            self._enqueue(learnt[0], None)
            return
        clause = _Clause(learnt, ClauseKind.LEARNED)
        self._attach(clause)
        self._learned.append(clause)
        self._bump_clause(clause)
        self._enqueue(learnt[0], clause)

    # ─── HEURISTICS ────────────────────────────────────────────────

    def _push_order(self, v: int) -> None:
        if self.config.decision_policy == "lowest":
            heapq.heappush(self._order, (0.0, v))
        else:
            heapq.heappush(self._order, (-self._activity[v], v))

    def _bump_var(self, v: int) -> None:
        if self.config.decision_policy == "lowest":
            return
        self._activity[v] += self._var_inc
        if self._activity[v] > _RESCALE_LIMIT:
            for i in range(1, self.num_vars + 1):
                self._activity[i] *= 1.0 / _RESCALE_LIMIT
            self._var_inc *= 1.0 / _RESCALE_LIMIT
            self._rebuild_order()
        elif self._assigns[v << 1] == UNDEF:
            heapq.heappush(self._order, (-self._activity[v], v))

    def _bump_clause(self, clause: _Clause) -> None:
        clause.activity += self._cla_inc
        if clause.activity > _RESCALE_LIMIT:
            for c in self._learned:
                c.activity *= 1.0 / _RESCALE_LIMIT
            self._cla_inc *= 1.0 / _RESCALE_LIMIT

    def _decay_activities(self) -> None:
        self._var_inc /= self.config.var_decay
        self._cla_inc /= self.config.clause_decay

    def _rebuild_order(self) -> None:
        self._order = []
        for v in range(1, self.num_vars + 1):
            if self._assigns[v << 1] == UNDEF:
                self._push_order(v)

    def _pick_branch(self) -> Optional[int]:
        """Pop the best unassigned variable; stale heap entries are skipped."""
        lowest = self.config.decision_policy == "lowest"
        order = self._order
        while order:
            key, v = heapq.heappop(order)
            if self._assigns[v << 1] != UNDEF:
                continue
            if not lowest and -key != self._activity[v]:
                continue
            positive = self._polarity[v] if self.config.phase_saving else self.config.default_phase
            return (v << 1) | (0 if positive else 1)
        return None

    # ─── SEARCH ────────────────────────────────────────────────────

    def _search(self, nof_conflicts: float) -> Optional[bool]:
        """Run until a verdict or until ``nof_conflicts`` conflicts (restart)."""
        conflicts_here = 0
        while True:
            conflict = self._propagate()
            if conflict is not None:
                self.stats.conflicts += 1
                conflicts_here += 1
                budget = self.config.max_conflicts
                if budget is not None and self.stats.conflicts > budget:
                    raise ResourceLimitExceeded(
                        f"Conflict budget of {budget} exhausted", conflicts=self.stats.conflicts
                    )
                conflict_level = self._conflict_level(conflict)
                if conflict_level == 0:
                    return False
                if conflict_level < self.decision_level:
                    self._cancel_until(conflict_level)
                learnt, bt_level = self._analyze(conflict)
                self._cancel_until(bt_level)
                self._record_learnt(learnt)
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(
                        "Learned %s, backjump to level %d",
                        [to_dimacs(c) for c in learnt], bt_level,
                    )
                self._decay_activities()
                continue

            if conflicts_here >= nof_conflicts:
                self._cancel_until(0)
                self.stats.restarts += 1
                return None
            if len(self._learned) - len(self._trail) >= self._max_learned:
                self._reduce_db()
            code = self._pick_branch()
            if code is None:
                return True
            self.stats.decisions += 1
            self._new_decision_level()
            self._enqueue(code, None)

    def _unsat(self) -> SolveResult:
        return SolveResult(verdict=Verdict.UNSATISFIABLE, stats=self.stats)

    def solve(self) -> SolveResult:
        """Decide the clause set (and the attached theory, if any)."""
        if self._result is not None:
            return self._result
        logger.info(
            "Solving %d variable(s), %d clause(s)",
            self.num_vars, len(self._original) + len(self._units),
        )
        if not self._ok:
            self._result = self._unsat()
            return self._result
        for code in self._units:
            value = self._assigns[code]
            if value == FALSE:
                self._result = self._unsat()
                return self._result
            if value == UNDEF:
                self._enqueue(code, None)

        status: Optional[bool] = None
        restart = 0
        while status is None:
            if self.config.restarts:
                limit = luby(2, restart) * self.config.restart_base
            else:
                limit = float("inf")
            status = self._search(limit)
            if status is None:
                restart += 1
                self._max_learned *= self.config.learned_clause_limit_increment

        if status:
            assignment: Dict[int, bool] = {
                v: self._assigns[v << 1] == TRUE for v in range(1, self.num_vars + 1)
            }
            self._result = SolveResult(
                verdict=Verdict.SATISFIABLE, assignment=assignment, stats=self.stats
            )
        else:
            self._result = self._unsat()
        logger.info("Verdict: %s (%s)", self._result.verdict.name, self.stats.summary())
        return self._result


def solve(
    clauses: Iterable[Sequence[Literal]],
    variable_count: int,
    config: Optional[SolverConfig] = None,
) -> SolveResult:
    """Decide a plain CNF clause set.

    Args:
        clauses:        clauses as sequences of non-zero DIMACS literals
        variable_count: number of variables; literals must stay within it
        config:         search parameters (defaults to SolverConfig())

    Returns:
        SolveResult: SATISFIABLE with a full assignment, or UNSATISFIABLE.
    """
    formula = CNFFormula(variable_count=variable_count, clauses=list(clauses))
    normalized, _ = normalize_formula(formula)
    return CDCLSolver(variable_count, normalized, config=config).solve()
