"""
smtcore/theory/congruence.py
============================
Incremental, backtrackable congruence closure over a TermStore.

Mathematical basis:
    Given asserted equalities E and disequalities D over ground terms,
    the congruence closure ~ is the least equivalence relation that
    contains E and is closed under

        a₁~b₁, …, aₙ~bₙ  ⟹  f(a₁…aₙ) ~ f(b₁…bₙ)

    E ∪ D is EUF-satisfiable iff no (s, t) ∈ D has s ~ t.

    Reference: Nieuwenhuis & Oliveras (2007),
    "Fast congruence closure and extensions".

Data structures:
    rep[t]          representative of t (kept eager: find is O(1))
    members[r]      terms whose representative is r
    uses[r]         applications with an argument in class r
    signature table (symbol, rep(arg₁)…rep(argₙ)) → application
    disequalities   (s, t, reason) plus a per-class index
    proof forest    one edge per successful merge, labelled with the
                    asserted reason or the congruent pair of applications

Every mutation is appended to a journal; ``checkpoint()`` returns the
journal length and ``undo_to(mark)`` pops entries back to it, so classes
split back exactly into their earlier shape. Congruence propagation runs
off an explicit worklist.

An assertion that would produce a contradiction is rolled back before
returning its ``Conflict``: the engine never holds an inconsistent state.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Set, Tuple

from smtcore.core.exceptions import TheoryError
from smtcore.core.types import TermId
from smtcore.theory.terms import TermStore

logger = logging.getLogger(__name__)

Signature = Tuple[str, Tuple[TermId, ...]]

# Proof-forest edge labels
_ASSERTED = "asserted"
_CONGRUENT = "congruent"


@dataclass(frozen=True)
class Conflict:
    """A contradiction between asserted facts.

    reasons: the caller-supplied reasons of the asserted (dis)equalities
             that jointly force ``left`` = ``right`` while ``left`` ≠ ``right``
             is asserted. Reasons given as None are omitted.
    """
    left:    TermId
    right:   TermId
    reasons: Tuple[Hashable, ...]


class CongruenceClosure:
    """Congruence closure engine with checkpoint/undo.

    Usage:
        store = TermStore()
        a, b = store.constant("a"), store.constant("b")
        fa, fb = store.apply("f", a), store.apply("f", b)

        cc = CongruenceClosure(store)
        mark = cc.checkpoint()
        cc.assert_equal(a, b, reason=1)
        cc.are_equal(fa, fb)          # True, by congruence
        cc.assert_not_equal(fa, fb, reason=-2)   # Conflict(reasons=(1, -2))
        cc.undo_to(mark)
        cc.are_equal(fa, fb)          # False again

    The engine covers the terms present in ``store`` at construction time.
    """

    def __init__(self, store: TermStore) -> None:
        self.store = store
        n = len(store)
        self._size = n
        self._rep: List[TermId] = list(range(n))
        self._members: List[List[TermId]] = [[t] for t in range(n)]
        self._uses: List[List[TermId]] = [[] for _ in range(n)]
        self._diseq_of: List[List[int]] = [[] for _ in range(n)]
        self._diseqs: List[Tuple[TermId, TermId, Optional[Hashable]]] = []
        self._edges: List[List[Tuple[TermId, tuple]]] = [[] for _ in range(n)]
        self._sig: Dict[Signature, TermId] = {}
        self._journal: List[tuple] = []

        for t in range(n):
            self._uses[t] = list(store.parents(t))
            term = store.term(t)
            if not term.is_constant:
                self._sig[(term.symbol, term.args)] = t

    # ─── QUERIES ───────────────────────────────────────────────────

    def _check(self, t: TermId) -> None:
        if not isinstance(t, int) or not 0 <= t < self._size:
            raise TheoryError(
                f"Term id {t!r} is not covered by this congruence closure",
                context={"term": t, "term_count": self._size},
            )

    def representative(self, t: TermId) -> TermId:
        self._check(t)
        return self._rep[t]

    def are_equal(self, a: TermId, b: TermId) -> bool:
        """Whether a = b is entailed by the live equalities."""
        self._check(a)
        self._check(b)
        return self._rep[a] == self._rep[b]

    def are_disequal(self, a: TermId, b: TermId) -> bool:
        """Whether a ≠ b is entailed (a registered disequality links the classes)."""
        self._check(a)
        self._check(b)
        return self._find_diseq(self._rep[a], self._rep[b]) is not None

    def _find_diseq(self, ra: TermId, rb: TermId) -> Optional[int]:
        if ra == rb:
            return None
        rep = self._rep
        la, lb = self._diseq_of[ra], self._diseq_of[rb]
        for idx in (la if len(la) <= len(lb) else lb):
            c, d, _ = self._diseqs[idx]
            rc, rd = rep[c], rep[d]
            if (rc == ra and rd == rb) or (rc == rb and rd == ra):
                return idx
        return None

    def classes(self) -> List[List[TermId]]:
        """Current partition, each class sorted, classes ordered by smallest member."""
        groups: Dict[TermId, List[TermId]] = {}
        for t in range(self._size):
            groups.setdefault(self._rep[t], []).append(t)
        return sorted(groups.values())

    @property
    def disequality_count(self) -> int:
        return len(self._diseqs)

    # ─── ASSERTIONS ────────────────────────────────────────────────

    def assert_equal(
        self, a: TermId, b: TermId, reason: Optional[Hashable] = None
    ) -> Optional[Conflict]:
        """Merge the classes of a and b and close under congruence.

        Returns None on success (including when a = b already holds), or a
        Conflict when the merge would equate two terms asserted unequal;
        in that case the state is left exactly as before the call.
        """
        self._check(a)
        self._check(b)
        if self._rep[a] == self._rep[b]:
            return None
        mark = len(self._journal)
        conflict = self._merge(a, b, reason)
        if conflict is not None:
            self.undo_to(mark)
            logger.debug("Equality %d = %d conflicts: %s", a, b, conflict.reasons)
        return conflict

    def assert_not_equal(
        self, a: TermId, b: TermId, reason: Optional[Hashable] = None
    ) -> Optional[Conflict]:
        """Record a ≠ b.

        Returns a Conflict (with the explanation of a = b plus ``reason``)
        when a and b are already in one class. Re-asserting an entailed
        disequality is a no-op.
        """
        self._check(a)
        self._check(b)
        ra, rb = self._rep[a], self._rep[b]
        if ra == rb:
            reasons = self.explain(a, b)
            if reason is not None and reason not in reasons:
                reasons.append(reason)
            logger.debug("Disequality %d != %d conflicts: %s", a, b, reasons)
            return Conflict(left=a, right=b, reasons=tuple(reasons))
        if self._find_diseq(ra, rb) is not None:
            return None
        idx = len(self._diseqs)
        self._diseqs.append((a, b, reason))
        self._diseq_of[ra].append(idx)
        self._diseq_of[rb].append(idx)
        self._journal.append(("diseq", ra, rb))
        return None

    def _merge(self, a: TermId, b: TermId, reason: Optional[Hashable]) -> Optional[Conflict]:
        rep = self._rep
        pending = deque([(a, b, (_ASSERTED, reason))])
        while pending:
            x, y, label = pending.popleft()
            rx, ry = rep[x], rep[y]
            if rx == ry:
                continue

            self._edges[x].append((y, label))
            self._edges[y].append((x, label))
            self._journal.append(("edge", x, y))

            idx = self._find_diseq(rx, ry)

            # union by size: fold the smaller class into the larger one
            if len(self._members[rx]) > len(self._members[ry]):
                rx, ry = ry, rx
            self._journal.append((
                "merge", rx, ry,
                len(self._members[ry]), len(self._uses[ry]), len(self._diseq_of[ry]),
            ))
            for t in self._members[rx]:
                rep[t] = ry
            self._members[ry].extend(self._members[rx])

            for u in self._uses[rx]:
                key = self._signature(u)
                v = self._sig.get(key)
                if v is None:
                    self._sig[key] = u
                    self._journal.append(("sig", key))
                elif rep[v] != rep[u]:
                    pending.append((u, v, (_CONGRUENT, (u, v))))
            self._uses[ry].extend(self._uses[rx])
            self._diseq_of[ry].extend(self._diseq_of[rx])

            if idx is not None:
                # c and d now share a class; the caller undoes this merge
                c, d, diseq_reason = self._diseqs[idx]
                reasons = self.explain(c, d)
                if diseq_reason is not None and diseq_reason not in reasons:
                    reasons.append(diseq_reason)
                return Conflict(left=c, right=d, reasons=tuple(reasons))
        return None

    def _signature(self, t: TermId) -> Signature:
        term = self.store.term(t)
        rep = self._rep
        return (term.symbol, tuple(rep[a] for a in term.args))

    # ─── BACKTRACKING ──────────────────────────────────────────────

    def checkpoint(self) -> int:
        """Opaque mark for ``undo_to``."""
        return len(self._journal)

    def touched_since(self, mark: int) -> Set[TermId]:
        """Current representatives of classes merged or given a disequality
        after ``mark``. Queries about any other pair of classes are unchanged."""
        rep = self._rep
        touched: Set[TermId] = set()
        for entry in self._journal[mark:]:
            if entry[0] in ("merge", "diseq"):
                touched.add(rep[entry[1]])
                touched.add(rep[entry[2]])
        return touched

    def undo_to(self, mark: int) -> None:
        """Revert every assertion made after ``mark`` was taken.

        Raises:
            TheoryError: if ``mark`` is not a reachable checkpoint.
        """
        if not 0 <= mark <= len(self._journal):
            raise TheoryError(
                f"Cannot undo to checkpoint {mark}; journal depth is {len(self._journal)}",
                context={"mark": mark, "depth": len(self._journal)},
            )
        journal = self._journal
        while len(journal) > mark:
            entry = journal.pop()
            kind = entry[0]
            if kind == "merge":
                _, rx, ry, n_members, n_uses, n_diseqs = entry
                moved = self._members[ry][n_members:]
                for t in moved:
                    self._rep[t] = rx
                del self._members[ry][n_members:]
                del self._uses[ry][n_uses:]
                del self._diseq_of[ry][n_diseqs:]
            elif kind == "sig":
                del self._sig[entry[1]]
            elif kind == "edge":
                _, x, y = entry
                self._edges[x].pop()
                self._edges[y].pop()
            elif kind == "diseq":
                _, ra, rb = entry
                self._diseqs.pop()
                self._diseq_of[ra].pop()
                self._diseq_of[rb].pop()

    # ─── EXPLANATIONS ──────────────────────────────────────────────

    def explain(self, a: TermId, b: TermId) -> List[Hashable]:
        """Reasons of the asserted equalities that justify a = b.

        Walks the proof forest; congruence edges are expanded into the
        explanations of their argument pairs. The result holds each reason
        once, in discovery order.

        Raises:
            TheoryError: if a = b is not entailed.
        """
        if not self.are_equal(a, b):
            raise TheoryError(
                f"Cannot explain {a} = {b}: the terms are not equal",
                context={"left": a, "right": b},
            )
        reasons: List[Hashable] = []
        found: Set[Hashable] = set()
        done: Set[Tuple[TermId, TermId]] = set()
        todo = [(a, b)]
        while todo:
            x, y = todo.pop()
            if x == y or (x, y) in done:
                continue
            done.add((x, y))
            for kind, data in self._path(x, y):
                if kind == _ASSERTED:
                    if data is not None and data not in found:
                        found.add(data)
                        reasons.append(data)
                    continue
                s, t = data
                for p, q in zip(self.store.term(s).args, self.store.term(t).args):
                    if p != q:
                        todo.append((p, q))
        return reasons

    def explain_disequal(self, a: TermId, b: TermId) -> List[Hashable]:
        """Reasons that justify a ≠ b: one disequality plus the equalities
        linking its endpoints to a and b.

        Raises:
            TheoryError: if a ≠ b is not entailed.
        """
        idx = self._find_diseq(self.representative(a), self.representative(b))
        if idx is None:
            raise TheoryError(
                f"Cannot explain {a} != {b}: no disequality links the classes",
                context={"left": a, "right": b},
            )
        c, d, reason = self._diseqs[idx]
        if self._rep[c] != self._rep[a]:
            c, d = d, c
        reasons = [] if reason is None else [reason]
        for r in self.explain(a, c) + self.explain(b, d):
            if r not in reasons:
                reasons.append(r)
        return reasons

    def _path(self, x: TermId, y: TermId) -> List[tuple]:
        """Edge labels on the unique proof-forest path from x to y."""
        parent: Dict[TermId, Tuple[TermId, tuple]] = {x: (x, ())}
        queue = deque([x])
        while queue:
            node = queue.popleft()
            if node == y:
                break
            for nxt, label in self._edges[node]:
                if nxt not in parent:
                    parent[nxt] = (node, label)
                    queue.append(nxt)
        if y not in parent:
            raise TheoryError(
                f"Proof forest has no path between {x} and {y}",
                context={"left": x, "right": y},
            )
        labels = []
        node = y
        while node != x:
            prev, label = parent[node]
            labels.append(label)
            node = prev
        return labels
