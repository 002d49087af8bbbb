"""
smtcore/theory/terms.py
=======================
Term store — structural interning of EUF terms.

Every distinct term symbol(args...) is stored exactly once and named by a
small int id, so syntactic identity is id identity:

    store = TermStore()
    a  = store.constant("a")
    fa = store.apply("f", a)
    store.apply("f", store.constant("a")) == fa     # True

Ids are dense (0..len(store)-1) and arguments always have smaller ids
than the application that uses them, so iterating the store visits
subterms first.

The store also records, for every term, the applications that use it
as a direct argument ("parents"); the congruence closure engine seeds
its use lists from this.

A store belongs to a single problem. Create one per solve and never share
a store between unrelated problems.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Sequence, Tuple

from smtcore.core.exceptions import TheoryError
from smtcore.core.types import Term, TermId


class TermStore:
    """Hash-consing table for terms."""

    def __init__(self) -> None:
        self._terms: List[Term] = []
        self._index: Dict[Term, TermId] = {}
        self._parents: List[List[TermId]] = []

    # ─── INTERNING ─────────────────────────────────────────────────

    def intern(self, symbol: str, args: Sequence[TermId] = ()) -> TermId:
        """Return the id of symbol(args...), creating it if needed.

        Raises:
            TheoryError: if an argument id is not part of this store.
        """
        args = tuple(args)
        for a in args:
            if not 0 <= a < len(self._terms):
                raise TheoryError(
                    f"Unknown argument term id {a} for symbol '{symbol}'",
                    context={"symbol": symbol, "args": args},
                )
        term = Term(symbol=str(symbol), args=args)
        existing = self._index.get(term)
        if existing is not None:
            return existing
        tid = len(self._terms)
        self._terms.append(term)
        self._index[term] = tid
        self._parents.append([])
        for a in set(args):
            self._parents[a].append(tid)
        return tid

    def constant(self, symbol: str) -> TermId:
        return self.intern(symbol)

    def apply(self, symbol: str, *args: TermId) -> TermId:
        return self.intern(symbol, args)

    # ─── LOOKUP ────────────────────────────────────────────────────

    def term(self, tid: TermId) -> Term:
        try:
            return self._terms[tid]
        except (IndexError, TypeError):
            raise TheoryError(f"Unknown term id {tid!r}", context={"term": tid}) from None

    def find(self, symbol: str, args: Sequence[TermId] = ()) -> TermId:
        """Id of an existing term; raises TheoryError when absent."""
        tid = self._index.get(Term(symbol=str(symbol), args=tuple(args)))
        if tid is None:
            raise TheoryError(
                f"Term {symbol}{tuple(args)} is not interned",
                context={"symbol": symbol, "args": tuple(args)},
            )
        return tid

    def parents(self, tid: TermId) -> Tuple[TermId, ...]:
        """Applications having ``tid`` as a direct argument."""
        self.term(tid)
        return tuple(self._parents[tid])

    def render(self, tid: TermId) -> str:
        """Human-readable form, e.g. ``f(a, g(b))``."""
        term = self.term(tid)
        if term.is_constant:
            return term.symbol
        return f"{term.symbol}({', '.join(self.render(a) for a in term.args)})"

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[TermId]:
        return iter(range(len(self._terms)))

    def __contains__(self, tid: object) -> bool:
        return isinstance(tid, int) and 0 <= tid < len(self._terms)

    def __repr__(self) -> str:
        return f"TermStore({len(self._terms)} terms)"
