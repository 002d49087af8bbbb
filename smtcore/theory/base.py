"""
smtcore/theory/base.py
======================
Theory interface between the boolean search engine and a background
theory (DPLL(T) style).

The search engine never exposes its trail. Instead it emits four events,
and a theory keeps whatever derived state it needs:

    on_new_level()        a decision level is about to be opened
    on_assign(lit)        a literal was pushed onto the trail
    on_backtrack(level)   every assignment above ``level`` is being undone
    implied_literals()    literals the theory can force right now

``on_assign`` returns None when the theory stays consistent, or a
*conflict clause*: a disjunction of literals that are all false under the
current trail. ``implied_literals`` returns (lit, explanation) pairs where
``explanation[0] == lit`` and every other literal is currently false; the
explanation is then the antecedent of ``lit``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from smtcore.core.types import Clause, Literal


class Theory(ABC):
    """Abstract background theory driven by the search engine."""

    @abstractmethod
    def on_new_level(self) -> None:
        """Take a checkpoint for the level about to begin."""

    @abstractmethod
    def on_assign(self, lit: Literal) -> Optional[Clause]:
        """Incorporate a trail literal; return a conflict clause or None."""

    @abstractmethod
    def on_backtrack(self, level: int) -> None:
        """Forget everything incorporated above decision level ``level``."""

    def implied_literals(self) -> List[Tuple[Literal, Clause]]:
        """Literals entailed by the current theory state, with explanations."""
        return []


class EmptyTheory(Theory):
    """The empty theory has no state. Instantiate this to get a SAT solver."""

    def on_new_level(self) -> None:
        pass

    def on_assign(self, lit: Literal) -> Optional[Clause]:
        return None

    def on_backtrack(self, level: int) -> None:
        pass
