"""smtcore/theory — Background theories: term store, congruence closure, EUF bridge."""

from smtcore.theory.base import EmptyTheory, Theory
from smtcore.theory.congruence import Conflict, CongruenceClosure
from smtcore.theory.euf import EUFTheory
from smtcore.theory.terms import TermStore

__all__ = [
    "Theory",
    "EmptyTheory",
    "TermStore",
    "CongruenceClosure",
    "Conflict",
    "EUFTheory",
]
