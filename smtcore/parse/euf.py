"""
smtcore/parse/euf.py
====================
Reader for EUF problems: equality declarations, a separator, then a
DIMACS body whose variables are the declarations (1-based, in order).

    == 1(1 2) 1
    == 1(2) 2(1)
    == 1(1(1 2) 2) 3
    /= 1 3
    --
    p cnf 4 4
    1 0
    2 0
    3 0
    -4 0

Declaration grammar:

    decl  :=  ('==' | '/=') term term
    term  :=  name | name '(' term* ')'
    name  :=  [A-Za-z0-9_.]+

Arguments are separated by whitespace and/or commas. ``/=`` declares an
atom whose variable being true means the two terms differ. Lines starting
with ``c`` are comments; a blank declaration line is an error in strict
mode and skipped in lenient mode. The separator is ``--`` (``---`` also accepted).
The DIMACS prelude is optional in the body; without it the variable count
is the number of declarations.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Tuple, Union

from smtcore.core.exceptions import EUFParseError, InvalidLiteralError
from smtcore.core.types import EqualityAtom, EUFProblem, TermId
from smtcore.core.validators import validate_literal
from smtcore.parse import dimacs
from smtcore.theory.terms import TermStore

logger = logging.getLogger(__name__)

SEPARATORS = frozenset({"--", "---"})
TOKEN_RE = re.compile(r"\s*(?:(?P<name>[A-Za-z0-9_.]+)|(?P<punct>[(),]))")


class _TermReader:
    """Recursive-descent reader over one declaration line."""

    def __init__(self, text: str, store: TermStore, line_number: int):
        self.text = text
        self.pos = 0
        self.store = store
        self.line_number = line_number

    def _error(self, message: str) -> EUFParseError:
        return EUFParseError(message, self.line_number, self.text)

    def _next(self) -> Tuple[str, str]:
        m = TOKEN_RE.match(self.text, self.pos)
        if m is None:
            rest = self.text[self.pos:].strip()
            if not rest:
                return ("end", "")
            raise self._error(f"cannot parse atom at '{rest}'")
        self.pos = m.end()
        if m.group("name") is not None:
            return ("name", m.group("name"))
        return ("punct", m.group("punct"))

    def _peek(self) -> Tuple[str, str]:
        saved = self.pos
        try:
            return self._next()
        finally:
            self.pos = saved

    def term(self) -> TermId:
        kind, value = self._next()
        if kind != "name":
            raise self._error("cannot parse atom" + (f" at '{value}'" if value else ""))
        symbol = value
        if self._peek() != ("punct", "("):
            return self.store.constant(symbol)
        self._next()
        args: List[TermId] = []
        while True:
            kind, value = self._peek()
            if kind == "end":
                raise self._error("unexpected end of application term")
            if (kind, value) == ("punct", ")"):
                self._next()
                break
            if (kind, value) == ("punct", ","):
                self._next()
                continue
            args.append(self.term())
        return self.store.intern(symbol, args)

    def finish(self) -> None:
        kind, value = self._next()
        if kind != "end":
            raise self._error(f"unexpected trailing input '{value}'")


def parse_declaration(line: str, store: TermStore, line_number: int = 1) -> EqualityAtom:
    """Parse one ``== t1 t2`` / ``/= t1 t2`` line, interning its terms."""
    text = line.strip()
    op = text[:2]
    if op not in ("==", "/="):
        raise EUFParseError(
            f"cannot parse equality symbol, expected '==' or '/=' but got '{op}'",
            line_number, line,
        )
    reader = _TermReader(text[2:], store, line_number)
    lhs = reader.term()
    rhs = reader.term()
    reader.finish()
    return EqualityAtom(lhs=lhs, rhs=rhs, positive=(op == "=="))


def from_string(text: str, strict: bool = True) -> EUFProblem:
    """Parse an EUF problem.

    Raises:
        EUFParseError:       malformed or (strict) blank declaration, missing separator
        DimacsParseError:    malformed clause body
        InvalidLiteralError: a clause references an undeclared atom
    """
    lines = text.splitlines()
    store = TermStore()
    atoms: List[EqualityAtom] = []
    body_start = None
    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped in SEPARATORS:
            body_start = index + 1
            break
        if not stripped:
            if strict:
                raise EUFParseError("unexpected empty line", index + 1, line)
            continue
        if stripped.startswith("c"):
            continue
        atoms.append(parse_declaration(stripped, store, line_number=index + 1))
    if body_start is None:
        raise EUFParseError(
            "missing '--' separator between declarations and clauses",
            context={"declarations": len(atoms)},
        )

    formula = dimacs.from_lines(
        lines[body_start:],
        strict=strict,
        require_header=False,
        default_variables=len(atoms),
        first_line_number=body_start + 1,
    )
    if formula.variable_count > len(atoms):
        raise InvalidLiteralError(
            f"Clause body declares {formula.variable_count} variable(s) "
            f"but only {len(atoms)} equality atom(s) exist",
            literal=formula.variable_count,
            variable_count=len(atoms),
        )
    for clause in formula.clauses:
        for lit in clause:
            validate_literal(lit, len(atoms))
    formula.variable_count = len(atoms)
    logger.debug("Parsed %d atom(s) over %d term(s)", len(atoms), len(store))
    return EUFProblem(store=store, atoms=atoms, formula=formula)


def read_file(path: Union[str, Path], strict: bool = True) -> EUFProblem:
    """Parse an EUF problem file."""
    return from_string(Path(path).read_text(encoding="utf-8"), strict=strict)
