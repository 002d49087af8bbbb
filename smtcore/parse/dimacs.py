"""
smtcore/parse/dimacs.py
=======================
Reader for the DIMACS CNF format.

    c a comment
    p cnf <variables> <clauses>
    1 -2 0
    2 3
    -1 0

Clauses are runs of non-zero integers terminated by ``0``; they may span
several lines or share one. Comment lines (``c``) are accepted anywhere,
a line holding ``%`` ends the input (SATLIB convention), and a last clause
missing its ``0`` is kept.

Strict mode (default) requires the header counts to match the body
exactly: the highest variable mentioned must equal the declared variable
count, and the number of clauses must equal the declared clause count.
Lenient mode only requires every variable to fit the declared count.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from smtcore.core.exceptions import DimacsParseError
from smtcore.core.types import Clause, CNFFormula

logger = logging.getLogger(__name__)


def _parse_header(line: str, line_number: int) -> Tuple[int, int]:
    words = line.split()
    if len(words) < 2:
        raise DimacsParseError("cannot parse prelude line", line_number, line)
    if words[1] != "cnf":
        raise DimacsParseError(
            f"unexpected format '{words[1]}', expected 'cnf'", line_number, line
        )
    if len(words) != 4:
        raise DimacsParseError("cannot parse prelude line", line_number, line)
    try:
        variables, clauses = int(words[2]), int(words[3])
    except ValueError:
        raise DimacsParseError("cannot parse prelude line", line_number, line) from None
    if variables < 0 or clauses < 0:
        raise DimacsParseError("negative count in prelude line", line_number, line)
    return variables, clauses


def from_lines(
    lines: Iterable[str],
    strict: bool = True,
    require_header: bool = True,
    default_variables: Optional[int] = None,
    first_line_number: int = 1,
) -> CNFFormula:
    """Parse DIMACS text given as lines.

    Args:
        lines:             input lines (newlines optional)
        strict:            enforce exact header counts
        require_header:    fail if no ``p cnf`` line precedes the clauses
        default_variables: variable count to use when the header is absent
                           (defaults to the highest variable mentioned)
        first_line_number: line number of the first element, for messages

    Raises:
        DimacsParseError: on any malformed line or count mismatch.
    """
    header: Optional[Tuple[int, int]] = None
    clauses: List[Clause] = []
    current: List[int] = []
    highest = 0
    line_number = first_line_number - 1

    for line_number, raw in enumerate(lines, start=first_line_number):
        line = raw.strip()
        if not line or line.startswith("c"):
            continue
        if line.startswith("%"):
            break
        if line.startswith("p"):
            if header is not None:
                raise DimacsParseError("duplicate prelude line", line_number, line)
            if clauses or current:
                raise DimacsParseError("prelude line after clauses", line_number, line)
            header = _parse_header(line, line_number)
            continue
        if header is None and require_header:
            raise DimacsParseError("cannot parse prelude line", line_number, line)
        for word in line.split():
            try:
                lit = int(word)
            except ValueError:
                raise DimacsParseError(
                    f"cannot parse clause line (bad literal '{word}')", line_number, line
                ) from None
            if lit == 0:
                clauses.append(tuple(current))
                current = []
            else:
                current.append(lit)
                highest = max(highest, abs(lit))

    if current:
        logger.warning("Last clause is missing its terminating 0; keeping it")
        clauses.append(tuple(current))

    if header is None:
        if require_header:
            raise DimacsParseError("missing 'p cnf' prelude line", line_number or None)
        variables = highest if default_variables is None else default_variables
        if highest > variables:
            raise DimacsParseError(
                f"variable {highest} exceeds the {variables} declared variable(s)",
                context={"expected": variables, "actual": highest},
            )
        return CNFFormula(variable_count=variables, clauses=clauses)

    variables, expected_clauses = header
    if strict:
        if highest != variables:
            raise DimacsParseError(
                f"wrong number of variables: expected {variables}, found {highest}",
                context={"expected": variables, "actual": highest},
            )
        if len(clauses) != expected_clauses:
            raise DimacsParseError(
                f"wrong number of clauses: expected {expected_clauses}, found {len(clauses)}",
                context={"expected": expected_clauses, "actual": len(clauses)},
            )
    else:
        if highest > variables:
            raise DimacsParseError(
                f"variable {highest} exceeds the {variables} declared variable(s)",
                context={"expected": variables, "actual": highest},
            )
        if len(clauses) != expected_clauses:
            logger.warning(
                "Header declares %d clause(s) but %d were read", expected_clauses, len(clauses)
            )
    return CNFFormula(variable_count=variables, clauses=clauses)


def from_string(text: str, strict: bool = True) -> CNFFormula:
    """Parse a DIMACS CNF document held in a string."""
    return from_lines(text.splitlines(), strict=strict)


def read_file(path: Union[str, Path], strict: bool = True) -> CNFFormula:
    """Parse a DIMACS CNF file."""
    with open(path, "r", encoding="utf-8") as fh:
        return from_lines(fh, strict=strict)


def to_string(formula: CNFFormula) -> str:
    """Serialise a formula as DIMACS CNF."""
    lines = [f"p cnf {formula.variable_count} {formula.clause_count}"]
    for clause in formula.clauses:
        lines.append(" ".join(str(l) for l in clause) + " 0")
    return "\n".join(lines) + "\n"
