"""
smtcore/api/drivers.py
======================
Solve drivers: the developer-facing entry points.

    solve_sat(formula)        CDCL over a plain clause set
    solve_euf(problem)        CDCL + EUF theory bridge
    solve_text(text, mode)    parse then solve ("sat" | "euf")
    format_result(result)     the textual verdict

Both modes produce the same two verdicts:

    satisfiable    sat: one signed literal per line, every variable, by index
                   euf: the index of every atom assigned true, one per line
    unsatisfiable  the single line ``Unsatisfiable!``

Each call builds its own term store, theory and solver, so concurrent or
repeated solves (e.g. under test) never share state.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from smtcore.core.config import SMTConfig
from smtcore.core.types import CNFFormula, EUFProblem, SolveResult
from smtcore.core.validators import normalize_formula, validate_euf_problem
from smtcore.parse import dimacs, euf
from smtcore.sat.cdcl import CDCLSolver
from smtcore.theory.euf import EUFTheory

logger = logging.getLogger(__name__)

UNSAT_TEXT = "Unsatisfiable!"

# Process exit codes used by the CLI
EXIT_SAT = 0
EXIT_UNSAT = 1
EXIT_ERROR = 254


def solve_sat(formula: CNFFormula, config: Optional[SMTConfig] = None) -> SolveResult:
    """Decide a CNF formula with the boolean engine alone."""
    config = config or SMTConfig.for_mode("sat")
    clauses, _ = normalize_formula(formula)
    solver = CDCLSolver(formula.variable_count, clauses, config=config.solver)
    return solver.solve()


def solve_euf(problem: EUFProblem, config: Optional[SMTConfig] = None) -> SolveResult:
    """Decide an EUF problem: boolean skeleton + congruence closure.

    On SAT the result also carries the final equivalence classes.
    """
    config = config or SMTConfig.for_mode("euf")
    validate_euf_problem(problem)
    clauses, _ = normalize_formula(problem.formula)
    theory = EUFTheory(problem.store, problem.atoms, config=config.theory)
    solver = CDCLSolver(len(problem.atoms), clauses, theory=theory, config=config.solver)
    result = solver.solve()
    if result.satisfiable:
        result.classes = theory.model_classes()
    return result


def solve_text(
    text: str,
    mode: str = "sat",
    config: Optional[SMTConfig] = None,
    strict: bool = True,
) -> SolveResult:
    """Parse ``text`` in the given mode and solve it.

    Raises:
        ValueError: unknown mode.
        ParseError / InvalidLiteralError: malformed input.
    """
    if mode == "sat":
        return solve_sat(dimacs.from_string(text, strict=strict), config)
    if mode == "euf":
        return solve_euf(euf.from_string(text, strict=strict), config)
    raise ValueError(f"Unknown mode '{mode}'. Expected 'sat' or 'euf'.")


def format_result(result: SolveResult, mode: str = "sat") -> str:
    """Render a verdict the way the command line prints it.

    sat mode lists every variable as a signed literal; euf mode lists the
    indices of the atoms assigned true.
    """
    if not result.satisfiable:
        return UNSAT_TEXT
    if mode == "euf":
        return "\n".join(str(v) for v in result.true_variables())
    return "\n".join(str(lit) for lit in result.literals())


def exit_code(result: SolveResult) -> int:
    return EXIT_SAT if result.satisfiable else EXIT_UNSAT


def verify_model(problem: Union[CNFFormula, EUFProblem], result: SolveResult) -> bool:
    """Independently check a SAT answer.

    CNF: every clause has a true literal.
    EUF: additionally, the implied (dis)equalities are congruence-consistent
    when replayed into a fresh closure.
    """
    if not result.satisfiable:
        return False
    if isinstance(problem, EUFProblem):
        if not problem.formula.is_satisfied_by(result.assignment):
            return False
        theory = EUFTheory(problem.store, problem.atoms)
        return theory.is_consistent_with(result.assignment)
    return problem.is_satisfied_by(result.assignment)
