"""
smtcore/theory/reference.py
===========================
Independent cross-check of verdicts against the Z3 SMT solver.

The CDCL engine and the congruence closure are the decision procedures of
this package; Z3 is only consulted to confirm them (tests, ``--cross-check``
on the command line).

Translation:
    CNF   each variable v  ↦  Bool("v")
    EUF   one uninterpreted sort U; a symbol used with arity k becomes
          Function("sym/k", U^k → U) (constants: Const("sym/0", U));
          atom v  ↦  Bool("v") == (lhs == rhs)   (negated for ``/=`` atoms)

Falls back gracefully if Z3 is not installed: ``Z3_AVAILABLE`` is False
and ``require_z3()`` raises.

Reference: De Moura & Bjørner (2008) "Z3: An Efficient SMT Solver".
"""
from __future__ import annotations

import logging
from typing import Dict, Union

from smtcore.core.exceptions import SMTCoreError
from smtcore.core.types import CNFFormula, EUFProblem, SolveResult, TermId

logger = logging.getLogger(__name__)

# Z3 is optional: cross-checking is disabled if not installed
try:
    import z3

    Z3_AVAILABLE = True
except ImportError:  # pragma: no cover
    Z3_AVAILABLE = False
    logger.info("Z3 not installed. Cross-checking disabled. pip install z3-solver")


def require_z3() -> None:
    """Raise SMTCoreError if Z3 is not available."""
    if not Z3_AVAILABLE:
        raise SMTCoreError(
            "Z3 SMT solver is required for cross-checking but is not "
            "installed. Install with: pip install z3-solver",
            context={"dependency": "z3-solver"},
        )


def _add_clauses(solver, formula: CNFFormula, bools: Dict[int, object]) -> None:
    for clause in formula.clauses:
        lits = [bools[abs(l)] if l > 0 else z3.Not(bools[abs(l)]) for l in clause]
        if not lits:
            solver.add(z3.BoolVal(False))
        elif len(lits) == 1:
            solver.add(lits[0])
        else:
            solver.add(z3.Or(*lits))


def z3_is_satisfiable(problem: Union[CNFFormula, EUFProblem]) -> bool:
    """Decide ``problem`` with Z3."""
    require_z3()
    solver = z3.Solver()
    if isinstance(problem, EUFProblem):
        formula = problem.formula
        bools = {v: z3.Bool(str(v)) for v in range(1, len(problem.atoms) + 1)}
        sort = z3.DeclareSort("U")
        exprs: Dict[TermId, object] = {}
        functions: Dict[str, object] = {}
        for tid in problem.store:
            term = problem.store.term(tid)
            name = f"{term.symbol}/{term.arity}"
            if term.is_constant:
                exprs[tid] = z3.Const(name, sort)
                continue
            if name not in functions:
                functions[name] = z3.Function(name, *([sort] * (term.arity + 1)))
            exprs[tid] = functions[name](*(exprs[a] for a in term.args))
        for var, atom in enumerate(problem.atoms, start=1):
            equality = exprs[atom.lhs] == exprs[atom.rhs]
            solver.add(bools[var] == (equality if atom.positive else z3.Not(equality)))
    else:
        formula = problem
        bools = {v: z3.Bool(str(v)) for v in range(1, problem.variable_count + 1)}
    _add_clauses(solver, formula, bools)
    verdict = solver.check()
    logger.debug("Z3 verdict: %s", verdict)
    return verdict == z3.sat


def cross_check(problem: Union[CNFFormula, EUFProblem], result: SolveResult) -> bool:
    """True when Z3 agrees with ``result``'s verdict."""
    agrees = z3_is_satisfiable(problem) == result.satisfiable
    if not agrees:
        logger.warning("Z3 disagrees with verdict %s", result.verdict.name)
    return agrees
