"""
tests/conftest.py
==================
Shared pytest fixtures for all SMT-Core tests.
"""

import itertools

import pytest
from smtcore.core.types import CNFFormula, EqualityAtom, EUFProblem
from smtcore.theory.terms import TermStore


# ─── CNF SCENARIOS ────────────────────────────────────────────────


@pytest.fixture
def unit_formula():
    """{1}, {2}, {3}, {-4}: satisfiable with exactly 1 2 3 -4."""
    return CNFFormula(variable_count=4, clauses=[(1,), (2,), (3,), (-4,)])


@pytest.fixture
def tautology_formula():
    return CNFFormula(variable_count=1, clauses=[(1, -1)])


@pytest.fixture
def contradiction_formula():
    return CNFFormula(variable_count=1, clauses=[(1,), (-1,)])


@pytest.fixture
def pigeonhole_formula():
    """4 pigeons in 3 holes: unsatisfiable, needs real search."""
    pigeons, holes = 4, 3

    def var(p, h):
        return p * holes + h + 1

    clauses = [tuple(var(p, h) for h in range(holes)) for p in range(pigeons)]
    for h in range(holes):
        for p1, p2 in itertools.combinations(range(pigeons), 2):
            clauses.append((-var(p1, h), -var(p2, h)))
    return CNFFormula(variable_count=pigeons * holes, clauses=clauses)


# ─── ORACLES ──────────────────────────────────────────────────────


def brute_force_models(variable_count, clauses, accept=None):
    """Yield every satisfying assignment by exhaustive enumeration."""
    formula = CNFFormula(variable_count=variable_count, clauses=clauses)
    for values in itertools.product((False, True), repeat=variable_count):
        assignment = {v: values[v - 1] for v in range(1, variable_count + 1)}
        if formula.is_satisfied_by(assignment) and (accept is None or accept(assignment)):
            yield assignment


def brute_force_sat(variable_count, clauses, accept=None):
    return next(brute_force_models(variable_count, clauses, accept), None) is not None


@pytest.fixture
def oracle():
    return brute_force_sat


def random_cnf(rng, variable_count, clause_count, max_width=3):
    clauses = []
    for _ in range(clause_count):
        width = rng.randint(1, max_width)
        chosen = rng.sample(range(1, variable_count + 1), min(width, variable_count))
        clauses.append(tuple(v if rng.random() < 0.5 else -v for v in chosen))
    return CNFFormula(variable_count=variable_count, clauses=clauses)


@pytest.fixture
def cnf_generator():
    return random_cnf


# ─── EUF ──────────────────────────────────────────────────────────


@pytest.fixture
def store():
    return TermStore()


@pytest.fixture
def small_terms(store):
    """a, b, c, f(a), f(b), f(c), g(a, b), g(b, a)"""
    a, b, c = (store.constant(s) for s in "abc")
    terms = {
        "a": a, "b": b, "c": c,
        "fa": store.apply("f", a),
        "fb": store.apply("f", b),
        "fc": store.apply("f", c),
        "gab": store.apply("g", a, b),
        "gba": store.apply("g", b, a),
    }
    return terms


def random_euf(rng, atom_count=5, clause_count=5):
    """Small random EUF problem over constants a b c and unary f / binary g."""
    store = TermStore()
    base = [store.constant(s) for s in "abc"]
    terms = list(base)
    for x in base:
        terms.append(store.apply("f", x))
    terms.append(store.apply("f", store.apply("f", base[0])))
    terms.append(store.apply("g", base[0], base[1]))
    terms.append(store.apply("g", base[1], base[0]))
    atoms = []
    for _ in range(atom_count):
        lhs, rhs = rng.sample(terms, 2)
        atoms.append(EqualityAtom(lhs, rhs, positive=rng.random() < 0.8))
    formula = random_cnf(rng, atom_count, clause_count, max_width=2)
    return EUFProblem(store=store, atoms=atoms, formula=formula)


@pytest.fixture
def euf_generator():
    return random_euf


# ─── TEXT INPUTS ──────────────────────────────────────────────────


@pytest.fixture
def congruence_unsat_text():
    return (
        "== 1(1 2) 1\n"
        "== 1(2) 2(1)\n"
        "== 1(1(1 2) 2) 3\n"
        "== 1 3\n"
        "--\n"
        "p cnf 4 4\n"
        "1 0\n"
        "2 0\n"
        "3 0\n"
        "-4 0\n"
    )


@pytest.fixture
def unit_cnf_text():
    return "c four units\np cnf 4 4\n1 0\n2 0\n3 0\n-4 0\n"
