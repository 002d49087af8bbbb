"""
tests/unit/test_validators.py
=============================
Tests for input validation at API boundaries.
"""
import pytest
from smtcore.core.exceptions import InvalidLiteralError, SMTCoreError
from smtcore.core.types import CNFFormula, EqualityAtom, EUFProblem
from smtcore.core.validators import (
    normalize_clause,
    normalize_formula,
    validate_euf_problem,
    validate_literal,
)


class TestLiterals:
    @pytest.mark.parametrize("lit", [0, 4, -4, True, 1.0, "1"])
    def test_invalid(self, lit):
        with pytest.raises(InvalidLiteralError) as exc:
            validate_literal(lit, 3)
        assert exc.value.context["variable_count"] == 3

    @pytest.mark.parametrize("lit", [1, -1, 3, -3])
    def test_valid(self, lit):
        validate_literal(lit, 3)


class TestClauses:
    def test_duplicates_collapse_in_order(self):
        assert normalize_clause([2, -1, 2, -1], 2) == (2, -1)

    def test_tautology(self):
        assert normalize_clause([1, 2, -1], 2) is None

    def test_empty(self):
        assert normalize_clause([], 0) == ()

    def test_formula_drops_tautologies(self, caplog):
        formula = CNFFormula(variable_count=2, clauses=[(1, -1), (2, 2)])
        clauses, tautologies = normalize_formula(formula)
        assert clauses == [(2,)]
        assert tautologies == 1
        assert "tautological" in caplog.text

    def test_negative_variable_count(self):
        with pytest.raises(SMTCoreError):
            normalize_formula(CNFFormula(variable_count=-1))


class TestEUFProblems:
    def test_unknown_term(self, store, small_terms):
        problem = EUFProblem(store, [EqualityAtom(0, 42)], CNFFormula(1, [(1,)]))
        with pytest.raises(SMTCoreError, match="unknown term id 42"):
            validate_euf_problem(problem)

    def test_undeclared_atom(self, store, small_terms):
        problem = EUFProblem(store, [EqualityAtom(0, 1)], CNFFormula(2, [(2,)]))
        with pytest.raises(InvalidLiteralError):
            validate_euf_problem(problem)

    def test_valid(self, store, small_terms):
        problem = EUFProblem(store, [EqualityAtom(0, 1)], CNFFormula(1, [(-1,)]))
        validate_euf_problem(problem)
