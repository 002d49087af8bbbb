"""
tests/unit/test_euf_theory.py
=============================
Tests for the EUF theory bridge: trail events, conflict clauses and
theory propagation.
"""
import pytest
from smtcore.core.config import TheoryConfig
from smtcore.core.types import EqualityAtom
from smtcore.sat.cdcl import CDCLSolver
from smtcore.theory.euf import EUFTheory


@pytest.fixture
def atoms(small_terms):
    t = small_terms
    return [
        EqualityAtom(t["a"], t["b"]),                   # 1: a = b
        EqualityAtom(t["fa"], t["fb"]),                 # 2: f(a) = f(b)
        EqualityAtom(t["b"], t["c"]),                   # 3: b = c
        EqualityAtom(t["a"], t["c"], positive=False),   # 4: a /= c
    ]


@pytest.fixture
def theory(store, atoms):
    return EUFTheory(store, atoms)


class TestAssertions:
    def test_positive_literal_asserts_equality(self, theory, small_terms):
        assert theory.on_assign(1) is None
        assert theory.cc.are_equal(small_terms["fa"], small_terms["fb"])

    def test_negative_literal_asserts_disequality(self, theory, small_terms):
        assert theory.on_assign(-1) is None
        assert theory.cc.are_disequal(small_terms["a"], small_terms["b"])

    def test_negative_atom_is_inverted(self, theory, small_terms):
        assert theory.on_assign(-4) is None
        assert theory.cc.are_equal(small_terms["a"], small_terms["c"])

    def test_conflict_clause_is_minimal(self, theory):
        theory.on_assign(1)
        assert theory.on_assign(-2) == (-1, 2)

    def test_conflict_clause_all_mode(self, store, atoms):
        theory = EUFTheory(store, atoms, TheoryConfig(conflict_explanation="all"))
        theory.on_assign(3)
        theory.on_assign(1)
        assert set(theory.on_assign(-2)) == {-3, -1, 2}

    def test_conflict_through_negative_atom(self, theory):
        theory.on_assign(1)
        theory.on_assign(3)
        clause = theory.on_assign(4)
        assert set(clause) == {-1, -3, -4}

    def test_variables_beyond_atoms_are_ignored(self, theory):
        assert theory.on_assign(9) is None


class TestBacktracking:
    def test_backtrack_restores_classes(self, theory, small_terms):
        t = small_terms
        theory.on_assign(3)
        theory.on_new_level()
        theory.on_assign(1)
        assert theory.cc.are_equal(t["a"], t["c"])
        theory.on_backtrack(0)
        assert not theory.cc.are_equal(t["a"], t["b"])
        assert theory.cc.are_equal(t["b"], t["c"])
        assert theory.level == 0

    def test_backtrack_past_levels_in_one_step(self, theory, small_terms):
        t = small_terms
        for lit in (1, 3):
            theory.on_new_level()
            theory.on_assign(lit)
        theory.on_backtrack(0)
        assert theory.model_classes() == [{"a"}, {"b"}, {"c"}, {"f(a)"}, {"f(b)"},
                                          {"f(c)"}, {"g(a, b)"}, {"g(b, a)"}]

    def test_backtrack_to_current_level_is_noop(self, theory):
        theory.on_new_level()
        theory.on_assign(1)
        theory.on_backtrack(1)
        assert theory.level == 1
        assert theory.on_assign(-2) is not None


class TestPropagation:
    def test_entailed_equality_is_implied(self, theory):
        theory.on_assign(1)
        implied = dict(theory.implied_literals())
        assert implied[2] == (2, -1)

    def test_entailed_disequality_is_implied(self, theory):
        theory.on_assign(-1)
        theory.on_assign(3)
        implied = dict(theory.implied_literals())
        # a /= b, b = c  ⟹  a /= c, which makes atom 4 true
        assert 4 in implied
        assert set(implied[4][1:]) == {1, -3}

    def test_propagation_can_be_disabled(self, store, atoms):
        theory = EUFTheory(store, atoms, TheoryConfig(theory_propagation=False))
        theory.on_assign(1)
        assert theory.implied_literals() == []

    def test_assigned_atoms_are_not_implied(self, theory):
        theory.on_assign(1)
        theory.on_assign(2)
        assert theory.implied_literals() == []

    def test_unchanged_classes_imply_nothing_new(self, theory):
        theory.on_assign(1)
        assert dict(theory.implied_literals())[2] == (2, -1)
        assert theory.implied_literals() == []

    def test_later_assertion_reexamines_touched_atoms(self, theory):
        theory.on_assign(1)
        theory.implied_literals()
        theory.on_assign(-3)
        implied = dict(theory.implied_literals())
        # a = b, b /= c  ⟹  a /= c
        assert set(implied) == {4}
        assert set(implied[4][1:]) == {-1, 3}

    def test_backtrack_rescans_every_atom(self, theory):
        theory.on_assign(1)
        theory.implied_literals()
        theory.on_new_level()
        theory.on_backtrack(0)
        assert 2 in dict(theory.implied_literals())


class TestWithEngine:
    def test_congruence_forces_unsat(self, store, atoms):
        # a = b, f(a) /= f(b)
        theory = EUFTheory(store, atoms)
        result = CDCLSolver(4, [(1,), (-2,)], theory=theory).solve()
        assert not result.satisfiable

    @pytest.mark.parametrize("explanation", ["minimal", "all"])
    @pytest.mark.parametrize("propagation", [True, False])
    def test_search_finds_consistent_model(self, store, atoms, explanation, propagation):
        config = TheoryConfig(theory_propagation=propagation, conflict_explanation=explanation)
        theory = EUFTheory(store, atoms, config)
        clauses = [(1, 3), (-2,), (4, 3)]
        result = CDCLSolver(4, clauses, theory=theory).solve()
        assert result.satisfiable
        assert result.assignment[1] is False
        assert result.assignment[3] is True
        assert theory.is_consistent_with(result.assignment)

    def test_model_classes_after_solve(self, store, atoms):
        theory = EUFTheory(store, atoms)
        result = CDCLSolver(4, [(1,), (3,)], theory=theory).solve()
        assert result.satisfiable
        assert {"a", "b", "c"} in theory.model_classes()
        assert {"f(a)", "f(b)", "f(c)"} in theory.model_classes()


class TestConsistencyCheck:
    def test_consistent(self, theory):
        assert theory.is_consistent_with({1: True, 2: True, 3: False, 4: True})

    def test_inconsistent(self, theory):
        assert not theory.is_consistent_with({1: True, 2: False, 3: False, 4: True})

    def test_partial_assignment(self, theory):
        assert theory.is_consistent_with({3: True})
