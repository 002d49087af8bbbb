"""
tests/unit/test_terms.py
========================
Tests for structural term interning.
"""
import pytest
from smtcore.core.exceptions import TheoryError
from smtcore.theory.terms import TermStore


class TestInterning:
    def test_identical_terms_share_an_id(self, store):
        a = store.constant("a")
        fa = store.apply("f", a)
        assert store.apply("f", store.constant("a")) == fa
        assert len(store) == 2

    def test_symbol_and_arity_distinguish_terms(self, store):
        a = store.constant("f")
        fa = store.apply("f", a)
        faa = store.apply("f", a, a)
        assert len({a, fa, faa}) == 3

    def test_zero_argument_application_is_the_constant(self, store):
        assert store.intern("c", ()) == store.constant("c")

    def test_ids_are_dense_and_subterms_first(self, store, small_terms):
        assert list(store) == list(range(len(store)))
        for tid in store:
            assert all(a < tid for a in store.term(tid).args)

    def test_numeric_symbols_are_strings(self, store):
        tid = store.intern(1)
        assert store.term(tid).symbol == "1"
        assert store.constant("1") == tid

    def test_unknown_argument_rejected(self, store):
        with pytest.raises(TheoryError):
            store.apply("f", 3)


class TestLookup:
    def test_parents(self, store, small_terms):
        t = small_terms
        assert set(store.parents(t["a"])) == {t["fa"], t["gab"], t["gba"]}
        assert store.parents(t["gab"]) == ()

    def test_parent_recorded_once_for_repeated_argument(self, store):
        a = store.constant("a")
        gaa = store.apply("g", a, a)
        assert store.parents(a) == (gaa,)

    def test_find(self, store, small_terms):
        assert store.find("g", (small_terms["a"], small_terms["b"])) == small_terms["gab"]
        with pytest.raises(TheoryError):
            store.find("h")

    def test_render(self, store, small_terms):
        assert store.render(small_terms["gab"]) == "g(a, b)"
        nested = store.apply("f", small_terms["gba"])
        assert store.render(nested) == "f(g(b, a))"

    def test_unknown_id(self, store):
        with pytest.raises(TheoryError):
            store.term(0)
        assert 0 not in store

    def test_contains_and_repr(self, store, small_terms):
        assert small_terms["c"] in store
        assert "x" not in store
        assert repr(store) == "TermStore(8 terms)"
