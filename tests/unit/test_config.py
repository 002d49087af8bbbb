"""
tests/unit/test_config.py
=========================
Tests for configuration defaults and validation.
"""
import pytest
from smtcore.core.config import DEFAULT_CONFIG, SMTConfig, SolverConfig, TheoryConfig


class TestSolverConfig:
    def test_defaults(self):
        cfg = SolverConfig()
        assert cfg.decision_policy == "activity"
        assert cfg.phase_saving and cfg.restarts
        assert cfg.max_conflicts is None

    @pytest.mark.parametrize("kwargs", [
        {"decision_policy": "random"},
        {"var_decay": 0.0},
        {"clause_decay": 1.5},
        {"restart_base": 0},
        {"max_conflicts": -1},
    ])
    def test_rejects_bad_values(self, kwargs):
        with pytest.raises(ValueError):
            SolverConfig(**kwargs)


class TestTheoryConfig:
    def test_defaults(self):
        cfg = TheoryConfig()
        assert cfg.theory_propagation
        assert cfg.conflict_explanation == "minimal"

    def test_rejects_unknown_explanation(self):
        with pytest.raises(ValueError):
            TheoryConfig(conflict_explanation="shortest")


class TestSMTConfig:
    def test_for_mode(self):
        assert SMTConfig.for_mode("sat").solver.restart_base == 100
        assert SMTConfig.for_mode("euf").solver.restart_base == 200

    def test_for_mode_returns_fresh_objects(self):
        cfg = SMTConfig.for_mode("euf")
        cfg.solver.decision_policy = "lowest"
        assert DEFAULT_CONFIG.solver.decision_policy == "activity"
        assert SMTConfig.for_mode("euf").solver.decision_policy == "activity"

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            SMTConfig.for_mode("lra")
