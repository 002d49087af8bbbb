"""
smtcore/core/config.py
======================
Global configuration for SMT-Core.
All search and theory knobs in one place, validated at construction.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

VALID_DECISION_POLICIES = frozenset({"activity", "lowest"})
VALID_EXPLANATIONS = frozenset({"minimal", "all"})


@dataclass
class SolverConfig:
    decision_policy:   str   = "activity"   # "activity" (VSIDS) | "lowest"
    var_decay:         float = 0.95
    clause_decay:      float = 0.999
    default_phase:     bool  = False        # polarity of a fresh decision
    phase_saving:      bool  = True
    restarts:          bool  = True
    restart_base:      int   = 100          # conflicts per Luby unit
    learned_clause_limit_factor:    float = 0.33
    learned_clause_limit_increment: float = 1.1
    minimize_learned:  bool  = True
    max_conflicts:     Optional[int] = None  # None = unbounded

    def __post_init__(self) -> None:
        if self.decision_policy not in VALID_DECISION_POLICIES:
            raise ValueError(
                f"Invalid decision policy '{self.decision_policy}'. "
                f"Must be one of {sorted(VALID_DECISION_POLICIES)}."
            )
        if not 0.0 < self.var_decay <= 1.0:
            raise ValueError("var_decay must be in (0, 1]")
        if not 0.0 < self.clause_decay <= 1.0:
            raise ValueError("clause_decay must be in (0, 1]")
        if self.restart_base < 1:
            raise ValueError("restart_base must be positive")
        if self.max_conflicts is not None and self.max_conflicts < 0:
            raise ValueError("max_conflicts must be non-negative")


@dataclass
class TheoryConfig:
    theory_propagation:   bool = True
    conflict_explanation: str  = "minimal"   # "minimal" | "all"

    def __post_init__(self) -> None:
        if self.conflict_explanation not in VALID_EXPLANATIONS:
            raise ValueError(
                f"Invalid conflict explanation '{self.conflict_explanation}'. "
                f"Must be one of {sorted(VALID_EXPLANATIONS)}."
            )


@dataclass
class SMTConfig:
    mode:      str          = "sat"
    solver:    SolverConfig = field(default_factory=SolverConfig)
    theory:    TheoryConfig = field(default_factory=TheoryConfig)
    log_level: str          = "WARNING"

    @classmethod
    def for_mode(cls, mode: str) -> "SMTConfig":
        """Pre-tuned configs per mode."""
        if mode not in ("sat", "euf"):
            raise ValueError(f"Unknown mode '{mode}'. Expected 'sat' or 'euf'.")
        cfg = cls(mode=mode)
        if mode == "euf":
            # theory conflicts arrive in bursts; restart less eagerly
            cfg.solver.restart_base = 200
        return cfg


# Singleton default config
DEFAULT_CONFIG = SMTConfig()
