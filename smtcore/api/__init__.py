"""smtcore/api — Solve drivers."""

from smtcore.api.drivers import (
    format_result,
    solve_euf,
    solve_sat,
    solve_text,
    verify_model,
)

__all__ = [
    "solve_sat",
    "solve_euf",
    "solve_text",
    "format_result",
    "verify_model",
]
