"""
smtcore/cli.py
==============
Run SMT-Core from the command line.

Usage:
    smtcore sat problem.cnf
    smtcore euf problem.euf --stats
    cat problem.cnf | smtcore sat -v

Exit codes: 0 satisfiable, 1 unsatisfiable, 254 unreadable input.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from smtcore.api.drivers import EXIT_ERROR, exit_code, format_result, solve_text
from smtcore.core.config import SMTConfig
from smtcore.core.exceptions import ParseError, SMTCoreError
from smtcore.version import FRAMEWORK_NAME, __version__

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smtcore", description="SMT-Core SAT / EUF solver")
    parser.add_argument("--version", action="version", version=f"{FRAMEWORK_NAME} {__version__}")
    parser.add_argument("mode", choices=("sat", "euf"), help="Input format and theory")
    parser.add_argument("input", nargs="?", default="-",
                        help="Problem file ('-' or omitted reads stdin)")
    parser.add_argument("--lenient", action="store_true",
                        help="Accept DIMACS headers that only bound the body")
    parser.add_argument("--decision-policy", choices=("activity", "lowest"), default=None)
    parser.add_argument("--no-restarts", action="store_true")
    parser.add_argument("--no-theory-propagation", action="store_true")
    parser.add_argument("--explanation", choices=("minimal", "all"), default=None,
                        help="Theory conflict clause style (euf mode)")
    parser.add_argument("--max-conflicts", type=int, default=None)
    parser.add_argument("--stats", action="store_true", help="Print search statistics to stderr")
    parser.add_argument("--cross-check", action="store_true",
                        help="Confirm the verdict with Z3 (requires z3-solver)")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for INFO, -vv for DEBUG logging on stderr")
    return parser


def _config_from_args(args: argparse.Namespace) -> SMTConfig:
    config = SMTConfig.for_mode(args.mode)
    if args.decision_policy:
        config.solver.decision_policy = args.decision_policy
    if args.no_restarts:
        config.solver.restarts = False
    if args.max_conflicts is not None:
        config.solver.max_conflicts = args.max_conflicts
    if args.no_theory_propagation:
        config.theory.theory_propagation = False
    if args.explanation:
        config.theory.conflict_explanation = args.explanation
    config.log_level = ("WARNING", "INFO", "DEBUG")[min(args.verbose, 2)]
    return config


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = _config_from_args(args)
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        text = _read_input(args.input)
    except OSError as e:
        print("Failed to read input:", file=sys.stderr)
        print(f"    {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        result = solve_text(text, mode=args.mode, config=config, strict=not args.lenient)
    except ParseError as e:
        print(f"Failed to parse {args.mode.upper()} input:", file=sys.stderr)
        print(f"    {e}", file=sys.stderr)
        return EXIT_ERROR
    except SMTCoreError as e:
        print(f"Invalid problem: {e}", file=sys.stderr)
        return EXIT_ERROR

    print(format_result(result, args.mode))
    if args.stats:
        print(f"c {result.stats.summary()}", file=sys.stderr)

    if args.cross_check:
        from smtcore.parse import dimacs, euf
        from smtcore.theory.reference import cross_check

        strict = not args.lenient
        problem = euf.from_string(text, strict) if args.mode == "euf" else dimacs.from_string(text, strict)
        try:
            agrees = cross_check(problem, result)
        except SMTCoreError as e:
            print(f"Cross-check unavailable: {e}", file=sys.stderr)
            return EXIT_ERROR
        print(f"c z3 {'agrees' if agrees else 'DISAGREES'}", file=sys.stderr)
        if not agrees:
            return EXIT_ERROR

    return exit_code(result)


if __name__ == "__main__":
    sys.exit(main())
