"""Command-line interface."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from bandfem import config
from bandfem.analysis.finite_elements.tri3 import DegenerateElementError
from bandfem.logging_config import setup_logging
from bandfem.post.results import results_to_json
from bandfem.pre.model_text import ModelParseError
from bandfem.solvers.iterative import SolverConvergenceError
from bandfem.solvers.solver import Solver

logger = logging.getLogger("bandfem")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bandfem",
        description="Solve a plane elasticity model of constant strain triangles.",
    )
    parser.add_argument("model", nargs="?", default=config.EXAMPLE_MODEL_PATH,
                        help="model description file (default: bundled example)")
    parser.add_argument("--max-iterations", type=int, default=config.MAX_ITERATIONS)
    parser.add_argument("--tolerance", type=float, default=config.TOLERANCE)
    parser.add_argument("--method", choices=[m.value for m in config.SolverMethod], default=config.SolverMethod.CG.value)
    parser.add_argument("--zoom-x", type=float, default=config.ZOOM_X)
    parser.add_argument("--zoom-y", type=float, default=config.ZOOM_Y)
    parser.add_argument("--output", "-o", help="write the JSON results to this file instead of stdout")
    parser.add_argument("--indent", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)

    try:
        settings = config.SolverSettings(
            max_iterations=args.max_iterations,
            tolerance=args.tolerance,
            method=args.method,
        )
        with open(args.model, encoding="utf-8") as f:
            text = f.read()

        solver = Solver(settings=settings)
        solver.create_model(text, zoom_x=args.zoom_x, zoom_y=args.zoom_y)
        solver.solve()
    except (OSError, ModelParseError, DegenerateElementError, SolverConvergenceError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    output = results_to_json(solver, indent=args.indent)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        logger.info(f"Results written to: {args.output}")
    else:
        sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
