# headcount_model/cli.py
# Command-line interface entry point (argparse)
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from headcount_model.config.loaders import load_engine_settings, load_scenarios
from headcount_model.dynamics.projection import project_scenarios
from headcount_model.engines.monte_carlo import run_monte_carlo
from headcount_model.engines.sensitivity import run_sensitivity
from headcount_model.engines.stress import stress_test
from headcount_model.errors import HeadcountModelError
from headcount_model.reporting.tables import (
    confidence_band_frame,
    histogram_frame,
    monte_carlo_summary_frame,
    projection_frame,
    sensitivity_frame,
    stress_frame,
)

# Import logging configuration
from logging_config import setup_logging, SIMULATION_LOGGER, ERROR_LOGGER, DEBUG_LOGGER

# Get logger for this module
logger = logging.getLogger(__name__)

# Directory for log files
LOG_DIR = Path("output_dev/simulation_logs")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Run stochastic headcount projections.")
    parser.add_argument(
        "command",
        choices=["montecarlo", "sensitivity", "stress", "project"],
        help="Analysis to run."
    )

    # Required arguments
    parser.add_argument(
        "--scenarios",
        type=str,
        required=True,
        help="Path to the YAML file with scenario definitions."
    )
    parser.add_argument(
        "--current-headcount",
        type=int,
        required=True,
        help="Headcount at the start of the horizon."
    )

    # Optional arguments
    parser.add_argument(
        "--target-headcount",
        type=int,
        default=None,
        help="Target headcount for Monte Carlo probability metrics (default: current x 1.15)."
    )
    parser.add_argument(
        "--conditions",
        nargs="+",
        default=None,
        help="Stress condition ids to apply (default: the full catalog)."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Optional YAML file overriding the engine defaults."
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible results."
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=str(LOG_DIR),
        help=f"Directory to store log files (default: {LOG_DIR})"
    )
    return parser.parse_args(argv)


def initialize_logging(debug: bool = False, log_dir: Path = LOG_DIR) -> None:
    """Initialize the logging configuration."""
    setup_logging(log_dir=log_dir, debug=debug)

    logger.info("Starting headcount model")
    logger.info(f"Command line arguments: {sys.argv}")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Pandas version: {pd.__version__}")
    logger.info(f"NumPy version: {np.__version__}")

    if debug:
        logging.getLogger(DEBUG_LOGGER).debug("Debug logging enabled")


def run_command(args: argparse.Namespace) -> List[pd.DataFrame]:
    """Run the requested analysis and return its summary frames."""
    sim_logger = logging.getLogger(SIMULATION_LOGGER)

    settings = load_engine_settings(args.config)
    scenarios = load_scenarios(args.scenarios, settings)
    sim_logger.info(
        f"Running '{args.command}' for {len(scenarios)} scenarios "
        f"from headcount {args.current_headcount} (seed={args.seed})"
    )

    if args.command == "montecarlo":
        results = run_monte_carlo(
            scenarios, args.current_headcount, args.target_headcount, settings, seed=args.seed
        )
        return [
            monte_carlo_summary_frame(results),
            confidence_band_frame(results),
            histogram_frame(results),
        ]
    if args.command == "sensitivity":
        results = run_sensitivity(scenarios, args.current_headcount, settings, seed=args.seed)
        return [sensitivity_frame(results)]
    if args.command == "stress":
        results = stress_test(
            scenarios, args.current_headcount, args.conditions, settings, seed=args.seed
        )
        return [stress_frame(results)]
    return [projection_frame(project_scenarios(scenarios, args.current_headcount, settings))]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the headcount model CLI."""
    err_logger = logging.getLogger(ERROR_LOGGER)
    args = parse_arguments(argv)
    initialize_logging(debug=args.debug, log_dir=Path(args.log_dir))

    try:
        frames = run_command(args)
    except HeadcountModelError as e:
        err_logger.error(f"Analysis '{args.command}' failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with pd.option_context("display.max_columns", None, "display.width", 200):
        for frame in frames:
            print(frame.to_string(index=False, float_format=lambda v: f"{v:,.1f}"))
            print()
    logging.getLogger(SIMULATION_LOGGER).info(f"Analysis '{args.command}' complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
