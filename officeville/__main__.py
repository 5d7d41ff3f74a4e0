"""Module entry point for `python -m officeville`."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.logging import RichHandler

from officeville.app import (
    resolve_log_level,
    run_simulation,
    run_simulation_with_viewer,
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Officeville simulation.")
    parser.add_argument(
        "--view",
        action="store_true",
        help="Run the office live in the terminal viewer.",
    )
    parser.add_argument(
        "--world",
        type=Path,
        default=None,
        help="Office JSON file (defaults to the built-in demo office).",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=600,
        help="Number of frames to run headless. Use 0 to run until interrupted.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for routes, seating and conversation cooldowns.",
    )
    parser.add_argument(
        "--chat",
        default=None,
        help="Chat backend for talking to NPCs: fake, loading or none.",
    )
    parser.add_argument(
        "--print-every",
        type=int,
        default=0,
        help="Print every Nth frame while running headless.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to OFFICEVILLE_LOG_LEVEL or WARNING).",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=resolve_log_level(args.log_level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )

    if args.view:
        run_simulation_with_viewer(args.world, seed=args.seed, chat_backend=args.chat)
        return

    run_simulation(
        args.world,
        ticks=args.ticks or None,
        seed=args.seed,
        chat_backend=args.chat,
        print_every=args.print_every,
    )


if __name__ == "__main__":
    main()
