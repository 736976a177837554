"""CLI helper that carries out the service stack's actions file."""

from __future__ import annotations

import argparse

from pathlib import Path

from runnerkit.cli import main as runnerkit_main

DEFAULT_ACTIONS = Path(__file__).resolve().parent / "actions.yaml"


def main() -> int:
    parser = argparse.ArgumentParser(description="Service stack example")
    parser.add_argument(
        "--actions",
        type=Path,
        default=DEFAULT_ACTIONS,
        help="Actions file to carry out",
    )
    parser.add_argument(
        "--only",
        action="append",
        default=[],
        help="Only carry out the named action (repeatable)",
    )
    args = parser.parse_args()
    argv = [str(args.actions)]
    for name in args.only:
        argv += ["--action", name]
    return runnerkit_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
