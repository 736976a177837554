"""CLI entrypoints for runnerkit."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from dotenv import load_dotenv

from runnerkit.configuration import (
    build_actions,
    build_runner_settings,
    import_plugin_modules,
    select_actions,
)
from runnerkit.exceptions import RunnerConfigError, RunnerError
from runnerkit.logging import configure_console_logging, setup_file_logger
from runnerkit.orchestrator import Runner
from runnerkit.types import ActionEntry

LOGGER = logging.getLogger(__name__)
CLI_ACTION = "cli"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runnerkit",
        description="Load runnable units, configure them and run them.",
    )
    parser.add_argument(
        "actions_file",
        nargs="?",
        type=str,
        help="YAML file with a 'runner' section and an 'actions' map.",
    )
    parser.add_argument(
        "--action",
        action="append",
        dest="actions",
        help="Only carry out the named action (repeatable, keeps order).",
    )
    parser.add_argument(
        "--path",
        type=str,
        help="Run a single unit instead of the file's actions.",
    )
    parser.add_argument(
        "--arg",
        action="append",
        dest="unit_args",
        help="Argument passed to the --path unit's run (repeatable).",
    )
    parser.add_argument(
        "--forever",
        action="store_true",
        help="Mark the --path unit as long-running.",
    )
    parser.add_argument(
        "--base-dir",
        type=str,
        help="Directory relative unit paths resolve against.",
    )
    parser.add_argument(
        "--default-export",
        type=str,
        help="Module attribute holding the runnable (default: 'default').",
    )
    parser.add_argument(
        "--plugin-module",
        action="append",
        dest="plugin_modules",
        help="Import the given module first (registers runnables).",
    )
    parser.add_argument(
        "--no-wait",
        action="store_true",
        help="Return once actions finish; skip awaiting background tasks.",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write runnerkit logs to this rotating file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for the console and the --log-file.",
    )
    return parser


def _load_config(config_path: Path) -> dict:
    if not config_path.exists():
        raise RunnerConfigError(f"Actions file '{config_path}' not found.")
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise RunnerConfigError(
            f"Actions file '{config_path}' is not valid YAML: {exc}"
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RunnerConfigError(
            f"Actions file '{config_path}' must contain a mapping."
        )
    return data


def _apply_cli_overrides(args: argparse.Namespace, config: dict) -> dict:
    runner_cfg = config.get("runner") or {}
    if not isinstance(runner_cfg, dict):
        raise RunnerConfigError("'runner' section must be a mapping")
    config["runner"] = runner_cfg
    if args.base_dir:
        runner_cfg["base_dir"] = str(Path(args.base_dir).resolve())
    if args.default_export:
        runner_cfg["default_export"] = args.default_export
    plugin_cfg = runner_cfg.get("plugins") or {}
    if not isinstance(plugin_cfg, dict):
        raise RunnerConfigError("'runner.plugins' must be a mapping")
    runner_cfg["plugins"] = plugin_cfg
    modules = list(plugin_cfg.get("modules") or [])
    for mod in args.plugin_modules or []:
        if mod not in modules:
            modules.append(mod)
    plugin_cfg["modules"] = modules
    if args.path:
        config["actions"] = {
            CLI_ACTION: {
                "path": args.path,
                "args": list(args.unit_args or []) or None,
                "forever": args.forever,
            }
        }
    return config


async def _drain_background_tasks() -> None:
    """Keep the loop alive while units marked forever still have work."""

    current = asyncio.current_task()
    while True:
        pending = [
            task
            for task in asyncio.all_tasks()
            if task is not current and not task.done()
        ]
        if not pending:
            return
        LOGGER.info("Waiting on %d background task(s)", len(pending))
        results = await asyncio.gather(*pending, return_exceptions=True)
        for task, result in zip(pending, results):
            if isinstance(result, asyncio.CancelledError):
                continue
            if isinstance(result, BaseException):
                LOGGER.error(
                    "Background task %s failed: %s", task.get_name(), result
                )


async def _carry_out(
    runner: Runner, actions: Mapping[str, ActionEntry], *, wait: bool
) -> Dict[str, Any]:
    results = await runner.runner_actions(actions)
    if wait:
        await _drain_background_tasks()
    return results


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    load_dotenv()
    configure_console_logging(args.log_level)
    if args.log_file:
        setup_file_logger(Path(args.log_file), level=args.log_level)

    if not args.actions_file and not args.path:
        parser.error("an actions file or --path is required")
    if args.unit_args and not args.path:
        parser.error("--arg requires --path")

    try:
        if args.actions_file:
            config_path = Path(args.actions_file).expanduser()
            config_data = _load_config(config_path)
            config_root = config_path.resolve().parent
        else:
            config_data = {}
            config_root = Path.cwd()
        config_data = _apply_cli_overrides(args, config_data)
        settings = build_runner_settings(config_data, config_root=config_root)
        import_plugin_modules(settings.plugins)
        actions = build_actions(config_data.get("actions"))
        if args.actions and not args.path:
            actions = select_actions(actions, args.actions)
        if not actions:
            print("No actions to run.", file=sys.stderr)
            return 0
        runner = Runner.from_base_dir(
            settings.base_dir, default_export=settings.default_export
        )
        asyncio.run(_carry_out(runner, actions, wait=not args.no_wait))
    except RunnerError as exc:
        print(f"runnerkit: {exc}", file=sys.stderr)
        return 3
    except KeyboardInterrupt:  # pragma: no cover - interactive only
        return 130
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
