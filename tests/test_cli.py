from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from runnerkit.cli import main

WRITER_UNIT = """\
from pathlib import Path


class Writer:
    async def configure(self):
        self.prefix = "configured"

    async def run(self, args=None):
        target, text = args
        with Path(target).open("a", encoding="utf-8") as handle:
            handle.write(f"{self.prefix}:{text}\\n")


default = Writer
"""

FAILING_UNIT = """\
class Broken:
    async def configure(self):
        pass

    async def run(self, args=None):
        raise RuntimeError("unit crashed")


default = Broken
"""

SERVICE_UNIT = """\
import asyncio
from pathlib import Path


class Service:
    async def configure(self):
        pass

    async def _serve(self, target):
        for _ in range(3):
            await asyncio.sleep(0)
        Path(target).write_text("served")

    async def run(self, args=None):
        return asyncio.get_running_loop().create_task(self._serve(args[0]))


default = Service
"""


CRASHING_SERVICE_UNIT = """\
import asyncio


class CrashingService:
    async def configure(self):
        pass

    async def _serve(self):
        await asyncio.sleep(0)
        raise ConnectionError("listener went away")

    async def run(self, args=None):
        return asyncio.get_running_loop().create_task(
            self._serve(), name="crashing-service"
        )


default = CrashingService
"""


def _write_actions(tmp_path: Path, config: dict) -> Path:
    path = tmp_path / "actions.yaml"
    path.write_text(yaml.safe_dump(config, sort_keys=False))
    return path


def test_cli_runs_actions_in_order(tmp_path: Path, write_unit) -> None:
    write_unit("units/writer.py", WRITER_UNIT)
    log = tmp_path / "log.txt"
    actions_file = _write_actions(
        tmp_path,
        {
            "runner": {"base_dir": "units"},
            "actions": {
                "one": {"path": "./writer", "args": [str(log), "one"]},
                "skip": {"parallelism": []},
                "group": {
                    "parallelism": [
                        {"path": "./writer", "args": [str(log), "two"]},
                        {"path": "./writer.py", "args": [str(log), "three"]},
                    ]
                },
            },
        },
    )

    assert main([str(actions_file)]) == 0
    assert log.read_text().splitlines() == [
        "configured:one",
        "configured:two",
        "configured:three",
    ]


def test_cli_selects_named_actions(tmp_path: Path, write_unit) -> None:
    write_unit("writer.py", WRITER_UNIT)
    log = tmp_path / "log.txt"
    actions_file = _write_actions(
        tmp_path,
        {
            "actions": {
                "a": {"path": "./writer", "args": [str(log), "a"]},
                "b": {"path": "./writer", "args": [str(log), "b"]},
            }
        },
    )
    assert main([str(actions_file), "--action", "b"]) == 0
    assert log.read_text().splitlines() == ["configured:b"]
    assert main([str(actions_file), "--action", "missing"]) == 3


def test_cli_single_path(tmp_path: Path, write_unit) -> None:
    write_unit("writer.py", WRITER_UNIT)
    log = tmp_path / "log.txt"
    exit_code = main(
        [
            "--path",
            "./writer",
            "--base-dir",
            str(tmp_path),
            "--arg",
            str(log),
            "--arg",
            "solo",
        ]
    )
    assert exit_code == 0
    assert log.read_text() == "configured:solo\n"


def test_cli_default_export_override(tmp_path: Path, write_unit) -> None:
    write_unit("writer.py", WRITER_UNIT.replace("default = ", "Unit = "))
    log = tmp_path / "log.txt"
    args = ["--path", "./writer", "--base-dir", str(tmp_path)]
    args += ["--arg", str(log), "--arg", "x"]
    assert main(args) == 3
    assert main(args + ["--default-export", "Unit"]) == 0
    assert log.read_text() == "configured:x\n"


def test_cli_run_failure_exits_with_status_one(
    tmp_path: Path, write_unit
) -> None:
    write_unit("broken.py", FAILING_UNIT)
    actions_file = _write_actions(
        tmp_path, {"actions": {"crash": {"path": "./broken"}}}
    )
    with pytest.raises(SystemExit) as info:
        main([str(actions_file)])
    assert info.value.code == 1


def test_cli_waits_for_forever_units(tmp_path: Path, write_unit) -> None:
    write_unit("service.py", SERVICE_UNIT)
    served = tmp_path / "served.txt"
    actions_file = _write_actions(
        tmp_path,
        {
            "actions": {
                "svc": {
                    "path": "./service",
                    "args": [str(served)],
                    "forever": True,
                }
            }
        },
    )
    assert main([str(actions_file)]) == 0
    assert served.read_text() == "served"


def test_cli_no_wait_returns_immediately(tmp_path: Path, write_unit) -> None:
    write_unit("service.py", SERVICE_UNIT)
    served = tmp_path / "served.txt"
    exit_code = main(
        [
            "--path",
            "./service",
            "--base-dir",
            str(tmp_path),
            "--arg",
            str(served),
            "--forever",
            "--no-wait",
        ]
    )
    assert exit_code == 0
    assert not served.exists()


def test_cli_config_errors(tmp_path: Path, capsys) -> None:
    assert main([str(tmp_path / "missing.yaml")]) == 3
    assert "not found" in capsys.readouterr().err

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    assert main([str(bad)]) == 3

    unresolved = _write_actions(
        tmp_path, {"actions": {"x": {"path": "./nowhere"}}}
    )
    assert main([str(unresolved)]) == 3
    assert "Cannot find runnable module" in capsys.readouterr().err


def test_cli_empty_actions(tmp_path: Path) -> None:
    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert main([str(empty)]) == 0


def test_cli_usage_errors() -> None:
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2
    with pytest.raises(SystemExit):
        main(["actions.yaml", "--arg", "x"])


def test_cli_log_file(tmp_path: Path, write_unit) -> None:
    write_unit("writer.py", WRITER_UNIT)
    log_file = tmp_path / "logs" / "runnerkit.log"
    exit_code = main(
        [
            "--path",
            "./writer",
            "--base-dir",
            str(tmp_path),
            "--arg",
            str(tmp_path / "out.txt"),
            "--arg",
            "logged",
            "--log-file",
            str(log_file),
        ]
    )
    assert exit_code == 0
    assert "Finished running './writer'" in log_file.read_text()


@pytest.mark.parametrize(
    ("level", "finished_logged", "configure_logged"),
    [("ERROR", False, False), ("INFO", True, False), ("DEBUG", True, True)],
)
def test_cli_log_level_applies_with_log_file(
    tmp_path: Path,
    write_unit,
    caplog,
    level: str,
    finished_logged: bool,
    configure_logged: bool,
) -> None:
    write_unit("writer.py", WRITER_UNIT)
    log_file = tmp_path / "runnerkit.log"
    exit_code = main(
        [
            "--path",
            "./writer",
            "--base-dir",
            str(tmp_path),
            "--arg",
            str(tmp_path / "out.txt"),
            "--arg",
            "quiet",
            "--log-level",
            level,
            "--log-file",
            str(log_file),
        ]
    )
    assert exit_code == 0
    assert ("Finished running './writer'" in caplog.text) is finished_logged
    assert ("Configuring ./writer" in caplog.text) is configure_logged
    assert (
        "Finished running './writer'" in log_file.read_text()
    ) is finished_logged


def test_cli_logs_failed_background_tasks(
    tmp_path: Path, write_unit, caplog
) -> None:
    write_unit("crashing_service.py", CRASHING_SERVICE_UNIT)
    exit_code = main(
        ["--path", "./crashing_service", "--base-dir", str(tmp_path)]
    )
    assert exit_code == 0
    failures = [
        record
        for record in caplog.records
        if record.levelname == "ERROR" and "failed" in record.getMessage()
    ]
    assert len(failures) == 1
    assert "Background task crashing-service failed" in caplog.text
    assert "listener went away" in caplog.text
