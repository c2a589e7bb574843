from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from xctasks.config import Configuration, ConfigurationError
from xctasks.executor import Executor
from xctasks.report import TestReport
from xctasks.schemes import PreflightError
from xctasks.task import Subtask, TestTask

KILL = 'killall "iPhone Simulator"'
XCTOOL = "/usr/local/bin/xctool -workspace LayerKit.xcworkspace"
XCODEBUILD = "/usr/bin/xcodebuild -workspace LayerKit.xcworkspace"


class Recorder:
    """Stands in for the shell: records commands, fails those matching `failing`."""

    def __init__(self, failing: tuple[str, ...] = ()):
        self.commands: list[str] = []
        self.failing = failing

    def __call__(self, command: str, *, echo: bool = True) -> bool:
        self.commands.append(command)
        return not any(pattern in command for pattern in self.failing)


def _report() -> TestReport:
    return TestReport(Console(file=io.StringIO(), highlight=False))


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    ws = tmp_path / "LayerKit.xcworkspace"
    ws.mkdir()
    return ws


def _advanced_task() -> TestTask:
    task = TestTask()
    task.config.workspace = "LayerKit.xcworkspace"
    task.config.runner = "xctool"
    task.subtask({"unit": "Unit Tests"}, ios_versions=["7.0", "7.1"])

    def functional(config: Configuration) -> None:
        config.runner = "xcodebuild"
        config.scheme = "Functional Tests"

    task.subtask("functional", functional)
    return task


# -------------------------
# Subtask
# -------------------------


def test_subtask_from_name_scheme_pair() -> None:
    subtask = Subtask({"unit": "Unit Tests"}, Configuration(workspace="W"))
    assert subtask.name == "unit"
    assert subtask.config.scheme == "Unit Tests"
    assert not subtask.versioned
    assert subtask.option_sets() == [{}]


def test_subtask_without_scheme_fails_validation() -> None:
    subtask = Subtask("unit", Configuration(workspace="W"))
    with pytest.raises(ConfigurationError, match="A scheme must be configured"):
        subtask.commands()


def test_versioned_subtask_renders_one_command_per_version() -> None:
    config = Configuration(workspace="W", scheme="S", runner="xctool", ios_versions=["7.0", "7.1"])
    subtask = Subtask("unit", config)

    assert subtask.option_sets() == [{"ios_version": "7.0"}, {"ios_version": "7.1"}]
    assert [c.split()[6] for c in subtask.commands()] == ["iphonesimulator7.0", "iphonesimulator7.1"]
    assert all(c.endswith("-freshSimulator") for c in subtask.commands())


def test_run_commands_records_every_outcome() -> None:
    config = Configuration(workspace="W", scheme="S", runner="xctool", ios_versions=["7.0", "7.1"])
    subtask = Subtask("unit", config)
    runner = Recorder(failing=("iphonesimulator7.0",))
    report = _report()

    subtask.run_commands(runner, report)

    assert report[subtask] == {(("ios_version", "7.0"),): False, (("ios_version", "7.1"),): True}
    assert runner.commands[0] == KILL
    assert runner.commands[2] == KILL
    assert report.failure


def test_desktop_sdk_skips_simulator_kill() -> None:
    subtask = Subtask("unit", Configuration(workspace="W", scheme="S", sdk="macosx"))
    runner = Recorder()

    subtask.run_commands(runner, _report())

    assert runner.commands == [
        "/usr/bin/xcodebuild -workspace W -scheme 'S' -sdk macosx clean build test"
    ]


# -------------------------
# TestTask configuration
# -------------------------


def test_subtasks_inherit_and_override() -> None:
    task = _advanced_task()
    unit, functional = task.subtasks

    assert [s.name for s in task.subtasks] == ["unit", "functional"]
    assert str(unit.config.runner) == "xctool"
    assert str(functional.config.runner) == "xcodebuild"
    assert task.config.scheme is None


def test_set_subtasks_from_mapping() -> None:
    task = TestTask(config=Configuration(workspace="W", runner="xcpretty"))
    task.set_subtasks({"unit": "Unit Tests", "functional": "Functional Tests"})

    assert [s.config.scheme for s in task.subtasks] == ["Unit Tests", "Functional Tests"]
    assert [str(s.config.runner) for s in task.subtasks] == ["xcpretty", "xcpretty"]


def test_base_changes_after_declaration_do_not_leak() -> None:
    task = TestTask(config=Configuration(workspace="W"))
    unit = task.subtask({"unit": "Unit Tests"})
    task.config.settings["LATE"] = "1"

    assert unit.config.settings == {}


def test_duplicate_subtask_names_are_rejected() -> None:
    task = TestTask(config=Configuration(workspace="W"))
    task.subtask({"unit": "Unit Tests"})
    with pytest.raises(ConfigurationError):
        task.subtask({"unit": "Other"})
    with pytest.raises(ConfigurationError):
        task.subtask({"prepare": "Other"})


def test_validate_requires_subtasks_and_workspace() -> None:
    with pytest.raises(ConfigurationError, match="At least one subtask"):
        TestTask(config=Configuration(workspace="W")).validate()

    task = TestTask()
    task.subtask({"unit": "Unit Tests"})
    with pytest.raises(ConfigurationError, match="workspace or project"):
        task.build_graph(Recorder(), _report())


def test_macosx_with_versions_fails_before_running() -> None:
    task = TestTask(config=Configuration(workspace="W", sdk="macosx", ios_versions=["7.0"]))
    task.subtask({"unit": "MyWorkspaceTests"})
    runner = Recorder()

    with pytest.raises(ConfigurationError, match="Cannot specify iOS versions"):
        task.build_graph(runner, _report())
    assert runner.commands == []


# -------------------------
# Step graph and execution
# -------------------------


def test_graph_layout() -> None:
    graph = _advanced_task().build_graph(Recorder(), _report())

    assert graph.topo_order() == [
        "test:prepare",
        "test:unit:prepare",
        "test:unit:7.0",
        "test:unit:7.1",
        "test:unit",
        "test:functional:prepare",
        "test:functional",
        "test",
    ]


def test_unit_step_runs_each_version(workspace: Path) -> None:
    task = _advanced_task()
    runner = Recorder()
    report = _report()

    Executor(task.build_graph(runner, report)).run_target("test:unit")

    assert runner.commands == [
        KILL,
        f"{XCTOOL} -scheme 'Unit Tests' -sdk iphonesimulator7.0 clean build test -freshSimulator",
        KILL,
        f"{XCTOOL} -scheme 'Unit Tests' -sdk iphonesimulator7.1 clean build test -freshSimulator",
    ]
    assert len(report) == 2


def test_single_version_step(workspace: Path) -> None:
    task = _advanced_task()
    runner = Recorder()

    Executor(task.build_graph(runner, _report())).run_target("test:unit:7.1")

    assert runner.commands[1].endswith("-sdk iphonesimulator7.1 clean build test -freshSimulator")
    assert len(runner.commands) == 2


def test_functional_step(workspace: Path) -> None:
    task = _advanced_task()
    runner = Recorder()

    Executor(task.build_graph(runner, _report())).run_target("test:functional")

    assert runner.commands == [
        KILL,
        f"{XCODEBUILD} -scheme 'Functional Tests' -sdk iphonesimulator clean build test",
    ]


def test_failures_do_not_stop_the_run(workspace: Path) -> None:
    task = _advanced_task()
    runner = Recorder(failing=("iphonesimulator7.0",))
    buf = io.StringIO()
    report = TestReport(Console(file=buf, highlight=False, soft_wrap=True))

    Executor(task.build_graph(runner, report)).run_all()

    assert len(report) == 3
    assert report.failure
    assert buf.getvalue().splitlines() == ["!! unit tests failed under iOS 7.0"]


def test_prepare_installs_schemes_and_truncates_log(workspace: Path, tmp_path: Path) -> None:
    schemes = tmp_path / "Schemes"
    schemes.mkdir()
    (schemes / "Unit Tests.xcscheme").write_text("<Scheme/>", encoding="utf-8")
    (schemes / "notes.txt").write_text("skip", encoding="utf-8")
    log = tmp_path / "output.log"
    log.write_text("stale", encoding="utf-8")

    task = TestTask(
        config=Configuration(
            workspace="LayerKit.xcworkspace", schemes_dir="Schemes", output_log="output.log"
        )
    )
    task.set_subtasks({"unit": "Unit Tests"})
    Executor(task.build_graph(Recorder(), _report())).run_target("test:prepare")

    installed = workspace / "xcshareddata" / "xcschemes"
    assert [p.name for p in installed.iterdir()] == ["Unit Tests.xcscheme"]
    assert log.read_text(encoding="utf-8") == ""


def test_missing_workspace_aborts_before_commands(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    task = _advanced_task()
    runner = Recorder()

    with pytest.raises(PreflightError, match="Unable to find workspace"):
        Executor(task.build_graph(runner, _report())).run_all()
    assert runner.commands == []


def test_prepare_dependency_runs_first_and_failure_aborts(workspace: Path) -> None:
    task = TestTask(
        config=Configuration(workspace="LayerKit.xcworkspace"), prepare_dependency="build"
    )
    task.tasks = {"build": "make app"}
    task.set_subtasks({"unit": "Unit Tests"})
    runner = Recorder(failing=("make app",))

    with pytest.raises(PreflightError, match="Task 'build' failed"):
        Executor(task.build_graph(runner, _report())).run_all()
    assert runner.commands == ["make app"]


def test_duplicate_ios_versions_fail_validation_before_graph() -> None:
    task = TestTask(config=Configuration(workspace="W"))
    task.subtask("unit", scheme="U", ios_versions=["7.0", "7.0"])

    with pytest.raises(ConfigurationError, match="Duplicate iOS version"):
        task.build_graph(Recorder(), _report())
