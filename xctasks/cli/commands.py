from __future__ import annotations

import argparse
import logging
import sys

from xctasks.config import ConfigurationError, InvalidArgument, load_task
from xctasks.executor import CommandRunner, Executor, run_command
from xctasks.graph import GraphError, StepGraph
from xctasks.report import TestReport
from xctasks.schemes import PreflightError, SchemeError
from xctasks.task import TestTask

from .args import build_parser


def run_cli(
    argv: list[str] | None = None,
    *,
    runner: CommandRunner = run_command,
    report: TestReport | None = None,
) -> int:
    report = report or TestReport()
    code = _dispatch(argv, runner, report)

    # A recorded failure wins over a clean or interrupted exit.
    if code in (0, 130) and report.failure:
        return 1
    return code


def main() -> None:
    sys.exit(run_cli())


def _dispatch(argv: list[str] | None, runner: CommandRunner, report: TestReport) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        match args.command:
            case "run":
                return cmd_run(args, runner, report)
            case "list":
                return cmd_list(args)
            case "graph":
                return cmd_graph(args)
            case _:
                return 2

    except (
        ConfigurationError,
        InvalidArgument,
        GraphError,
        PreflightError,
        SchemeError,
    ) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def cmd_run(args: argparse.Namespace, runner: CommandRunner, report: TestReport) -> int:
    task = TestTask.from_config(load_task(args.config))
    executor = Executor(task.build_graph(runner, report))
    targets: list[str] = args.targets or [task.namespace]

    executor.run_target(*targets)
    return report.exit_code


def cmd_list(args: argparse.Namespace) -> int:
    graph = _graph(args)
    for sid in graph.topo_order():
        print(sid)
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    graph = _graph(args)
    for sid in graph.topo_order():
        deps = " ".join(graph.get(sid).deps)
        print(f"{sid}: {deps}".rstrip())
    return 0


def _graph(args: argparse.Namespace) -> StepGraph:
    task = TestTask.from_config(load_task(args.config))
    return task.build_graph(run_command, TestReport())
