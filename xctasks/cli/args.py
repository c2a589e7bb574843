from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xctasks")

    parser.add_argument(
        "--config",
        default="xctasks.yml",
        help="Path to config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log rendered commands and step timings",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
    )

    # run
    run = subparsers.add_parser("run", help="Run test steps")
    run.add_argument(
        "targets",
        nargs="*",
        help="Step ids to run (default: the whole namespace)",
    )

    # list
    subparsers.add_parser("list", help="List steps in execution order")

    # graph
    subparsers.add_parser("graph", help="Show step dependencies")

    return parser
