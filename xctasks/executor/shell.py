from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Protocol

logger = logging.getLogger(__name__)

# Pipelines rely on ${PIPESTATUS[0]}, which only bash provides.
_SHELL = shutil.which("bash") or "/bin/bash"


class CommandRunner(Protocol):
    def __call__(self, command: str, *, echo: bool = True) -> bool: ...


def run_command(command: str, *, echo: bool = True) -> bool:
    if echo:
        print(f"Executing `{command}`", flush=True)
    logger.debug("Running %s", command)

    result = subprocess.run(command, shell=True, executable=_SHELL)

    logger.debug("Exit code %d for %s", result.returncode, command)
    return result.returncode == 0
