from __future__ import annotations

import logging
import shutil
from pathlib import Path

from xctasks.config import Configuration

from .types import PreflightError

logger = logging.getLogger(__name__)


def shared_schemes_dir(config: Configuration) -> Path:
    return Path(config.target or "") / "xcshareddata" / "xcschemes"


def scheme_path(config: Configuration) -> Path:
    return shared_schemes_dir(config) / f"{config.scheme}.xcscheme"


def check_paths(config: Configuration) -> None:
    kind = "workspace" if config.workspace else "project"
    if not config.target or not Path(config.target).exists():
        raise PreflightError(f"Unable to find {kind}: {config.target}")

    if config.schemes_dir and not Path(config.schemes_dir).is_dir():
        raise PreflightError(f"Unable to find schemes directory: {config.schemes_dir}")


def install_schemes(config: Configuration) -> list[Path]:
    if not config.schemes_dir:
        return []

    dest = shared_schemes_dir(config)
    dest.mkdir(parents=True, exist_ok=True)
    logger.info("mkdir -p %s", dest)

    installed = []
    for src in sorted(Path(config.schemes_dir).glob("*.xcscheme")):
        shutil.copy2(src, dest / src.name)
        logger.info("cp %s %s", src, dest)
        installed.append(dest / src.name)

    return installed


def truncate_log(path: str | Path) -> None:
    log = Path(path)
    log.parent.mkdir(parents=True, exist_ok=True)
    log.write_text("", encoding="utf-8")
    logger.info("Truncated output log %s", log)
