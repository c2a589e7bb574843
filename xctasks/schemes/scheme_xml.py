from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Mapping

from .types import SchemeError

logger = logging.getLogger(__name__)


def inject_environment(path: str | Path, env: Mapping[str, str]) -> None:
    """Enable `env` as environment variables of the scheme's TestAction.

    Entries with a key already present in the scheme are updated in place,
    new keys are appended in mapping order.
    """
    scheme = Path(path)
    try:
        tree = ET.parse(scheme)
    except FileNotFoundError:
        raise SchemeError(scheme, "scheme file not found") from None
    except ET.ParseError as exc:
        raise SchemeError(scheme, "invalid scheme XML") from exc

    test_action = tree.getroot().find("TestAction")
    if test_action is None:
        raise SchemeError(scheme, "scheme has no TestAction")

    block = test_action.find("EnvironmentVariables")
    if block is None:
        block = ET.SubElement(test_action, "EnvironmentVariables")

    existing = {el.get("key"): el for el in block.findall("EnvironmentVariable")}
    for key, value in env.items():
        entry = existing.get(key)
        if entry is None:
            entry = ET.SubElement(block, "EnvironmentVariable")
        entry.set("key", key)
        entry.set("value", value)
        entry.set("isEnabled", "YES")

    tree.write(scheme, encoding="UTF-8", xml_declaration=True)
    logger.info("Injected %d environment variable(s) into %s", len(env), scheme)
