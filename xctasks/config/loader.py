import json
import tomllib
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .errors import ConfigurationError, InvalidArgument, UnsupportedConfigFormatError
from .types import Configuration, TaskConfig

_TASK_KEYS = {"namespace", "prepare_dependency", "tasks", "subtasks"}
_STRING_FIELDS = {
    "workspace",
    "project",
    "schemes_dir",
    "sdk",
    "runner",
    "xctool_path",
    "xcodebuild_path",
    "scheme",
    "output_log",
}
_LIST_FIELDS = {"actions", "ios_versions"}
_MAPPING_FIELDS = {"settings", "env"}


def load_task(path: str | Path) -> TaskConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigurationError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigurationError(f"Config path is not a file: {pure_path}")

    parse = _detect_format(pure_path)
    raw = parse(pure_path)
    task = _build_task_config(raw)
    return task


def _detect_format(path: Path) -> Callable[[Path], Mapping[str, Any]]:
    match path.suffix:
        case ".yaml" | ".yml":
            return _parse_yaml
        case ".toml":
            return _parse_toml
        case ".json":
            return _parse_json
        case fmt:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_yaml(path: Path) -> Mapping[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{path}: invalid YAML") from exc
    return _top_level(path, "YAML", raw)


def _parse_toml(path: Path) -> Mapping[str, Any]:
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"{path}: invalid TOML") from exc
    return _top_level(path, "TOML", raw)


def _parse_json(path: Path) -> Mapping[str, Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{path}: invalid JSON") from exc
    return _top_level(path, "JSON", raw)


def _top_level(path: Path, fmt: str, raw: object) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"{path}: {fmt} parsed successfully but top-level value is not an object: {type(raw)}"
        )
    return raw


def _build_task_config(raw: Mapping[str, Any]) -> TaskConfig:
    known = _TASK_KEYS | Configuration.field_names()
    for key in raw.keys():
        if key not in known:
            raise ConfigurationError(f"Can't process: {key}")

    namespace = _string(raw, "namespace", "namespace") if "namespace" in raw else "test"
    prepare_dependency = None
    if "prepare_dependency" in raw:
        prepare_dependency = _string(raw, "prepare_dependency", "prepare_dependency")

    tasks = _build_user_tasks(raw.get("tasks", {}))
    if prepare_dependency is not None and prepare_dependency not in tasks:
        raise ConfigurationError(
            f"prepare_dependency '{prepare_dependency}' is not a declared task"
        )

    base = Configuration()
    _apply_fields(base, raw, namespace)
    base.validate()

    if "subtasks" not in raw:
        raise ConfigurationError("Missing 'subtasks' field")

    if not isinstance(raw["subtasks"], Mapping):
        raise ConfigurationError(f"'subtasks' must be a mapping, got {type(raw['subtasks'])}")

    if len(raw["subtasks"]) < 1:
        raise ConfigurationError("There must be at least one subtask in the config file")

    subtasks: dict[str, Configuration] = {}
    for name, fields in raw["subtasks"].items():
        if not isinstance(name, str):
            raise ConfigurationError(f"Subtask name must be a string, got {type(name)}")

        name_norm = name.strip()

        if len(name_norm) < 1:
            raise ConfigurationError("A subtask name can't be empty")

        if name_norm in subtasks:
            raise ConfigurationError(f"Duplicate subtask name after normalization: {name_norm}")

        if isinstance(fields, str):
            fields = {"scheme": fields}

        if not isinstance(fields, Mapping):
            raise ConfigurationError(
                f"{name_norm}: must be a scheme name or a mapping of overrides"
            )

        for field in fields.keys():
            if field not in Configuration.field_names():
                raise ConfigurationError(f"{name_norm}: Can't process: {field}")

        config = base.derive()
        _apply_fields(config, fields, name_norm)

        if not config.scheme:
            raise ConfigurationError(f"{name_norm}: missing 'scheme'")
        config.validate()

        subtasks[name_norm] = config

    return TaskConfig(namespace, base, subtasks, prepare_dependency, tasks)


def _build_user_tasks(raw: object) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"'tasks' must be a mapping, got {type(raw)}")

    tasks = {}
    for task_id, command in raw.items():
        if not isinstance(task_id, str) or len(task_id.strip()) < 1:
            raise ConfigurationError(f"Task id must be a non empty string, got {task_id!r}")

        if not isinstance(command, str) or len(command.strip()) < 1:
            raise ConfigurationError(f"{task_id}: The command should be a non empty string")

        tasks[task_id.strip()] = command.strip()

    return tasks


def _apply_fields(config: Configuration, fields: Mapping[str, Any], owner: str) -> None:
    for key, value in fields.items():
        if key in _STRING_FIELDS:
            setattr(config, key, _string(fields, key, owner))
        elif key in _LIST_FIELDS:
            setattr(config, key, _string_list(value, key, owner))
        elif key in _MAPPING_FIELDS:
            setattr(config, key, _string_mapping(value, key, owner))
        elif key == "redirect_stderr":
            if not isinstance(value, (bool, str)):
                raise ConfigurationError(
                    f"{owner}: redirect_stderr should be a boolean or a path"
                )
            config.redirect_stderr = value
        elif key == "destinations":
            config.destinations = []
            _add_destinations(config, value, owner)


def _add_destinations(config: Configuration, value: object, owner: str) -> None:
    if not isinstance(value, list):
        raise ConfigurationError(f"{owner}: destinations should be in a list.")

    for item in value:
        if not isinstance(item, (str, Mapping)):
            raise ConfigurationError(
                f"{owner}: a destination should be a string or a mapping, got {type(item)}"
            )
        try:
            config.destination(item)
        except InvalidArgument as exc:
            raise ConfigurationError(f"{owner}: {exc}") from exc


def _string(fields: Mapping[str, Any], key: str, owner: str) -> str:
    value = fields[key]

    if not isinstance(value, str):
        raise ConfigurationError(f"{owner}: {key} should be a string")

    if len(value.strip()) < 1:
        raise ConfigurationError(f"{owner}: Please provide a value for {key} or remove this field")

    return value.strip()


def _string_list(value: object, key: str, owner: str) -> list[str]:
    if not isinstance(value, list):
        raise ConfigurationError(f"{owner}: {key} should be in a list.")

    items = []
    for item in value:
        # YAML reads 7.10 as a float; versions must be quoted.
        if not isinstance(item, str):
            raise ConfigurationError(
                f"{owner}: {item!r} should be a string in {key} (quote version numbers)"
            )

        if len(item.strip()) < 1:
            raise ConfigurationError(f"{owner}: An entry of {key} is empty")

        if key == "ios_versions" and item.strip() in items:
            raise ConfigurationError(f"{owner}: Duplicate iOS version: {item.strip()}")

        items.append(item.strip())

    return items


def _string_mapping(value: object, key: str, owner: str) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{owner}: {key} should be a mapping")

    out = {}
    for name, item in value.items():
        if not isinstance(name, str):
            raise ConfigurationError(f"{owner}: {name} should be a string")

        if len(name.strip()) < 1:
            raise ConfigurationError(f"{owner}: A key of {key} can't be empty")

        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise ConfigurationError(f"{owner}: {item} should be a string")

        out[name.strip()] = str(item)

    return out
