from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Mapping

from .destination import Destination, RawDestination
from .errors import ConfigurationError, InvalidArgument


class SDK(str, Enum):
    IPHONESIMULATOR = "iphonesimulator"
    IPHONEOS = "iphoneos"
    MACOSX = "macosx"


def normalize_sdk(value: object) -> str:
    if isinstance(value, SDK):
        return value.value
    if not isinstance(value, str):
        raise InvalidArgument("Can only assign sdk from a string or an SDK member")
    if len(value.strip()) < 1:
        raise InvalidArgument("The sdk can't be empty")
    return value.strip().lower()


class RunnerKind(str, Enum):
    XCTOOL = "xctool"
    XCODEBUILD = "xcodebuild"
    XCPRETTY = "xcpretty"


@dataclass(frozen=True)
class Runner:
    kind: RunnerKind
    extra_flags: str = ""
    source: str = field(default="", compare=False)

    @classmethod
    def parse(cls, value: Runner | RunnerKind | str) -> Runner:
        if isinstance(value, Runner):
            return value
        if isinstance(value, RunnerKind):
            return cls(value, source=value.value)
        if not isinstance(value, str):
            raise ConfigurationError("Must be xcodebuild, xctool or xcpretty")

        parts = value.split(None, 1)
        try:
            kind = RunnerKind(parts[0])
        except (IndexError, ValueError):
            raise ConfigurationError("Must be xcodebuild, xctool or xcpretty") from None

        return cls(kind, parts[1].strip() if len(parts) > 1 else "", value.strip())

    @property
    def command(self) -> str:
        # Verbatim runner string as assigned.
        return self.source or f"{self.kind.value} {self.extra_flags}".strip()

    def __str__(self) -> str:
        return self.command


_DEFAULT_ACTIONS = ("clean", "build", "test")


@dataclass
class Configuration:
    workspace: str | None = None
    project: str | None = None
    schemes_dir: str | None = None
    sdk: str = SDK.IPHONESIMULATOR.value
    runner: Runner = Runner(RunnerKind.XCODEBUILD)
    xctool_path: str = "/usr/local/bin/xctool"
    xcodebuild_path: str = "/usr/bin/xcodebuild"
    settings: dict[str, str] = field(default_factory=dict)
    destinations: list[Destination | RawDestination] = field(default_factory=list)
    actions: list[str] = field(default_factory=lambda: list(_DEFAULT_ACTIONS))
    scheme: str | None = None
    ios_versions: list[str] = field(default_factory=list)
    output_log: str | None = None
    redirect_stderr: bool | str = False
    env: dict[str, str] = field(default_factory=dict)

    def __setattr__(self, name: str, value: Any) -> None:
        match name:
            case "runner":
                value = Runner.parse(value)
            case "sdk":
                value = normalize_sdk(value)
        super().__setattr__(name, value)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    @property
    def target(self) -> str | None:
        return self.workspace or self.project

    @property
    def target_flag(self) -> str:
        if self.workspace:
            return f"-workspace {self.workspace}"
        return f"-project {self.project}"

    @property
    def versioned(self) -> bool:
        return len(self.ios_versions) > 0

    @property
    def simulator(self) -> bool:
        return self.sdk == SDK.IPHONESIMULATOR.value

    def destination(
        self,
        specifier: str | Mapping[str, Any] | None = None,
        configure: Callable[[Destination], None] | None = None,
        **values: Any,
    ) -> Destination | RawDestination:
        if isinstance(specifier, str):
            if configure is not None or values:
                raise InvalidArgument(
                    "A raw destination string cannot be combined with other destination options"
                )
            dest: Destination | RawDestination = RawDestination(specifier)
        else:
            dest = Destination.from_mapping({**(specifier or {}), **values})
            if configure is not None:
                configure(dest)

        self.destinations.append(dest)
        return dest

    def derive(self, **overrides: Any) -> Configuration:
        unknown = set(overrides) - self.field_names()
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration field(s): {', '.join(sorted(unknown))}"
            )

        child = copy.copy(self)
        child.settings = dict(self.settings)
        child.destinations = copy.deepcopy(self.destinations)
        child.actions = list(self.actions)
        child.ios_versions = list(self.ios_versions)
        child.env = dict(self.env)

        for name, value in overrides.items():
            setattr(child, name, value)

        return child

    def validate(self) -> None:
        if self.workspace and self.project:
            raise ConfigurationError("Cannot configure both a workspace and a project")

        if not self.target:
            raise ConfigurationError("A workspace or project must be configured")

        if self.sdk == SDK.MACOSX.value and self.versioned:
            raise ConfigurationError(
                "Cannot specify iOS versions with an SDK of macosx"
            )

        seen = set()
        for version in self.ios_versions:
            if version in seen:
                raise ConfigurationError(f"Duplicate iOS version: {version}")
            seen.add(version)


@dataclass
class TaskConfig:
    namespace: str
    base: Configuration
    subtasks: dict[str, Configuration]
    prepare_dependency: str | None = None
    tasks: dict[str, str] = field(default_factory=dict)
