from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .errors import InvalidArgument


class Platform(str, Enum):
    OSX = "OS X"
    IOS = "iOS"
    IOS_SIMULATOR = "iOS Simulator"


_PLATFORM_SYMBOLS = {
    "osx": Platform.OSX,
    "ios": Platform.IOS,
    "iossimulator": Platform.IOS_SIMULATOR,
}

# Serialization order; "os" is rendered with its xcodebuild label.
_ARG_LABELS = (
    ("platform", "platform"),
    ("name", "name"),
    ("arch", "arch"),
    ("id", "id"),
    ("os", "OS"),
)

_KEY_ALIASES = {
    "architecture": "arch",
    "device_id": "id",
    "device-id": "id",
    "os_version": "os",
    "os-version": "os",
}


def resolve_platform(value: object) -> str:
    if isinstance(value, Platform):
        return value.value
    if isinstance(value, str):
        if value in _PLATFORM_SYMBOLS:
            return _PLATFORM_SYMBOLS[value].value
        try:
            return Platform(value).value
        except ValueError:
            pass
    raise InvalidArgument(
        f"Invalid destination platform {value!r}: expected one of "
        "osx, ios, iossimulator or 'OS X', 'iOS', 'iOS Simulator'"
    )


@dataclass
class Destination:
    platform: str | None = None
    name: str | None = None
    arch: str | None = None
    id: str | None = None
    os: str | None = None

    def __setattr__(self, key: str, value: Any) -> None:
        if value is not None:
            if key == "platform":
                value = resolve_platform(value)
            elif not isinstance(value, str):
                raise InvalidArgument(f"Destination {key} must be a string, got {type(value)}")
        super().__setattr__(key, value)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> Destination:
        dest = cls()
        for key, value in values.items():
            attr = _KEY_ALIASES.get(key, key)
            if attr not in dict(_ARG_LABELS):
                raise InvalidArgument(f"Unknown destination key: {key}")
            setattr(dest, attr, value)
        return dest

    def to_arg(self) -> str:
        return ",".join(
            f"{label}='{getattr(self, key)}'"
            for key, label in _ARG_LABELS
            if getattr(self, key) is not None
        )


@dataclass(frozen=True)
class RawDestination:
    """A destination specifier the caller has already shell-escaped."""

    value: str

    def to_arg(self) -> str:
        return self.value
