from __future__ import annotations

from xctasks.config import Configuration, RunnerKind

SIMULATOR_KILL_COMMAND = 'killall "iPhone Simulator"'
DEFAULT_WRAPPER = "xcpretty -c"
_KEEP_BUILD_STATUS = "; exit ${PIPESTATUS[0]}"


def render_command(config: Configuration, ios_version: str | None = None) -> str:
    """Render one runner invocation for `config`.

    The SDK gets `ios_version` appended without a separator when given.
    When the output goes through a pipeline (tee and/or xcpretty) the
    command exits with the status of the build stage.
    """
    runner = config.runner
    parts = [
        _executable(config),
        config.target_flag,
        f"-scheme '{config.scheme}'",
        f"-sdk {config.sdk}{ios_version or ''}",
    ]
    parts.extend(f"-destination {dest.to_arg()}" for dest in config.destinations)
    parts.extend(config.actions)

    if runner.kind is RunnerKind.XCTOOL and ios_version:
        parts.append("-freshSimulator")

    parts.extend(f"{key}={value}" for key, value in config.settings.items())

    piped = False
    if config.output_log:
        parts.extend(["|", f"tee -a {config.output_log}"])
        piped = True

    if runner.kind is RunnerKind.XCPRETTY:
        parts.extend(["|", runner.command if runner.extra_flags else DEFAULT_WRAPPER])
        piped = True

    parts.append(_stderr_redirect(config.redirect_stderr))

    if piped:
        parts.append(_KEEP_BUILD_STATUS)

    return " ".join(part.strip() for part in parts if part and part.strip()).strip()


def _executable(config: Configuration) -> str:
    runner = config.runner
    if runner.kind is RunnerKind.XCPRETTY:
        return config.xcodebuild_path
    if runner.extra_flags:
        return runner.command
    if runner.kind is RunnerKind.XCTOOL:
        return config.xctool_path
    return config.xcodebuild_path


def _stderr_redirect(redirect: bool | str | None) -> str:
    if redirect is True:
        return "2> /dev/null"
    if isinstance(redirect, str) and redirect.strip():
        return f"2> {redirect.strip()}"
    return ""
