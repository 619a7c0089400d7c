"""Runtime settings from environment."""

import os
from dataclasses import dataclass

DEFAULT_CANONICAL_FILENAME = "md.restx.json"
DEFAULT_HELP_PLUGIN_VERSION = "2.2"
DEFAULT_RESOLVE_TIMEOUT = 300.0
DEFAULT_MAX_PARALLEL = 4

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _parse_bool(name: str, raw: str, errors: list[str]) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value not in _FALSE:
        errors.append(f"{name} must be a boolean, got {raw!r}")
    return False


def _parse_number(name: str, raw: str, cast, minimum, errors: list[str]):
    try:
        value = cast(raw)
    except ValueError:
        errors.append(f"{name} must be a number, got {raw!r}")
        return minimum
    if not value >= minimum:
        errors.append(f"{name} must be >= {minimum}, got {raw!r}")
    return value


@dataclass(frozen=True)
class ParityConfig:
    maven_executable: str = "mvn"
    maven_offline: bool = True
    help_plugin_version: str = DEFAULT_HELP_PLUGIN_VERSION
    resolve_timeout: float = DEFAULT_RESOLVE_TIMEOUT
    max_parallel: int = DEFAULT_MAX_PARALLEL
    canonical_filename: str = DEFAULT_CANONICAL_FILENAME

    def __post_init__(self):
        errors: list[str] = []
        if not self.resolve_timeout > 0:
            errors.append(f"resolve_timeout must be > 0, got {self.resolve_timeout!r}")
        if not isinstance(self.max_parallel, int) or self.max_parallel < 1:
            errors.append(f"max_parallel must be an integer >= 1, got {self.max_parallel!r}")
        if not self.maven_executable:
            errors.append("maven_executable must not be empty")
        if not self.canonical_filename:
            errors.append("canonical_filename must not be empty")
        if errors:
            raise ValueError(f"Invalid config: {'; '.join(errors)}")

    @classmethod
    def from_env(cls) -> "ParityConfig":
        """Load from environment variables.

        All optional:
          PARITY_MAVEN_EXECUTABLE     Maven binary (default: mvn)
          PARITY_MAVEN_OFFLINE        pass --offline to Maven (default: true)
          PARITY_HELP_PLUGIN_VERSION  maven-help-plugin version (default: 2.2)
          PARITY_RESOLVE_TIMEOUT      seconds per Maven run (default: 300)
          PARITY_MAX_PARALLEL         concurrent comparisons (default: 4)
          PARITY_CANONICAL_FILENAME   canonical descriptor name (default: md.restx.json)

        Raises ValueError listing every invalid variable.
        """
        errors: list[str] = []

        offline = _parse_bool(
            "PARITY_MAVEN_OFFLINE", os.getenv("PARITY_MAVEN_OFFLINE", "true"), errors,
        )
        timeout = _parse_number(
            "PARITY_RESOLVE_TIMEOUT",
            os.getenv("PARITY_RESOLVE_TIMEOUT", str(DEFAULT_RESOLVE_TIMEOUT)),
            float, 0.001, errors,
        )
        max_parallel = _parse_number(
            "PARITY_MAX_PARALLEL",
            os.getenv("PARITY_MAX_PARALLEL", str(DEFAULT_MAX_PARALLEL)),
            int, 1, errors,
        )
        executable = os.getenv("PARITY_MAVEN_EXECUTABLE", "") or "mvn"
        plugin_version = os.getenv("PARITY_HELP_PLUGIN_VERSION", "") or DEFAULT_HELP_PLUGIN_VERSION
        canonical = os.getenv("PARITY_CANONICAL_FILENAME", "") or DEFAULT_CANONICAL_FILENAME

        if errors:
            raise ValueError(f"Invalid env vars: {'; '.join(errors)}")

        return cls(
            maven_executable=executable,
            maven_offline=offline,
            help_plugin_version=plugin_version,
            resolve_timeout=timeout,
            max_parallel=max_parallel,
            canonical_filename=canonical,
        )
