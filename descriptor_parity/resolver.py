"""Resolve a descriptor file to the text that gets compared.

Formats whose build tool merges inherited configuration are expanded by the
tool itself (Maven's effective POM); the others are read verbatim. Both share
the Resolver interface so the detector never branches on format.
"""

import logging
import os
import re
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .config import ParityConfig
from .errors import ResolutionTimeoutError, ToolInvocationError

log = logging.getLogger(__name__)

BANNER_PATTERN = re.compile(r"Generated by Maven Help Plugin on")

_ERROR_LINE = re.compile(r"^\[ERROR\]", re.MULTILINE)


@runtime_checkable
class Resolver(Protocol):
    """Interface every resolver must satisfy."""

    def resolve(self, descriptor_path: Path) -> str: ...


def strip_banner(text: str, pattern: re.Pattern = BANNER_PATTERN) -> str:
    """Drop every line matching the tool's timestamp banner, keeping all others as-is."""
    return "".join(
        line for line in text.splitlines(keepends=True) if not pattern.search(line)
    )


class PassthroughResolver:
    """Returns the descriptor's text unchanged (no newline translation)."""

    def resolve(self, descriptor_path: Path) -> str:
        return Path(descriptor_path).read_bytes().decode("utf-8")


def _decode(output) -> str:
    # TimeoutExpired carries bytes even when text=True was requested
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class EffectivePomResolver:
    """Expands a pom through maven-help-plugin:effective-pom.

    Each call writes to its own temporary file, removed on every exit path,
    so concurrent resolutions never collide.
    """

    def __init__(self, config: Optional[ParityConfig] = None, work_dir: Optional[Path] = None):
        self._config = config or ParityConfig()
        self._work_dir = work_dir

    def command(self, pom: Path, output: Path) -> list[str]:
        cfg = self._config
        cmd = [cfg.maven_executable, "--batch-mode", "--no-snapshot-updates"]
        if cfg.maven_offline:
            cmd.append("--offline")
        cmd += [
            "-f", str(pom.resolve()),
            f"-Doutput={output.resolve()}",
            f"org.apache.maven.plugins:maven-help-plugin:{cfg.help_plugin_version}:effective-pom",
        ]
        return cmd

    def resolve(self, descriptor_path: Path) -> str:
        pom = Path(descriptor_path)
        fd, raw_output = tempfile.mkstemp(prefix="effective-pom-", suffix=".xml", dir=self._work_dir)
        os.close(fd)
        output = Path(raw_output)
        try:
            self._run(pom, output)
            text = output.read_bytes().decode("utf-8")
        finally:
            output.unlink(missing_ok=True)
        return strip_banner(text)

    def _run(self, pom: Path, output: Path) -> None:
        cmd = self.command(pom, output)
        timeout = self._config.resolve_timeout
        log.info("Resolving effective POM for %s", pom)
        log.debug("Running: %s", " ".join(cmd))
        t0 = time.monotonic()

        try:
            proc = subprocess.run(
                cmd,
                cwd=pom.parent,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ResolutionTimeoutError(
                f"Maven did not resolve {pom} within {timeout:g}s",
                command=cmd,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr),
            ) from e
        except FileNotFoundError as e:
            raise ToolInvocationError(
                f"Cannot run Maven executable {cmd[0]!r}: {e}", command=cmd,
            ) from e

        elapsed = time.monotonic() - t0
        log.debug("Maven finished in %.1fs with exit code %d", elapsed, proc.returncode)

        if proc.returncode != 0:
            raise ToolInvocationError(
                f"Maven failed to resolve {pom}",
                command=cmd, returncode=proc.returncode,
                stdout=proc.stdout, stderr=proc.stderr,
            )
        if _ERROR_LINE.search(proc.stdout or ""):
            raise ToolInvocationError(
                f"Maven reported errors while resolving {pom}",
                command=cmd, returncode=proc.returncode,
                stdout=proc.stdout, stderr=proc.stderr,
            )
        if not output.is_file() or output.stat().st_size == 0:
            raise ToolInvocationError(
                f"Maven produced no effective POM for {pom}",
                command=cmd, returncode=proc.returncode,
                stdout=proc.stdout, stderr=proc.stderr,
            )
