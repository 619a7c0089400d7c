"""Error taxonomy for descriptor generation and comparison.

Every error is scoped to one comparison unit (one module x one format).
"""

import difflib


class DescriptorError(Exception):
    """Base class for every error raised by descriptor_parity."""


class MalformedDescriptorError(DescriptorError):
    """The canonical descriptor is unreadable or violates the model invariants."""


class GenerationError(DescriptorError):
    """A generator met a construct its format cannot represent."""


class UnsupportedFieldError(GenerationError):
    """A populated field is rejected by the target format's field policy."""

    def __init__(self, field: str, format_name: str):
        self.field = field
        self.format_name = format_name
        super().__init__(f"{format_name} descriptors cannot express field '{field}'")


class ToolInvocationError(DescriptorError):
    """The external build tool failed; carries its diagnostics verbatim."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.args[0]]
        if self.command:
            parts.append(f"command: {' '.join(self.command)}")
        if self.returncode is not None:
            parts.append(f"exit code: {self.returncode}")
        if self.stdout:
            parts.append(f"stdout:\n{self.stdout}")
        if self.stderr:
            parts.append(f"stderr:\n{self.stderr}")
        return "\n".join(parts)


class ResolutionTimeoutError(ToolInvocationError):
    """The external build tool did not finish within the configured timeout."""


def unified_diff(existing: str, generated: str, from_name: str, to_name: str) -> str:
    diff = difflib.unified_diff(
        existing.splitlines(),
        generated.splitlines(),
        fromfile=from_name,
        tofile=to_name,
        lineterm="",
    )
    return "\n".join(diff)


class DescriptorMismatchError(DescriptorError):
    """The generated descriptor differs from the hand-maintained one."""

    def __init__(self, existing: str, generated: str, existing_name: str = "existing", generated_name: str = "generated"):
        self.existing = existing
        self.generated = generated
        self.diff = unified_diff(existing, generated, existing_name, generated_name)
        if not self.diff:
            # Texts differ only in line endings or a trailing newline
            self.diff = f"--- {existing_name}\n+++ {generated_name}\n(whitespace-only difference)"
        super().__init__(f"{existing_name} and {generated_name} differ:\n{self.diff}")
