from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_CANONICAL_FILENAME
from .formats import DescriptorFormat, formats_for


@dataclass(frozen=True)
class ComparisonUnit:
    """One module x one format: the unit of work that passes or fails on its own."""

    module: str
    directory: Path
    format: DescriptorFormat
    canonical_filename: str = DEFAULT_CANONICAL_FILENAME

    @property
    def canonical_path(self) -> Path:
        return self.directory / self.canonical_filename

    @property
    def existing_path(self) -> Path:
        return self.directory / self.format.filename

    @property
    def label(self) -> str:
        return f"{self.module}/{self.format.value}"


def discover_units(
    root: Path,
    canonical_filename: str = DEFAULT_CANONICAL_FILENAME,
) -> list[ComparisonUnit]:
    """
    List every (module, format) pair under root.

    A module is a direct subdirectory of root holding the canonical
    descriptor; each target-format descriptor found beside it yields a unit.

    Returns units sorted by module name, then format.
    """
    units: list[ComparisonUnit] = []
    for child in sorted(Path(root).iterdir()):
        if not child.is_dir() or not (child / canonical_filename).is_file():
            continue
        for fmt in sorted(formats_for(child), key=lambda f: f.value):
            units.append(ComparisonUnit(
                module=child.name,
                directory=child,
                format=fmt,
                canonical_filename=canonical_filename,
            ))
    return units
