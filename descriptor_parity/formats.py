from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .config import ParityConfig
from .generators import Generator, IvyGenerator, MavenGenerator, read_ivy, read_pom
from .models import ModuleDescriptor
from .resolver import EffectivePomResolver, PassthroughResolver, Resolver


class DescriptorFormat(str, Enum):
    POM = "pom"
    IVY = "ivy"

    @property
    def filename(self) -> str:
        return _FORMATS[self].filename

    @property
    def resolves_effective(self) -> bool:
        return _FORMATS[self].resolves_effective

    @property
    def reader(self) -> Callable[[str], ModuleDescriptor]:
        return _FORMATS[self].reader

    def generator(self) -> Generator:
        return _FORMATS[self].generator()

    def resolver(self, config: Optional[ParityConfig] = None) -> Resolver:
        if self.resolves_effective:
            return EffectivePomResolver(config)
        return PassthroughResolver()


@dataclass(frozen=True)
class _FormatEntry:
    filename: str
    generator: Callable[[], Generator]
    reader: Callable[[str], ModuleDescriptor]
    # Maven merges parent POMs, so both sides are compared as effective POMs
    resolves_effective: bool


_FORMATS: dict[DescriptorFormat, _FormatEntry] = {
    DescriptorFormat.POM: _FormatEntry(
        filename="pom.xml",
        generator=MavenGenerator,
        reader=read_pom,
        resolves_effective=True,
    ),
    DescriptorFormat.IVY: _FormatEntry(
        filename="module.ivy",
        generator=IvyGenerator,
        reader=read_ivy,
        resolves_effective=False,
    ),
}


def formats_for(directory: Path) -> set[DescriptorFormat]:
    """Every format whose conventional descriptor file exists in directory."""
    names = {child.name for child in Path(directory).iterdir() if child.is_file()}
    return {fmt for fmt in DescriptorFormat if fmt.filename in names}
