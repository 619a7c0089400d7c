"""Decide whether a canonical descriptor reproduces a hand-maintained one.

Flow: parse canonical JSON → generate target format → write it next to the
existing file → resolve both → compare texts exactly.
"""

import logging
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from .canonical import parse_descriptor
from .config import ParityConfig
from .errors import DescriptorMismatchError
from .formats import DescriptorFormat
from .models import ModuleDescriptor
from .resolver import Resolver

log = logging.getLogger(__name__)


def generate_descriptor(
    canonical_path: Path,
    fmt: DescriptorFormat,
    parse: Callable[[Path], ModuleDescriptor] = parse_descriptor,
) -> str:
    """Render the canonical descriptor at canonical_path in format fmt."""
    return fmt.generator().generate(parse(Path(canonical_path)))


@contextmanager
def _generated_descriptor(existing_path: Path, fmt: DescriptorFormat, text: str) -> Iterator[Path]:
    """Write text beside existing_path under a per-call unique name; always removed.

    Maven resolves <relativePath> parents from the file's location, so the
    generated file must sit in the same directory as the existing one.
    """
    path = existing_path.parent / f"generated-{fmt.value}-{uuid.uuid4().hex[:12]}-descriptor"
    path.write_bytes(text.encode("utf-8"))
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


def compare(
    canonical_path: Path,
    existing_path: Path,
    fmt: DescriptorFormat,
    *,
    resolver: Optional[Resolver] = None,
    config: Optional[ParityConfig] = None,
    parse: Callable[[Path], ModuleDescriptor] = parse_descriptor,
) -> bool:
    """Compare the descriptor generated from canonical_path with existing_path.

    Args:
        canonical_path: Canonical JSON descriptor.
        existing_path: Hand-maintained descriptor of format fmt.
        fmt: Target format.
        resolver: Overrides the format's registered resolver (tests inject fakes).
        config: Settings for the registered resolver.
        parse: Canonical descriptor parser.

    Returns True when equivalent. Raises DescriptorMismatchError otherwise;
    parse, generation and resolution errors propagate unchanged.
    """
    existing_path = Path(existing_path)
    resolver = resolver or fmt.resolver(config)

    # Generation errors must surface before anything touches the filesystem
    generated = generate_descriptor(canonical_path, fmt, parse=parse)
    log.debug("Generated %d bytes of %s for %s", len(generated), fmt.value, canonical_path)

    with _generated_descriptor(existing_path, fmt, generated) as generated_path:
        existing_text = resolver.resolve(existing_path)
        generated_text = resolver.resolve(generated_path)

    if existing_text != generated_text:
        raise DescriptorMismatchError(
            existing_text,
            generated_text,
            existing_name=str(existing_path),
            generated_name=f"generated from {canonical_path}",
        )

    log.info("%s matches %s", existing_path, canonical_path)
    return True
