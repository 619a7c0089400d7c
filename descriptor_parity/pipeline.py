"""End-to-end run: discover (module, format) units → compare each → collect results.

Units are independent: each runs in its own worker thread, at most
config.max_parallel at a time, and a failing unit never aborts its siblings.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from .config import ParityConfig
from .detector import compare
from .discover import ComparisonUnit, discover_units
from .errors import DescriptorMismatchError
from .formats import DescriptorFormat
from .resolver import Resolver

log = logging.getLogger(__name__)

EQUIVALENT = "equivalent"
MISMATCH = "mismatch"
ERROR = "error"


@dataclass
class UnitResult:
    """Outcome of comparing one module in one format."""
    unit: ComparisonUnit
    status: str
    error_type: Optional[str] = None
    message: Optional[str] = None
    diff: Optional[str] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == EQUIVALENT

    def as_dict(self) -> dict:
        return {
            "module": self.unit.module,
            "format": self.unit.format.value,
            "status": self.status,
            "error_type": self.error_type,
            "message": self.message,
            "diff": self.diff,
            "elapsed_ms": round(self.elapsed * 1000, 1),
        }


@dataclass
class RunResult:
    """Result of running every discovered comparison."""
    results: list[UnitResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> list[UnitResult]:
        return [r for r in self.results if not r.ok]


def run_unit(
    unit: ComparisonUnit,
    config: ParityConfig,
    resolver: Optional[Resolver] = None,
) -> UnitResult:
    """Compare one unit, turning any failure into a UnitResult."""
    t0 = time.monotonic()
    try:
        compare(
            unit.canonical_path,
            unit.existing_path,
            unit.format,
            resolver=resolver,
            config=config,
        )
    except DescriptorMismatchError as e:
        return UnitResult(
            unit=unit, status=MISMATCH, error_type=type(e).__name__,
            message=f"{unit.existing_path.name} differs from {unit.canonical_filename}",
            diff=e.diff, elapsed=time.monotonic() - t0,
        )
    except Exception as e:
        log.debug("Unit %s failed", unit.label, exc_info=True)
        return UnitResult(
            unit=unit, status=ERROR, error_type=type(e).__name__,
            message=str(e), elapsed=time.monotonic() - t0,
        )
    return UnitResult(unit=unit, status=EQUIVALENT, elapsed=time.monotonic() - t0)


async def run(
    root: str | Path,
    config: ParityConfig,
    module: Optional[str] = None,
    formats: Optional[Iterable[DescriptorFormat]] = None,
    resolver: Optional[Resolver] = None,
) -> RunResult:
    """Compare every module under root against its canonical descriptor.

    Args:
        root: Directory holding one subdirectory per module.
        config: Runtime settings (parallelism, Maven invocation).
        module: Only run units of this module.
        formats: Only run units of these formats.
        resolver: Replaces every format's registered resolver.

    Returns a RunResult with one UnitResult per unit, in discovery order.
    """
    t0 = time.monotonic()

    units = discover_units(Path(root), config.canonical_filename)
    if module is not None:
        units = [u for u in units if u.module == module]
    if formats is not None:
        wanted = set(formats)
        units = [u for u in units if u.format in wanted]

    log.info("Discovered %d comparisons in %s", len(units), root)
    for u in units:
        log.debug("  %s", u.label)

    semaphore = asyncio.Semaphore(config.max_parallel)

    async def _bounded(unit: ComparisonUnit) -> UnitResult:
        async with semaphore:
            return await asyncio.to_thread(run_unit, unit, config, resolver)

    results = await asyncio.gather(*(_bounded(u) for u in units))

    for r in results:
        if r.ok:
            log.info("  ✓ %s", r.unit.label)
        else:
            log.info("  ✗ %s (%s)", r.unit.label, r.error_type)

    elapsed = time.monotonic() - t0
    log.info("--- %d/%d equivalent (%.1fs) ---", len(results) - sum(not r.ok for r in results), len(results), elapsed)

    return RunResult(results=list(results))
