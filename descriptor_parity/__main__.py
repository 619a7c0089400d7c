"""CLI entry point: python -m descriptor_parity check /path/to/modules"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

from .config import ParityConfig
from .detector import generate_descriptor
from .errors import DescriptorError
from .formats import DescriptorFormat
from .pipeline import run

log = logging.getLogger(__name__)

_FORMAT_CHOICES = [fmt.value for fmt in DescriptorFormat]


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}")
    if not value > 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {raw!r}")
    return value


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {raw!r}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="descriptor_parity",
        description="Check that canonical JSON module descriptors reproduce hand-maintained pom.xml/module.ivy files.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    check = commands.add_parser("check", help="Compare every module under a root directory")
    check.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory with one subdirectory per module (default: current directory)",
    )
    check.add_argument("--module", help="Only check this module")
    check.add_argument(
        "--format",
        action="append",
        choices=_FORMAT_CHOICES,
        help="Only check this format (repeatable)",
    )
    check.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Seconds allowed per Maven run (default: PARITY_RESOLVE_TIMEOUT or 300)",
    )
    check.add_argument(
        "--parallel",
        type=_positive_int,
        default=None,
        help="Concurrent comparisons (default: PARITY_MAX_PARALLEL or 4)",
    )
    check.add_argument(
        "--online",
        action="store_true",
        help="Let Maven reach remote repositories (drops --offline)",
    )
    check.add_argument(
        "-o", "--output",
        help="Write JSON report to file",
    )

    generate = commands.add_parser("generate", help="Render one canonical descriptor")
    generate.add_argument("descriptor", help="Path to the canonical JSON descriptor")
    generate.add_argument("--format", required=True, choices=_FORMAT_CHOICES)
    generate.add_argument("-o", "--output", help="Write to file instead of stdout")
    return parser


def _check(args, config: ParityConfig) -> int:
    overrides = {}
    if args.timeout is not None:
        overrides["resolve_timeout"] = args.timeout
    if args.parallel is not None:
        overrides["max_parallel"] = args.parallel
    if args.online:
        overrides["maven_offline"] = False
    config = dataclasses.replace(config, **overrides)

    root = Path(args.root).resolve()
    if not root.is_dir():
        print(f"Not a directory: {root}", file=sys.stderr)
        return 1

    formats = [DescriptorFormat(f) for f in args.format] if args.format else None

    t0 = time.time()
    result = asyncio.run(run(root, config, module=args.module, formats=formats))
    elapsed_ms = (time.time() - t0) * 1000

    for r in result.results:
        print(f"{r.status:<10} {r.unit.label}", file=sys.stderr)
        if not r.ok:
            print(r.diff or r.message, file=sys.stderr)

    if args.output:
        report = {
            "root": str(root),
            "total": result.total,
            "failed": len(result.failed),
            "results": [r.as_dict() for r in result.results],
            "execution_time_ms": round(elapsed_ms, 1),
        }
        Path(args.output).write_text(json.dumps(report, indent=2))
        print(f"Results written to {args.output}", file=sys.stderr)

    if not result.total:
        print(f"No modules with descriptors found under {root}", file=sys.stderr)
    return 1 if result.failed else 0


def _generate(args) -> int:
    fmt = DescriptorFormat(args.format)
    try:
        text = generate_descriptor(Path(args.descriptor), fmt)
    except DescriptorError as e:
        print(f"Cannot generate {fmt.filename}: {e}", file=sys.stderr)
        log.debug("Generation failed", exc_info=True)
        return 1
    except OSError as e:
        print(f"Cannot read {args.descriptor}: {e}", file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_bytes(text.encode("utf-8"))
        print(f"{fmt.filename} written to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(text)
    return 0


def main():
    load_dotenv()

    args = _build_parser().parse_args()

    level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ParityConfig.from_env()
    except ValueError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "generate":
        sys.exit(_generate(args))
    sys.exit(_check(args, config))


if __name__ == "__main__":
    main()
