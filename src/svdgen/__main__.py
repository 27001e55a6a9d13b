from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from svdgen.app import run_app


def _int(s: str) -> int:
    return int(s, 0)


def main(argv: Optional[Sequence[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="svdgen", description="Generate Python register-access modules from a CMSIS-SVD file")
    p.add_argument("svd", type=Path, help="CMSIS-SVD XML file path")
    p.add_argument("peripheral", nargs="?", help="Generate only this peripheral (case-insensitive)")
    p.add_argument(
        "-o", "--output", type=Path,
        help="Output file with PERIPHERAL (default: stdout), else output directory (default: $SVDGEN_OUTPUT_DIR or .)",
    )

    # Fallbacks for registers without size / resetValue
    p.add_argument("--default-size", type=_int, help="Register size in bits when the SVD gives none")
    p.add_argument("--default-reset", type=_int, help="Reset value when the SVD gives none, e.g. 0x0")

    # Logging
    p.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--quiet", action="store_true", default=None, help="Reduce console output")

    args = p.parse_args(argv)

    return run_app(
        svd_path=args.svd,
        peripheral=args.peripheral,
        output=args.output,
        default_size=args.default_size,
        default_reset=args.default_reset,
        log_level=args.log_level,
        quiet=args.quiet,
    )


if __name__ == "__main__":
    raise SystemExit(main())
