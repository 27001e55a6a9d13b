from __future__ import annotations

import dataclasses
import sys
from pathlib import Path
from typing import IO, Optional

from svdgen.codegen.errors import GenerationError
from svdgen.codegen.peripheral import gen_device
from svdgen.config import config
from svdgen.emit.python import render_peripheral, write_unit
from svdgen.svd.model import Defaults, Device
from svdgen.svd.svd_loader import SvdLoadError, load_svd
from svdgen.utils.logger import get_logger, setup_logging

log = get_logger(__name__)


def apply_defaults(device: Device, size: Optional[int], reset_value: Optional[int]) -> Device:
    """Fill device-wide defaults the SVD itself leaves unset."""
    defaults = Defaults(
        size=device.defaults.size if device.defaults.size is not None else size,
        reset_value=device.defaults.reset_value if device.defaults.reset_value is not None else reset_value,
    )
    return dataclasses.replace(device, defaults=defaults)


def run_app(
    svd_path: Path,
    peripheral: Optional[str] = None,
    output: Optional[Path] = None,
    default_size: Optional[int] = None,
    default_reset: Optional[int] = None,
    log_level: Optional[str] = None,
    quiet: Optional[bool] = None,
    stdout: Optional[IO[str]] = None,
) -> int:
    setup_logging(
        level=log_level or config.log_level,
        quiet=config.quiet if quiet is None else quiet,
    )

    log.info("svdgen starting")
    log.info("SVD: %s", svd_path)

    try:
        device = load_svd(svd_path)
        device = apply_defaults(
            device,
            default_size if default_size is not None else config.default_size,
            default_reset if default_reset is not None else config.default_reset,
        )
        units = gen_device(device, peripheral)
    except (GenerationError, SvdLoadError) as e:
        log.error("%s: %s", type(e).__name__, e)
        return 1
    except (OSError, SyntaxError) as e:
        # ElementTree.ParseError is a SyntaxError
        log.error("cannot read %s: %s", svd_path, e)
        return 1

    for unit in units:
        for overlap in unit.overlaps:
            log.debug("%s: %s", unit.name, overlap)

    if peripheral is not None:
        source = render_peripheral(units[0])
        if output is None:
            (stdout or sys.stdout).write(source)
        else:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(source, encoding="utf-8")
            log.info("Wrote %s", output)
        return 0

    out_dir = output if output is not None else Path(config.output_dir)
    for unit in units:
        write_unit(unit, out_dir)
    log.info("Generated %d peripheral modules into %s", len(units), out_dir)
    return 0
