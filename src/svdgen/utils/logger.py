from __future__ import annotations

import logging
import sys
from typing import IO, Optional


def setup_logging(level: str = "INFO", quiet: bool = False, stream: Optional[IO[str]] = None) -> None:
    # generated modules may be written to stdout, so log lines go to stderr
    root = logging.getLogger()
    root.handlers.clear()

    lvl = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(lvl)

    ch = logging.StreamHandler(stream if stream is not None else sys.stderr)
    ch.setLevel(lvl)
    fmt = "[%(levelname)s] %(name)s: %(message)s" if not quiet else "%(message)s"
    ch.setFormatter(logging.Formatter(fmt))
    root.addHandler(ch)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
