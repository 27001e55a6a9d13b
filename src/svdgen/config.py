"""Configuration for svdgen runs"""
import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value, 0) if value else None


@dataclass
class GeneratorConfig:
    """svdgen configuration; command-line flags override these"""

    # Logging
    log_level: str = os.getenv("SVDGEN_LOG_LEVEL", "INFO")
    quiet: bool = os.getenv("SVDGEN_QUIET", "") not in ("", "0")

    # Where one-module-per-peripheral output goes
    output_dir: str = os.getenv("SVDGEN_OUTPUT_DIR", ".")

    # Fallbacks for registers the SVD leaves without size / reset value
    default_size: Optional[int] = _env_int("SVDGEN_DEFAULT_SIZE")
    default_reset: Optional[int] = _env_int("SVDGEN_DEFAULT_RESET")


config = GeneratorConfig()
