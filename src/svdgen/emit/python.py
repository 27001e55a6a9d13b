"""Render `PeripheralUnit` fragments into Python modules with jinja2."""
from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from svdgen.codegen.items import FieldReader, PeripheralUnit
from svdgen.utils.logger import get_logger

log = get_logger(__name__)

TEMPLATES = Path(__file__).parent / "templates"


def _docstring(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _value_type(acc: FieldReader) -> str:
    if acc.kind == "bool":
        return "bool"
    if acc.kind == "enum":
        return acc.enum_name or ""
    return acc.int_type.upper()


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )
    env.filters["docstring"] = _docstring
    env.filters["pyrepr"] = repr
    env.filters["hex"] = hex
    env.filters["value_type"] = _value_type
    return env


_env = _environment()


def render_peripheral(unit: PeripheralUnit) -> str:
    template = _env.get_template("peripheral.py.jinja")
    return template.render(unit=unit)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content.rstrip() + "\n", encoding="utf-8")


def write_unit(unit: PeripheralUnit, out_dir: Path) -> Path:
    path = out_dir / f"{unit.module_name}.py"
    _write(path, render_peripheral(unit))
    log.info("Wrote %s", path)
    return path
