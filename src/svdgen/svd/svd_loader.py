from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from svdgen.svd.model import (
    Access,
    ArrayInfo,
    ArrayRegister,
    Defaults,
    Device,
    EnumeratedValue,
    EnumeratedValueSet,
    Field,
    Peripheral,
    Register,
    RegisterInfo,
    SingleRegister,
    Usage,
)
from svdgen.utils.logger import get_logger

log = get_logger(__name__)

_ACCESS = {
    "read-only": Access.READ_ONLY,
    "write-only": Access.WRITE_ONLY,
    "read-write": Access.READ_WRITE,
    "writeOnce": Access.WRITE_ONLY,
    "read-writeOnce": Access.READ_WRITE,
}

_USAGE = {
    "read": Usage.READ,
    "write": Usage.WRITE,
    "read-write": Usage.READ_WRITE,
}


class SvdLoadError(ValueError):
    pass


def _t(node: Optional[ET.Element], tag: str) -> Optional[str]:
    if node is None:
        return None
    e = node.find(tag)
    return e.text.strip() if (e is not None and e.text) else None


def _int(s: Optional[str], default: Optional[int] = None) -> Optional[int]:
    if s is None:
        return default
    s = s.strip()
    try:
        return int(s, 0)
    except ValueError:
        # some SVDs use hex without 0x
        try:
            return int(s, 16)
        except ValueError:
            return default


def _enum_value(s: Optional[str]) -> Optional[int]:
    if s is None:
        return None
    s = s.strip()
    if s.startswith("#"):
        # "#0101", possibly with 'x' don't-care bits we cannot represent
        try:
            return int(s[1:], 2)
        except ValueError:
            log.debug("skipping enumerated value with don't-care bits: %s", s)
            return None
    try:
        return int(s, 0)
    except ValueError:
        log.debug("unparsable enumerated value: %s", s)
        return None


def _access(s: Optional[str]) -> Optional[Access]:
    if s is None:
        return None
    acc = _ACCESS.get(s)
    if acc is None:
        log.warning("unknown access mode %r, ignoring", s)
    return acc


def _usage(s: Optional[str]) -> Optional[Usage]:
    if s is None:
        return None
    usage = _USAGE.get(s)
    if usage is None:
        log.warning("unknown enumeratedValues usage %r, ignoring", s)
    return usage


def _dim_labels(text: Optional[str], count: int) -> Optional[tuple[str, ...]]:
    if not text:
        return None
    labels: list[str] = []
    for token in (t.strip() for t in text.split(",")):
        if not token:
            continue
        if "-" in token:
            start, end = (part.strip() for part in token.split("-", 1))
            if start.isdigit() and end.isdigit():
                labels.extend(str(i) for i in range(int(start), int(end) + 1))
                continue
            if len(start) == 1 and len(end) == 1 and start.isalpha() and end.isalpha():
                labels.extend(chr(c) for c in range(ord(start), ord(end) + 1))
                continue
        labels.append(token)
    if len(labels) != count:
        log.warning("dimIndex %r has %d labels for dim=%d", text, len(labels), count)
    return tuple(labels)


def _bit_range(f: ET.Element) -> tuple[int, int]:
    bo = _int(_t(f, "bitOffset"))
    if bo is not None:
        return bo, _int(_t(f, "bitWidth"), 1) or 1
    lsb = _int(_t(f, "lsb"))
    msb = _int(_t(f, "msb"))
    if lsb is not None and msb is not None:
        return lsb, msb - lsb + 1
    br = _t(f, "bitRange")
    if br:
        msb_s, lsb_s = br.strip("[]").split(":")
        lsb = int(lsb_s, 0)
        return lsb, int(msb_s, 0) - lsb + 1
    return 0, 1


def _parse_enumerated_values(ev_node: ET.Element) -> EnumeratedValueSet:
    values: list[EnumeratedValue] = []
    for ev in ev_node.findall("enumeratedValue"):
        if _t(ev, "isDefault") in ("true", "1"):
            log.debug("skipping isDefault enumerated value %s", _t(ev, "name"))
            continue
        text = _t(ev, "value")
        value = _enum_value(text)
        if text is not None and value is None:
            continue
        values.append(EnumeratedValue(name=_t(ev, "name"), description=_t(ev, "description"), value=value))
    return EnumeratedValueSet(
        name=_t(ev_node, "name"),
        derived_from=ev_node.get("derivedFrom"),
        usage=_usage(_t(ev_node, "usage")),
        values=tuple(values),
    )


def _parse_fields(fnode: Optional[ET.Element]) -> Optional[tuple[Field, ...]]:
    if fnode is None:
        return None
    fields: list[Field] = []
    for f in fnode.findall("field"):
        fname = _t(f, "name") or ""
        if not fname:
            continue
        bo, bw = _bit_range(f)
        fields.append(
            Field(
                name=fname,
                bit_offset=bo,
                bit_width=bw,
                description=_t(f, "description"),
                access=_access(_t(f, "access")),
                enumerated_value_sets=tuple(
                    _parse_enumerated_values(ev) for ev in f.findall("enumeratedValues")
                ),
            )
        )
    return tuple(fields)


def parse_registers(
    regs_node: Optional[ET.Element],
    size: Optional[int] = None,
    reset_value: Optional[int] = None,
    access: Optional[Access] = None,
) -> tuple[Register, ...]:
    """Parse a <registers> node; peripheral-level properties fill gaps."""
    if regs_node is None:
        return ()
    for c in regs_node.findall("cluster"):
        log.warning("clusters are not supported, skipping %s", _t(c, "name"))

    regs: list[Register] = []
    for r in regs_node.findall("register"):
        rname = _t(r, "name")
        if not rname:
            continue
        if r.get("derivedFrom"):
            log.warning("register %s: derivedFrom on registers is not supported", rname)
        info = RegisterInfo(
            name=rname,
            address_offset=_int(_t(r, "addressOffset"), 0) or 0,
            description=_t(r, "description"),
            size=_int(_t(r, "size"), size),
            access=_access(_t(r, "access")) or access,
            reset_value=_int(_t(r, "resetValue"), reset_value),
            fields=_parse_fields(r.find("fields")),
        )
        dim = _int(_t(r, "dim"))
        if dim:
            array = ArrayInfo(
                count=dim,
                increment=_int(_t(r, "dimIncrement"), 0) or 0,
                index_labels=_dim_labels(_t(r, "dimIndex"), dim),
            )
            regs.append(ArrayRegister(info=info, array=array))
        else:
            regs.append(SingleRegister(info=info))
    return tuple(regs)


def parse_svd(root: ET.Element, default_name: str = "device") -> Device:
    dev_name = _t(root, "name") or default_name
    defaults = Defaults(
        size=_int(_t(root, "size")),
        reset_value=_int(_t(root, "resetValue")),
    )
    perips_node = root.find("peripherals")

    if perips_node is None:
        log.warning("No <peripherals> found in SVD: %s", dev_name)
        return Device(name=dev_name, defaults=defaults, peripherals=())

    # ---- first pass: capture XML + basic fields
    raw: dict[str, dict] = {}

    for p in perips_node.findall("peripheral"):
        pname = _t(p, "name")
        if not pname:
            continue

        raw[pname] = {
            "name": pname,
            "derivedFrom": p.get("derivedFrom"),  # attribute on peripheral element
            "base": _int(_t(p, "baseAddress"), 0) or 0,
            "description": _t(p, "description"),
            "regs_node": p.find("registers"),  # keep xml node
            "size": _int(_t(p, "size")),
            "reset_value": _int(_t(p, "resetValue")),
            "access": _access(_t(p, "access")),
        }

    # ---- resolve derivedFrom by copying missing pieces
    resolved: dict[str, Peripheral] = {}

    def resolve(name: str, depth: int = 0) -> Peripheral:
        if name in resolved:
            return resolved[name]
        if depth > 8:
            raise SvdLoadError(f"derivedFrom chain too deep at {name}")

        entry = raw.get(name)
        if entry is None:
            raise SvdLoadError(f"peripheral not found: {name}")

        parent_name = entry["derivedFrom"]
        parent: Optional[Peripheral] = None
        if parent_name:
            parent = resolve(parent_name, depth + 1)

        regs = parse_registers(entry["regs_node"], entry["size"], entry["reset_value"], entry["access"])
        description = entry["description"]

        if parent is not None:
            if not regs:
                regs = parent.registers
            if description is None:
                description = parent.description

        periph = Peripheral(
            name=entry["name"],
            base_address=entry["base"],
            description=description,
            registers=regs,
        )
        resolved[name] = periph
        return periph

    peripherals = [resolve(n) for n in raw.keys()]
    log.info("Loaded SVD device=%s peripherals=%d", dev_name, len(peripherals))
    return Device(name=dev_name, defaults=defaults, peripherals=tuple(peripherals))


def load_svd(path: Path) -> Device:
    tree = ET.parse(path)
    return parse_svd(tree.getroot(), default_name=path.stem)
