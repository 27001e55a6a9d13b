from __future__ import annotations

import keyword
import re

_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")
_ACRONYM_END = re.compile(r"([A-Z]+)([A-Z][a-z])")
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")

# attributes the runtime reader/writer classes already define
_RUNTIME_NAMES = frozenset({"bits", "reset_value"})


def _words(name: str) -> list[str]:
    words: list[str] = []
    for chunk in _SEPARATORS.split(name):
        if not chunk:
            continue
        chunk = _ACRONYM_END.sub(r"\1 \2", chunk)
        chunk = _LOWER_UPPER.sub(r"\1 \2", chunk)
        words.extend(chunk.split())
    return words


def snake_case(name: str) -> str:
    return "_".join(w.lower() for w in _words(name))


def pascal_case(name: str) -> str:
    return "".join(w[:1].upper() + w[1:].lower() for w in _words(name))


def sanitized_snake_case(name: str) -> str:
    s = snake_case(name)
    if not s:
        return "_"
    if s[0].isdigit():
        return "_" + s
    if keyword.iskeyword(s) or s in _RUNTIME_NAMES:
        return s + "_"
    return s


def sanitized_pascal_case(name: str) -> str:
    s = pascal_case(name)
    if not s:
        return "_"
    if s[0].isdigit():
        return "_" + s
    if keyword.iskeyword(s):
        return s + "_"
    return s


def unique(name: str, taken: set[str]) -> str:
    """Return `name`, suffixed if needed so it is not in `taken`; records it."""
    candidate = name
    n = 1
    while candidate in taken:
        candidate = f"{name}_{n}"
        n += 1
    taken.add(candidate)
    return candidate


def respace(text: str) -> str:
    return " ".join(text.split())
