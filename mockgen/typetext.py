"""
Surface-syntax helpers for Swift type and parameter text.

Types are treated as opaque strings: nothing here resolves names, it only
looks at brackets, arrows and suffixes. Every helper is depth-aware so that
`[String: Int]`, `Result<A, B>` and `(Int) -> Void` are never split in the
middle.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

_OPENERS = "([{<"
_CLOSERS = ")]}>"

# Attributes and ownership words that may prefix a parameter type
_TYPE_ATTRIBUTE_RE = re.compile(r"^(?:@\w+(?:\([^)]*\))?\s*)+")
_OWNERSHIP_WORDS = ("inout", "borrowing", "consuming", "__owned", "__shared", "sending", "isolated")

_FUNCTION_EFFECTS_RE = re.compile(r"\s*\b(?:async|throws|rethrows)\b(?:\([^)]*\))?\s*$")


def _skip_string(text: str, i: int) -> int:
    """Return the index just past the string literal starting at text[i] == '"'."""
    n = len(text)
    i += 1
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return i + 1
        i += 1
    return n


def _scan_top_level(text: str, target: str) -> List[int]:
    """Indexes where `target` occurs at bracket depth 0, ignoring `->` and string contents."""
    hits: List[int] = []
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if text.startswith("->", i):
            if depth == 0 and target == "->":
                hits.append(i)
            i += 2
            continue
        if ch == '"':
            i = _skip_string(text, i)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(0, depth - 1)
        elif depth == 0 and text.startswith(target, i):
            if target == "=":
                prev_ch = text[i - 1] if i > 0 else ""
                next_ch = text[i + 1] if i + 1 < n else ""
                if next_ch == "=" or prev_ch in "=!<>":
                    i += 1
                    continue
            hits.append(i)
            i += len(target)
            continue
        i += 1
    return hits


def find_top_level(text: str, target: str) -> int:
    hits = _scan_top_level(text, target)
    return hits[0] if hits else -1


def split_top_level(text: str, sep: str = ",") -> List[str]:
    """Split on `sep` only where it is not nested inside brackets or strings."""
    parts: List[str] = []
    start = 0
    for idx in _scan_top_level(text, sep):
        parts.append(text[start:idx])
        start = idx + len(sep)
    parts.append(text[start:])
    return [p.strip() for p in parts if p.strip()]


def collapse_whitespace(text: str) -> str:
    return " ".join((text or "").split())


def strip_type_attributes(type_text: str) -> str:
    """`@escaping (Int) -> Void` -> `(Int) -> Void`; `inout Int` -> `Int`."""
    t = collapse_whitespace(type_text)
    changed = True
    while changed:
        changed = False
        stripped = _TYPE_ATTRIBUTE_RE.sub("", t)
        if stripped != t:
            t = stripped
            changed = True
        for word in _OWNERSHIP_WORDS:
            if t.startswith(word + " "):
                t = t[len(word) + 1:].lstrip()
                changed = True
    return t


def is_balanced_wrapper(text: str, open_ch: str, close_ch: str) -> bool:
    """True when text is exactly one bracketed group: `[...]`, `(...)`."""
    if not (text.startswith(open_ch) and text.endswith(close_ch)):
        return False
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if text.startswith("->", i):
            i += 2
            continue
        if ch == '"':
            i = _skip_string(text, i)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth == 0 and i != n - 1:
                return False
        i += 1
    return depth == 0


def is_function_type(type_text: str) -> bool:
    return find_top_level(strip_type_attributes(type_text), "->") >= 0


def function_type_parts(type_text: str) -> Optional[Tuple[List[str], str]]:
    """
    `(String, Int) async throws -> Bool` -> (["String", "Int"], "Bool").
    Returns None when the text is not a function type.
    """
    t = strip_type_attributes(type_text)
    arrow = find_top_level(t, "->")
    if arrow < 0:
        return None
    left = t[:arrow].strip()
    right = t[arrow + 2:].strip()
    left = _FUNCTION_EFFECTS_RE.sub("", left).strip()
    left = _FUNCTION_EFFECTS_RE.sub("", left).strip()
    if is_balanced_wrapper(left, "(", ")"):
        params = split_top_level(left[1:-1])
    else:
        params = [left] if left else []
    return params, right


def generic_names(generic_parameters) -> List[str]:
    """["T: Equatable", "U"] -> ["T", "U"]"""
    names: List[str] = []
    for raw in generic_parameters or ():
        name = raw.split(":", 1)[0].strip()
        if name:
            names.append(name)
    return names


def capitalize_first(name: str) -> str:
    name = name.strip("`")
    return name[:1].upper() + name[1:] if name else name


def inheritance_names(inheritance) -> List[str]:
    """["@unchecked Sendable", "P & Q"] -> ["Sendable", "P", "Q"]"""
    names: List[str] = []
    for entry in inheritance or ():
        for part in split_top_level(entry, "&"):
            name = _TYPE_ATTRIBUTE_RE.sub("", collapse_whitespace(part)).strip()
            if name:
                names.append(name)
    return names
