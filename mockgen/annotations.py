"""
AnnotationLocator

Finds the marker comment (`// @Stub`, `/// @Spy`, `/* @Dummy */`, ...) that
opts a declaration into generation.

Rules:
  - scan backward from the line above the declaration, at most SCAN_WINDOW lines
  - blank and comment lines are skipped over
  - the first line that is neither blank nor comment ends the scan (no match)
  - a comment line matches when its first token is `@Stub`, `@Spy` or `@Dummy`
    (optionally followed by whitespace or an argument list)
  - unknown markers (`@Mock`, `@stub`) are not errors, scanning just continues

The locator keeps no state between calls; two declarations under the same
comment block each scan on their own.
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence

from mockgen import config
from mockgen.cir.model import MockKind

_MARKER_RE = re.compile(r"^@(\w+)(?=$|[\s(])")
_KINDS = {k.value: k for k in MockKind}


def _strip_comment_delimiters(text: str) -> str:
    t = text.strip()
    for opener in ("///", "//", "/**", "/*"):
        if t.startswith(opener):
            t = t[len(opener):]
            break
    else:
        # continuation line inside a block comment: " * @Spy"
        if t.startswith("*") and not t.startswith("*/"):
            t = t[1:]
    t = t.strip()
    if t.endswith("*/"):
        t = t[:-2].rstrip()
    return t


class AnnotationLocator:
    """
    Pre-classifies every line of one file as blank / comment / code once,
    then answers `locate(declaration_line)` for any number of declarations.
    """

    def __init__(self, lines: Sequence[str], window: int | None = None) -> None:
        self.lines: List[str] = list(lines)
        self.window = window if window is not None else config.SCAN_WINDOW
        self._comment: List[bool] = self._classify(self.lines)

    @staticmethod
    def _classify(lines: Sequence[str]) -> List[bool]:
        """True for lines that are blank or entirely comment."""
        flags: List[bool] = []
        in_block = False
        for raw in lines:
            t = raw.strip()
            if in_block:
                flags.append(True)
                if "*/" in t:
                    in_block = False
                    # code after the block comment closes on the same line
                    rest = t.split("*/", 1)[1].strip()
                    if rest and not rest.startswith("//"):
                        flags[-1] = False
                continue
            if not t or t.startswith("//"):
                flags.append(True)
                continue
            if t.startswith("/*"):
                if "*/" not in t[2:]:
                    in_block = True
                    flags.append(True)
                else:
                    rest = t[2:].split("*/", 1)[1].strip()
                    flags.append(not rest or rest.startswith("//"))
                continue
            flags.append(False)
        return flags

    def marker_on_line(self, line_no: int) -> Optional[MockKind]:
        """Recognized marker on a (1-based) comment line, if any."""
        if line_no < 1 or line_no > len(self.lines):
            return None
        if not self._comment[line_no - 1]:
            return None
        content = _strip_comment_delimiters(self.lines[line_no - 1])
        m = _MARKER_RE.match(content)
        if not m:
            return None
        return _KINDS.get(m.group(1))

    def locate(self, declaration_line: int) -> Optional[MockKind]:
        """
        Scan from declaration_line - 1 down to max(1, declaration_line - window).
        Returns the first recognized MockKind or None.
        """
        lowest = max(1, declaration_line - self.window)
        line_no = declaration_line - 1
        while line_no >= lowest:
            if line_no > len(self.lines):
                line_no -= 1
                continue
            if not self._comment[line_no - 1]:
                return None
            kind = self.marker_on_line(line_no)
            if kind is not None:
                return kind
            line_no -= 1
        return None


def locate_annotation(lines: Sequence[str], declaration_line: int, window: int | None = None) -> Optional[MockKind]:
    """One-shot helper: build a locator and scan once."""
    return AnnotationLocator(lines, window).locate(declaration_line)
