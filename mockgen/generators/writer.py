from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, List


class SourceWriter:
    """Line buffer with an indentation level; every strategy renders through one."""

    def __init__(self, indent: str = "    ") -> None:
        self._indent = indent
        self._level = 0
        self._lines: List[str] = []

    def line(self, text: str = "") -> None:
        if text:
            self._lines.append(self._indent * self._level + text)
        else:
            self._lines.append("")

    def lines(self, texts: Iterable[str]) -> None:
        for t in texts:
            self.line(t)

    def blank(self) -> None:
        """At most one empty line in a row, and none right after an opening brace."""
        if not self._lines:
            return
        last = self._lines[-1]
        if last == "" or last.endswith("{"):
            return
        self._lines.append("")

    @contextmanager
    def indented(self):
        self._level += 1
        try:
            yield self
        finally:
            self._level -= 1

    @contextmanager
    def block(self, header: str):
        """`header {` ... `}`"""
        self.line(f"{header} {{")
        self._level += 1
        try:
            yield self
        finally:
            self._level -= 1
            # drop a dangling empty line before the closing brace
            while self._lines and self._lines[-1] == "":
                self._lines.pop()
            self.line("}")

    def member(self, header: str, body: Iterable[str]) -> None:
        """`header {}` when the body is empty, a full block otherwise."""
        body = [b for b in body if b is not None]
        if not body:
            self.line(f"{header} {{}}")
            return
        with self.block(header):
            self.lines(body)

    def render(self) -> str:
        while self._lines and self._lines[-1] == "":
            self._lines.pop()
        return "\n".join(self._lines) + "\n"
