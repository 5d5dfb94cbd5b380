from __future__ import annotations

import os
import re
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from mockgen import config
from mockgen.cir.model import GeneratedMock, MockKind

_PACKAGE_NAME_RE = re.compile(r'^\s*name\s*:\s*"([^"]+)"', re.MULTILINE)
_PROJECT_SUFFIXES = (".xcodeproj", ".xcworkspace")


def _log(msg: str) -> None:
    if config.VERBOSE:
        print(f"[MOCK OUTPUT] {msg}")


# ============================================================
# Naming & header
# ============================================================

def mock_file_name(declaration_name: str, kind: MockKind) -> str:
    return f"{declaration_name}{kind.value}{config.SWIFT_EXTENSION}"


def render_header(declaration_name: str, kind: MockKind) -> List[str]:
    return [
        f"// {mock_file_name(declaration_name, kind)}",
        f"// {kind.value} generated for {declaration_name}",
        f"// Generated by {config.TOOL_NAME}",
    ]


def compose_file(
    declaration_name: str,
    kind: MockKind,
    body: str,
    imports: Sequence[str] = (),
    module: Optional[str] = None,
) -> str:
    """
    Header, the source file's imports (Foundation added when missing),
    optional `@testable import <module>`, then the generated body.
    """
    lines = render_header(declaration_name, kind)
    lines.append("")

    import_lines: List[str] = []
    for stmt in imports:
        # the source's own @testable imports do not belong in a test target file
        if stmt.startswith("@testable"):
            continue
        if stmt not in import_lines:
            import_lines.append(stmt)
    if not any(s.split()[-1] == "Foundation" for s in import_lines):
        import_lines.insert(0, "import Foundation")
    if module:
        import_lines.append(f"@testable import {module}")

    lines.extend(import_lines)
    lines.append("")
    return "\n".join(lines) + "\n" + body


# ============================================================
# Module detection
# ============================================================

def _find_package_swift(start: Path) -> Optional[Path]:
    current = start if start.is_dir() else start.parent
    for directory in [current, *current.parents]:
        candidate = directory / "Package.swift"
        if candidate.is_file():
            return candidate
    return None


def package_module_name(start: Path) -> Optional[str]:
    package = _find_package_swift(start)
    if package is None:
        return None
    try:
        content = package.read_text(encoding="utf-8")
    except OSError as e:
        _log(f"could not read {package}: {e}")
        return None
    m = _PACKAGE_NAME_RE.search(content)
    if m:
        _log(f"Detected Swift package module: {m.group(1)}")
        return m.group(1)
    return None


def xcode_module_name(start: Path) -> Optional[str]:
    root = start if start.is_dir() else start.parent
    for dirpath, dirnames, _ in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for d in dirnames:
            for suffix in _PROJECT_SUFFIXES:
                if d.endswith(suffix):
                    name = d[: -len(suffix)]
                    _log(f"Detected Xcode module: {name}")
                    return name
    return None


def detect_module_name(input_path: str | os.PathLike | None, explicit: Optional[str] = None) -> Optional[str]:
    """Explicit name, else nearest Package.swift name, else an Xcode project/workspace name."""
    if explicit:
        return explicit
    if not input_path:
        return None
    start = Path(input_path).resolve()
    return package_module_name(start) or xcode_module_name(start)


# ============================================================
# Discovery & writing
# ============================================================

def find_swift_files(root: str | os.PathLike) -> List[str]:
    """All *.swift files under root (or root itself), skipping hidden paths."""
    root_path = Path(root)
    if root_path.is_file():
        return [str(root_path)] if root_path.suffix == config.SWIFT_EXTENSION else []
    if not root_path.is_dir():
        raise ValueError(f"Invalid input path: {root}")

    files: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for name in sorted(filenames):
            if name.endswith(config.SWIFT_EXTENSION) and not name.startswith("."):
                files.append(os.path.join(dirpath, name))
    return files


def write_mocks(mocks: Iterable[GeneratedMock], output_dir: str | os.PathLike, clean: bool = False) -> List[str]:
    out = Path(output_dir)
    if clean and out.exists():
        shutil.rmtree(out)
        _log(f"Cleaned output directory: {out}")
    out.mkdir(parents=True, exist_ok=True)

    written: List[str] = []
    for mock in mocks:
        path = out / mock.file_name
        with open(path, "w", encoding="utf-8") as f:
            f.write(mock.source)
        written.append(str(path))
        _log(f"Generated mock: {path}")
    return written
