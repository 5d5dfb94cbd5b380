from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from mockgen import config
from mockgen.adapters.swift_adapter import SwiftAdapter
from mockgen.adapters.swift_syntax import DeclNode, SwiftSyntaxTree
from mockgen.annotations import AnnotationLocator
from mockgen.cir.model import Annotation, GeneratedMock, GenerationReport, SourceLocation
from mockgen.output import (
    compose_file,
    detect_module_name,
    find_swift_files,
    mock_file_name,
    write_mocks,
)
from mockgen.registry import strategy_for

MEMORY_FILE = "<memory>"

adapter = SwiftAdapter()


def _log(msg: str) -> None:
    if config.VERBOSE:
        print(f"[MOCK PIPELINE] {msg}")


def _error(filename: Optional[str], node: Optional[DeclNode], exc: Exception) -> Dict[str, Any]:
    return {
        "file": filename or MEMORY_FILE,
        "declaration": node.name if node is not None else None,
        "line": node.start_line if node is not None else None,
        "error": str(exc),
    }


@dataclass(frozen=True)
class AnnotationResult:
    """One marked declaration: either an Annotation or the reason it failed."""
    annotation: Optional[Annotation] = None
    error: Optional[Dict[str, Any]] = None


def find_annotations(tree: SwiftSyntaxTree, filename: Optional[str] = None) -> List[AnnotationResult]:
    """
    Walk top-level declarations, ask the locator for a marker, extract the
    Element for each marked one. Extraction failures stay scoped to their
    declaration.
    """
    locator = AnnotationLocator(tree.lines)
    results: List[AnnotationResult] = []
    for node in tree.declarations:
        if node.kind == "import":
            continue
        kind = locator.locate(node.start_line)
        if kind is None:
            continue
        _log(f"Found {kind.marker} for {node.kind} '{node.name}' (line {node.start_line})")
        try:
            element = adapter.extract(node)
        except ValueError as e:
            _log(f"Skipping '{node.name}': {e}")
            results.append(AnnotationResult(error=_error(filename, node, e)))
            continue
        location = SourceLocation(line=node.start_line, column=node.start_column, file=filename or MEMORY_FILE)
        results.append(AnnotationResult(annotation=Annotation(kind=kind, element=element, location=location)))
    return results


def generate_for_source(
    code: str,
    filename: Optional[str] = None,
    use_result: Optional[bool] = None,
    module: Optional[str] = None,
) -> GenerationReport:
    """
    One source text -> every mock its markers ask for.
    Raises ValueError only when the file itself cannot be parsed.
    """
    if use_result is None:
        use_result = config.USE_RESULT
    tree = adapter.parse_to_ast(code)

    mocks: List[GeneratedMock] = []
    errors: List[Dict[str, Any]] = []
    for result in find_annotations(tree, filename):
        if result.error is not None:
            errors.append(result.error)
            continue
        ann = result.annotation
        name = ann.element.name
        body = strategy_for(ann.kind, use_result).generate(ann.element)
        mocks.append(
            GeneratedMock(
                kind=ann.kind,
                declaration_name=name,
                file_name=mock_file_name(name, ann.kind),
                source=compose_file(name, ann.kind, body, tree.imports, module),
                location=ann.location,
            )
        )
    _log(f"{filename or MEMORY_FILE}: {len(mocks)} mock(s), {len(errors)} error(s)")
    return GenerationReport(file=filename or MEMORY_FILE, mocks=tuple(mocks), errors=tuple(errors))


def _generate_safely(item: Tuple[str, str], use_result: Optional[bool], module: Optional[str]) -> GenerationReport:
    filename, code = item
    try:
        return generate_for_source(code, filename, use_result, module)
    except ValueError as e:
        return GenerationReport(file=filename, errors=(_error(filename, None, e),))


def generate_for_sources(
    sources: Sequence[Tuple[str, str]],
    use_result: Optional[bool] = None,
    module: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> List[GenerationReport]:
    """
    (filename, code) pairs -> one report per file, in input order.
    Files share nothing, so they are mapped over a thread pool.
    """
    workers = max_workers or config.MAX_WORKERS
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda item: _generate_safely(item, use_result, module), sources))


def generate_for_files(
    paths: Sequence[str],
    use_result: Optional[bool] = None,
    module: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> List[GenerationReport]:
    """
    Multi-file helper. Unreadable or unparsable files are reported
    and the rest are still processed.
    """
    sources: List[Tuple[str, str]] = []
    unreadable: Dict[str, GenerationReport] = {}
    for path in paths:
        try:
            with open(path, "r", encoding="utf-8") as f:
                sources.append((path, f.read()))
        except (OSError, UnicodeDecodeError) as e:
            unreadable[path] = GenerationReport(file=path, errors=(_error(path, None, e),))

    reports = {r.file: r for r in generate_for_sources(sources, use_result, module, max_workers)}
    reports.update(unreadable)
    return [reports[p] for p in paths]


def run(
    input_path: str,
    output_dir: str,
    use_result: Optional[bool] = None,
    module: Optional[str] = None,
    clean: bool = False,
) -> Dict[str, Any]:
    """
    Discover -> generate -> write. Returns a summary the caller can print or serve.
    """
    files = find_swift_files(input_path)
    _log(f"Found {len(files)} Swift file(s) under {input_path}")
    module_name = detect_module_name(input_path, module)

    reports = generate_for_files(files, use_result, module_name)
    mocks = [m for r in reports for m in r.mocks]
    errors = [e for r in reports for e in r.errors]
    written = write_mocks(mocks, output_dir, clean=clean)

    return {
        "files": len(files),
        "module": module_name,
        "written": written,
        "errors": errors,
    }
