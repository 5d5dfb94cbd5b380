"""
mockgen/adapters/swift_syntax.py

Swift source -> declaration tree, on top of tree-sitter-swift.

tree-sitter builds the concrete syntax tree; this module folds the
declaration nodes of that tree into frozen DeclNode records. Types,
parameters and default values stay raw source text.

Folded declaration kinds:
  - protocol, class, struct, enum, actor, extension  (members folded recursively)
  - func, init, deinit, subscript
  - var, let  (type annotation, initializer, accessor block)
  - typealias, associatedtype, import, enum case

Statements and other top-level code are skipped. A tree that contains an
ERROR or MISSING node raises SwiftSyntaxError.

The tree exposes only what the extractor and the annotation locator need:
node kind, start line, children, and the raw lines of the file.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import tree_sitter  # type: ignore
import tree_sitter_swift  # type: ignore

from mockgen.errors import SwiftSyntaxError
from mockgen.typetext import collapse_whitespace, split_top_level

SWIFT_LANGUAGE = tree_sitter.Language(tree_sitter_swift.language())

TYPE_KEYWORDS = ("protocol", "class", "struct", "enum", "actor", "extension")

MODIFIER_WORDS = frozenset({
    "public", "private", "fileprivate", "internal", "open", "package",
    "final", "static", "class", "override", "required", "convenience",
    "mutating", "nonmutating", "lazy", "weak", "unowned", "dynamic",
    "optional", "indirect", "nonisolated", "distributed",
    "prefix", "postfix", "infix",
})

_COMMENTS = ("comment", "multiline_comment")
_BODIES = ("class_body", "protocol_body", "enum_class_body")


@dataclass(frozen=True)
class DeclNode:
    kind: str
    name: str
    start_line: int
    start_column: int
    end_line: int
    attributes: Tuple[str, ...] = ()
    modifiers: Tuple[str, ...] = ()
    generic_parameters: Tuple[str, ...] = ()
    inheritance: Tuple[str, ...] = ()
    members: Tuple["DeclNode", ...] = ()
    parameters: Tuple[str, ...] = ()          # raw text per parameter
    effects: Tuple[str, ...] = ()             # async / throws / rethrows
    return_type: Optional[str] = None
    type_annotation: Optional[str] = None     # var/let type, associatedtype constraint
    initializer: Optional[str] = None         # var/let value, typealias target, associatedtype default, import statement
    accessors: Tuple[str, ...] = ()           # get/set/willSet/didSet, or ("computed",)
    init_suffix: str = ""                     # "?" / "!" for failable initializers
    has_body: bool = False

    @property
    def children(self) -> Tuple["DeclNode", ...]:
        return self.members

    @property
    def is_async(self) -> bool:
        return "async" in self.effects

    @property
    def is_throwing(self) -> bool:
        return "throws" in self.effects or "rethrows" in self.effects


@dataclass(frozen=True)
class SwiftSyntaxTree:
    source: str
    declarations: Tuple[DeclNode, ...]

    @property
    def lines(self) -> List[str]:
        return self.source.splitlines()

    @property
    def imports(self) -> List[str]:
        return [d.initializer for d in self.declarations if d.kind == "import" and d.initializer]

    def walk(self):
        """Pre-order traversal over every declaration, nested ones included."""
        stack = list(reversed(self.declarations))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.members))


def _first_error(root: Any) -> Optional[Any]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def _either(node: Optional[Any], fallback: Optional[Any]) -> Optional[Any]:
    return node if node is not None else fallback


class _TreeFolder:
    """Turns tree-sitter-swift nodes into DeclNodes. One instance per source."""

    def __init__(self, source: bytes) -> None:
        self.src = source

    # ---------------- node helpers ----------------

    def _text(self, node: Any) -> str:
        return self.src[node.start_byte:node.end_byte].decode("utf-8")

    def _span(self, start: int, end: int) -> str:
        return self.src[start:end].decode("utf-8") if end > start else ""

    def _children(self, node: Any) -> List[Any]:
        return [c for c in node.children if c.type not in _COMMENTS]

    def _child(self, node: Any, *types: str) -> Optional[Any]:
        for c in node.children:
            if c.type in types:
                return c
        return None

    def _field(self, node: Any, name: str) -> Optional[Any]:
        return node.child_by_field_name(name)

    def _after(self, node: Any, token: str) -> Optional[Any]:
        """First named child that follows the direct child `token`."""
        seen = False
        for c in self._children(node):
            if seen and c.is_named:
                return c
            if c.type == token:
                seen = True
        return None

    def _joined(self, nodes: List[Any]) -> str:
        return collapse_whitespace(" ".join(self._text(n) for n in nodes))

    def _prefix(self, node: Any, stop_byte: int) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
        """Attributes and modifier words written before `stop_byte`."""
        attributes: List[str] = []
        modifiers: List[str] = []

        def take(part: Any) -> None:
            if part.type in _COMMENTS:
                return
            text = self._text(part)
            if part.type == "attribute":
                attributes.append(collapse_whitespace(text))
            elif part.is_named and part.type != "modifiers":
                modifiers.append(text.replace(" ", ""))
            elif text in MODIFIER_WORDS:
                modifiers.append(text)

        for child in node.children:
            if child.start_byte >= stop_byte:
                break
            if child.type == "modifiers":
                for part in child.children:
                    take(part)
            else:
                take(child)
        return tuple(attributes), tuple(modifiers)

    def _node(self, ts: Any, kind: str, name: str, stop_byte: int, **fields) -> DeclNode:
        attributes, modifiers = self._prefix(ts, stop_byte)
        return DeclNode(
            kind=kind,
            name=name,
            start_line=ts.start_point[0] + 1,
            start_column=ts.start_point[1] + 1,
            end_line=ts.end_point[0] + 1,
            attributes=attributes,
            modifiers=modifiers,
            **fields,
        )

    def _generics(self, ts: Any) -> Tuple[str, ...]:
        clause = self._child(ts, "type_parameters")
        if clause is None:
            return ()
        inner = self._text(clause).strip()[1:-1]
        return tuple(split_top_level(collapse_whitespace(inner)))

    def _parameters(self, ts: Any) -> Tuple[Tuple[str, ...], int]:
        """Raw parameter texts and the byte offset just past the clause."""
        lparen = self._child(ts, "(")
        if lparen is None:
            params = [c for c in ts.children if c.type == "parameter"]
            end = params[-1].end_byte if params else ts.start_byte
            return tuple(self._text(p) for p in params), end
        rparen = None
        for c in ts.children:
            if c.type == ")" and c.start_byte > lparen.start_byte:
                rparen = c
                break
        if rparen is None:
            raise SwiftSyntaxError("unclosed parameter clause", lparen.start_point[0] + 1)
        inner = self._span(lparen.end_byte, rparen.start_byte)
        return tuple(split_top_level(inner)), rparen.end_byte

    def _effects(self, ts: Any, after_byte: int) -> Tuple[str, ...]:
        effects: List[str] = []
        for c in self._children(ts):
            if c.start_byte < after_byte:
                continue
            if c.type in ("->", "type_constraints") or c.type == "function_body":
                break
            text = self._text(c).strip()
            if text == "async" and "async" not in effects:
                effects.append("async")
            elif text.startswith("rethrows"):
                effects.append("rethrows")
            elif text.startswith("throws"):
                effects.append("throws")
        return tuple(effects)

    def _return_type(self, ts: Any) -> Optional[str]:
        node = _either(self._field(ts, "return_type"), self._after(ts, "->"))
        return collapse_whitespace(self._text(node)) or None if node is not None else None

    def _has_body(self, ts: Any) -> bool:
        return self._field(ts, "body") is not None or self._child(ts, "function_body") is not None

    def _accessors(self, block: Optional[Any]) -> Tuple[str, ...]:
        if block is None:
            return ()
        found: List[str] = []
        for c in block.children:
            t = c.type
            word = None
            if "willset" in t:
                word = "willSet"
            elif "didset" in t:
                word = "didSet"
            elif "getter" in t:
                word = "get"
            elif "setter" in t:
                word = "set"
            if word and word not in found:
                found.append(word)
        if found:
            return tuple(found)
        # computed shorthand: `var total: Int { 1 }`
        return ("computed",) if block.type == "computed_property" else ()

    # ---------------- declarations ----------------

    def fold_block(self, nodes: List[Any]) -> List[DeclNode]:
        folded: List[DeclNode] = []
        for ts in nodes:
            node = self.fold(ts)
            if node is not None:
                folded.append(node)
        return folded

    def fold(self, ts: Any) -> Optional[DeclNode]:
        t = ts.type
        if t in ("class_declaration", "protocol_declaration"):
            return self._type_decl(ts)
        if t in ("function_declaration", "protocol_function_declaration"):
            return self._func(ts)
        if t == "init_declaration":
            return self._init(ts)
        if t in ("property_declaration", "protocol_property_declaration"):
            return self._var(ts)
        if t == "subscript_declaration":
            return self._subscript(ts)
        if t == "typealias_declaration":
            return self._typealias(ts)
        if t == "associatedtype_declaration":
            return self._associatedtype(ts)
        if t == "deinit_declaration":
            keyword = self._child(ts, "deinit")
            return self._node(ts, "deinit", "", keyword.start_byte if keyword is not None else ts.start_byte, has_body=True)
        if t == "enum_entry":
            name = _either(self._field(ts, "name"), self._child(ts, "simple_identifier"))
            keyword = self._child(ts, "case")
            return self._node(
                ts, "case", self._text(name) if name is not None else "",
                keyword.start_byte if keyword is not None else ts.start_byte,
            )
        if t == "import_declaration":
            keyword = self._child(ts, "import")
            target = self._child(ts, "identifier")
            statement = collapse_whitespace(self._text(ts)).rstrip(";").strip()
            return self._node(
                ts, "import", self._text(target) if target is not None else "",
                keyword.start_byte if keyword is not None else ts.start_byte,
                initializer=statement,
            )
        return None

    def _type_decl(self, ts: Any) -> DeclNode:
        keyword = self._child(ts, *TYPE_KEYWORDS)
        if keyword is not None:
            kind = self._text(keyword)
        else:
            kind = "protocol" if ts.type == "protocol_declaration" else "class"
        name_node = self._field(ts, "name")
        name = collapse_whitespace(self._text(name_node)) if name_node is not None else ""
        body = _either(self._field(ts, "body"), self._child(ts, *_BODIES))

        inheritance: Tuple[str, ...] = ()
        colon = self._child(ts, ":")
        if colon is not None:
            parts = [
                c for c in self._children(ts)
                if c.start_byte > colon.start_byte
                and c.type not in ("type_constraints",) + _BODIES
                and (body is None or c.start_byte < body.start_byte)
            ]
            inheritance = tuple(split_top_level(self._joined(parts)))

        members: Tuple[DeclNode, ...] = ()
        if body is not None:
            members = tuple(self.fold_block(body.named_children))

        return self._node(
            ts, kind, name, keyword.start_byte if keyword is not None else ts.start_byte,
            generic_parameters=self._generics(ts),
            inheritance=inheritance,
            members=members,
            has_body=body is not None,
        )

    def _func(self, ts: Any) -> DeclNode:
        keyword = self._child(ts, "func")
        name_node = self._field(ts, "name")
        if name_node is not None:
            name = self._text(name_node).strip()
        else:
            # operator function: `static func == (lhs: T, rhs: T) -> Bool`
            lparen = self._child(ts, "(")
            start = keyword.end_byte if keyword is not None else ts.start_byte
            name = self._span(start, lparen.start_byte if lparen is not None else start).strip()
        params, after = self._parameters(ts)
        return self._node(
            ts, "func", name, keyword.start_byte if keyword is not None else ts.start_byte,
            generic_parameters=self._generics(ts),
            parameters=params,
            effects=self._effects(ts, after),
            return_type=self._return_type(ts),
            has_body=self._has_body(ts),
        )

    def _init(self, ts: Any) -> DeclNode:
        keyword = self._child(ts, "init")
        lparen = self._child(ts, "(")
        suffix = ""
        for c in ts.children:
            if keyword is not None and c.start_byte < keyword.end_byte:
                continue
            if lparen is not None and c.start_byte >= lparen.start_byte:
                break
            if self._text(c).strip() in ("?", "!"):
                suffix = self._text(c).strip()
                break
        params, after = self._parameters(ts)
        return self._node(
            ts, "init", "init", keyword.start_byte if keyword is not None else ts.start_byte,
            generic_parameters=self._generics(ts),
            parameters=params,
            effects=self._effects(ts, after),
            init_suffix=suffix,
            has_body=self._has_body(ts),
        )

    def _subscript(self, ts: Any) -> DeclNode:
        keyword = self._child(ts, "subscript")
        params, after = self._parameters(ts)
        block = self._child(ts, "computed_property")
        return self._node(
            ts, "subscript", "subscript", keyword.start_byte if keyword is not None else ts.start_byte,
            generic_parameters=self._generics(ts),
            parameters=params,
            effects=self._effects(ts, after),
            return_type=self._return_type(ts),
            accessors=self._accessors(block),
            has_body=block is not None,
        )

    def _binding(self, ts: Any) -> Optional[Any]:
        for c in ts.children:
            if c.type == "value_binding_pattern":
                return c
            if c.type == "pattern":
                inner = self._child(c, "value_binding_pattern")
                if inner is not None:
                    return inner
        return None

    def _var(self, ts: Any) -> Optional[DeclNode]:
        binding = self._binding(ts)
        name_node = self._field(ts, "name")
        if binding is None or name_node is None:
            return None
        kind = self._text(binding).split()[-1]
        if name_node.start_byte <= binding.start_byte < name_node.end_byte:
            name = self._span(binding.end_byte, name_node.end_byte).strip()
        else:
            name = self._text(name_node).strip()
        if not name or not (name[0].isalpha() or name[0] in "_`"):
            # tuple pattern (let (a, b) = ...) carries no single property
            return None

        # only the first binding of `var a = 1, b = 2` is tracked
        limit = ts.end_byte
        first: List[Any] = []
        for c in self._children(ts):
            if c.type == "," and c.start_byte > name_node.start_byte:
                limit = c.start_byte
                break
            first.append(c)

        annotation = next((c for c in first if c.type == "type_annotation"), None)
        type_text = None
        if annotation is not None:
            type_text = collapse_whitespace(self._text(annotation).lstrip().lstrip(":")) or None

        value = self._field(ts, "value")
        initializer = None
        if value is not None and value.start_byte < limit:
            initializer = self._text(value).strip() or None

        block = next(
            (c for c in first if c.type in ("computed_property", "willset_didset_block", "protocol_property_requirements")),
            None,
        )
        return self._node(
            ts, kind, name, min(binding.start_byte, name_node.start_byte),
            type_annotation=type_text,
            initializer=initializer,
            accessors=self._accessors(block),
            has_body=block is not None,
        )

    def _typealias(self, ts: Any) -> DeclNode:
        keyword = self._child(ts, "typealias")
        name_node = self._field(ts, "name")
        target = _either(self._field(ts, "value"), self._after(ts, "="))
        return self._node(
            ts, "typealias", self._text(name_node) if name_node is not None else "",
            keyword.start_byte if keyword is not None else ts.start_byte,
            generic_parameters=self._generics(ts),
            initializer=collapse_whitespace(self._text(target)) or None if target is not None else None,
        )

    def _associatedtype(self, ts: Any) -> DeclNode:
        keyword = self._child(ts, "associatedtype")
        name_node = self._field(ts, "name")
        constraint = _either(self._field(ts, "must_inherit"), self._after(ts, ":"))
        default = _either(self._field(ts, "default_value"), self._after(ts, "="))
        return self._node(
            ts, "associatedtype", self._text(name_node) if name_node is not None else "",
            keyword.start_byte if keyword is not None else ts.start_byte,
            type_annotation=collapse_whitespace(self._text(constraint)) or None if constraint is not None else None,
            initializer=collapse_whitespace(self._text(default)) or None if default is not None else None,
        )


def parse_source(source: str) -> SwiftSyntaxTree:
    """Parse a whole Swift file with tree-sitter-swift. Raises SwiftSyntaxError."""
    data = source.encode("utf-8")
    parser = tree_sitter.Parser()
    parser.language = SWIFT_LANGUAGE
    tree = parser.parse(data)

    bad = _first_error(tree.root_node)
    if bad is not None:
        line = bad.start_point[0] + 1
        if bad.is_missing:
            raise SwiftSyntaxError(f"missing '{bad.type}'", line)
        snippet = collapse_whitespace(data[bad.start_byte:bad.end_byte].decode("utf-8", "replace"))[:40]
        raise SwiftSyntaxError(f"unexpected '{snippet}'" if snippet else "unexpected end of input", line)

    folder = _TreeFolder(data)
    declarations = tuple(folder.fold_block(tree.root_node.named_children))
    return SwiftSyntaxTree(source=source, declarations=declarations)
