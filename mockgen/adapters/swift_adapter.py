from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from mockgen import config
from mockgen.adapters.parameters import ParameterModelBuilder
from mockgen.adapters.swift_syntax import DeclNode, SwiftSyntaxTree, parse_source
from mockgen.cir.graph import ElementGraph
from mockgen.cir.model import (
    AccessLevel,
    AssociatedTypeElement,
    ClassElement,
    Element,
    FunctionElement,
    InitializerElement,
    MethodElement,
    PropertyElement,
    ProtocolElement,
)
from mockgen.errors import SwiftSyntaxError, UnsupportedDeclarationKind
from mockgen.typetext import collapse_whitespace, inheritance_names

_INT_LITERAL_RE = re.compile(r"^-?(?:0x[0-9a-fA-F_]+|0o[0-7_]+|0b[01_]+|\d[\d_]*)$")
_FLOAT_LITERAL_RE = re.compile(r"^-?\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?$")
_CONSTRUCTOR_CALL_RE = re.compile(r"^([A-Z][\w.]*(?:<[^()]*>)?)\s*\(.*\)$", re.DOTALL)


class SwiftAdapter:
    """
    Swift -> Element model.

    One declaration node in, exactly one Element out:
      - protocol             -> ProtocolElement (methods, {get set} properties, associated types)
      - class / struct       -> ClassElement (struct sets is_value_type)
      - func (top level)     -> FunctionElement

    Anything else (enum, actor, extension, var, typealias, ...) raises
    UnsupportedDeclarationKind. Effects (async / throws) are read per member,
    never inferred from each other.
    """

    language = "swift"

    SUPPORTED_KINDS = ("protocol", "class", "struct", "func")

    def __init__(self, sendable_marker: str | None = None) -> None:
        self.sendable_marker = sendable_marker or config.SENDABLE_MARKER
        self.parameters = ParameterModelBuilder()

    # ---------------- Helpers ----------------

    def _access_from_mods(self, mods, default: AccessLevel = AccessLevel.INTERNAL) -> AccessLevel:
        mods = set(mods or ())
        if "open" in mods:
            return AccessLevel.OPEN
        if "public" in mods:
            return AccessLevel.PUBLIC
        if "fileprivate" in mods:
            return AccessLevel.FILEPRIVATE
        if "private" in mods:
            return AccessLevel.PRIVATE
        if "internal" in mods or "package" in mods:
            return AccessLevel.INTERNAL
        return default

    def _is_static(self, mods) -> bool:
        mods = set(mods or ())
        return "static" in mods or "class" in mods

    def _is_sendable(self, inheritance) -> bool:
        return self.sendable_marker in inheritance_names(inheritance)

    def _infer_literal_type(self, initializer: Optional[str]) -> Optional[str]:
        """Type of `var x = <literal>` when no annotation is written."""
        if not initializer:
            return None
        value = collapse_whitespace(initializer)
        if value in ("true", "false"):
            return "Bool"
        if value.startswith('"') or value.startswith('#"'):
            return "String"
        if _INT_LITERAL_RE.match(value):
            return "Int"
        if _FLOAT_LITERAL_RE.match(value):
            return "Double"
        m = _CONSTRUCTOR_CALL_RE.match(value)
        if m:
            return m.group(1)
        return None

    def _has_setter(self, node: DeclNode, in_protocol: bool) -> bool:
        if node.kind == "let":
            return False
        if in_protocol:
            return "set" in node.accessors
        if any(m.endswith("(set)") for m in node.modifiers):
            return False
        if not node.accessors:
            return True
        if "set" in node.accessors:
            return True
        if "willSet" in node.accessors or "didSet" in node.accessors:
            return True
        # get-only or computed shorthand
        return False

    # ---------------- Member extraction ----------------

    def _method(self, node: DeclNode, default_access: AccessLevel) -> MethodElement:
        return MethodElement(
            name=node.name,
            parameters=self.parameters.build_all(node.parameters),
            return_type=node.return_type,
            access_level=self._access_from_mods(node.modifiers, default_access),
            is_static=self._is_static(node.modifiers),
            is_async=node.is_async,
            is_throwing=node.is_throwing,
            is_mutating="mutating" in node.modifiers,
            generic_parameters=node.generic_parameters,
        )

    def _property(self, node: DeclNode, default_access: AccessLevel, in_protocol: bool) -> Optional[PropertyElement]:
        prop_type = node.type_annotation or self._infer_literal_type(node.initializer)
        if not prop_type:
            return None
        return PropertyElement(
            name=node.name,
            type=prop_type,
            access_level=self._access_from_mods(node.modifiers, default_access),
            is_static=self._is_static(node.modifiers),
            has_getter=True,
            has_setter=self._has_setter(node, in_protocol),
            is_lazy="lazy" in node.modifiers,
        )

    def _initializer(self, node: DeclNode, default_access: AccessLevel) -> InitializerElement:
        return InitializerElement(
            parameters=self.parameters.build_all(node.parameters),
            access_level=self._access_from_mods(node.modifiers, default_access),
            is_failable=node.init_suffix in ("?", "!"),
            is_convenience="convenience" in node.modifiers,
            is_throwing=node.is_throwing,
            is_required="required" in node.modifiers,
            is_implicitly_unwrapped=node.init_suffix == "!",
        )

    # ---------------- Declaration extraction ----------------

    def extract(self, node: DeclNode) -> Element:
        """Map one declaration node to its Element. Raises UnsupportedDeclarationKind."""
        if node.kind == "protocol":
            return self._protocol(node)
        if node.kind in ("class", "struct"):
            return self._class(node)
        if node.kind == "func":
            return self._function(node)
        raise UnsupportedDeclarationKind(node.kind, node.name, node.start_line)

    def _protocol(self, node: DeclNode) -> ProtocolElement:
        access = self._access_from_mods(node.modifiers)
        methods: List[MethodElement] = []
        properties: List[PropertyElement] = []
        associated: List[AssociatedTypeElement] = []

        for member in node.members:
            if member.kind == "func":
                methods.append(self._method(member, access))
            elif member.kind == "var":
                prop = self._property(member, access, in_protocol=True)
                if prop is not None:
                    properties.append(prop)
            elif member.kind == "associatedtype":
                associated.append(
                    AssociatedTypeElement(
                        name=member.name,
                        constraint=member.type_annotation,
                        default_type=member.initializer,
                    )
                )

        return ProtocolElement(
            name=node.name,
            methods=tuple(methods),
            properties=tuple(properties),
            associated_types=tuple(associated),
            inheritance=node.inheritance,
            access_level=access,
            generic_parameters=node.generic_parameters,
            is_sendable=self._is_sendable(node.inheritance),
        )

    def _class(self, node: DeclNode) -> ClassElement:
        access = self._access_from_mods(node.modifiers)
        # members default to internal even inside public types
        member_default = access if access < AccessLevel.INTERNAL else AccessLevel.INTERNAL
        methods: List[MethodElement] = []
        properties: List[PropertyElement] = []
        initializers: List[InitializerElement] = []

        for member in node.members:
            if member.kind == "func":
                methods.append(self._method(member, member_default))
            elif member.kind in ("var", "let"):
                prop = self._property(member, member_default, in_protocol=False)
                if prop is not None:
                    properties.append(prop)
            elif member.kind == "init":
                initializers.append(self._initializer(member, member_default))

        return ClassElement(
            name=node.name,
            methods=tuple(methods),
            properties=tuple(properties),
            initializers=tuple(initializers),
            inheritance=node.inheritance,
            access_level=access,
            generic_parameters=node.generic_parameters,
            is_final="final" in node.modifiers,
            is_sendable=self._is_sendable(node.inheritance),
            is_value_type=node.kind == "struct",
        )

    def _function(self, node: DeclNode) -> FunctionElement:
        return FunctionElement(
            name=node.name,
            parameters=self.parameters.build_all(node.parameters),
            return_type=node.return_type,
            access_level=self._access_from_mods(node.modifiers),
            is_static=False,
            is_async=node.is_async,
            is_throwing=node.is_throwing,
            generic_parameters=node.generic_parameters,
        )

    # ---------------- Parsing entry points ----------------

    def parse_to_ast(self, code: str) -> SwiftSyntaxTree:
        try:
            return parse_source(code)
        except SwiftSyntaxError as e:
            raise ValueError(f"Swift syntax error: {e}")
        except RecursionError as e:
            raise ValueError(f"Failed to parse Swift code: {e}")

    def extract_all(self, tree: SwiftSyntaxTree, filename: str | None = None) -> Tuple[List[Tuple[DeclNode, Element]], List[Dict]]:
        """
        Every supported top-level declaration -> Element.
        Failures are collected per declaration, never raised.
        """
        elements: List[Tuple[DeclNode, Element]] = []
        errors: List[Dict] = []
        for node in tree.declarations:
            if node.kind not in self.SUPPORTED_KINDS:
                continue
            try:
                elements.append((node, self.extract(node)))
            except ValueError as e:
                errors.append({
                    "file": filename or "<memory>",
                    "declaration": node.name,
                    "line": node.start_line,
                    "error": str(e),
                })
        return elements, errors

    def build_cir_graph_for_code(self, code: str, filename: str | None = None) -> ElementGraph:
        """
        Single-file helper (for /parse).
        """
        tree = self.parse_to_ast(code)
        elements, errors = self.extract_all(tree, filename)
        graph = ElementGraph()
        for _, element in elements:
            graph.add_element(element, source_file=filename)
        graph.g.graph["parse_errors"] = errors
        return graph

