from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from mockgen.cir.model import (
    AccessLevel,
    ClassElement,
    Element,
    FunctionElement,
    InitializerElement,
    MethodElement,
    MockKind,
    ParameterElement,
    PropertyElement,
    ProtocolElement,
)
from mockgen.generators.defaults import (
    DefaultValueSynthesizer,
    is_void,
    return_statement,
)
from mockgen.generators.writer import SourceWriter
from mockgen.typetext import capitalize_first, generic_names, inheritance_names

# Conformances a class cannot inherit for free when a struct is mocked as a class
_SYNTHESIZED_FOR_STRUCTS = {"Equatable", "Hashable", "Codable", "Encodable", "Decodable", "Comparable"}

_UNCHECKED_SENDABLE = "@unchecked Sendable"


# ============================================================
# Shared rendering helpers
# ============================================================

def render_parameter(p: ParameterElement) -> str:
    names = p.binding_name if p.external_label is None else f"{p.external_label} {p.binding_name}"
    type_text = p.type
    if p.is_inout:
        type_text = f"inout {type_text}"
    if p.is_variadic:
        type_text += "..."
    out = f"{names}: {type_text}"
    if p.default_value is not None:
        out += f" = {p.default_value}"
    return out


def render_parameters(params: Sequence[ParameterElement]) -> str:
    return ", ".join(render_parameter(p) for p in params)


def render_effects(is_async: bool, is_throwing: bool) -> str:
    out = ""
    if is_async:
        out += " async"
    if is_throwing:
        out += " throws"
    return out


def render_generics(generic_parameters: Sequence[str]) -> str:
    return f"<{', '.join(generic_parameters)}>" if generic_parameters else ""


def forward_arguments(params: Sequence[ParameterElement]) -> str:
    """Call-site argument list that passes each parameter straight through."""
    parts: List[str] = []
    for p in params:
        value = f"&{p.binding_name}" if p.is_inout else p.binding_name
        label = p.call_label
        parts.append(f"{label}: {value}" if label else value)
    return ", ".join(parts)


def placeholder_arguments(params: Sequence[ParameterElement], defaults: DefaultValueSynthesizer) -> str:
    """Call-site argument list made of default values (declared default first)."""
    parts: List[str] = []
    for p in params:
        value = p.default_value if p.default_value is not None else defaults.value_for(p.type)
        label = p.call_label
        parts.append(f"{label}: {value}" if label else value)
    return ", ".join(parts)


def uses_result(member, use_result: bool) -> bool:
    """Result-wrapped mode only narrows: async + throwing + non-void members."""
    return bool(use_result and member.is_async and member.is_throwing and not is_void(member.return_type))


def tracking_keys(members: Sequence) -> List[str]:
    """
    Unique identifier stem per member, used to name generated fields.
      fetch            -> fetch
      fetch(id:) / fetch(name:) -> fetchId / fetchName
      still clashing   -> fetchId1 / fetchId2
    """
    def stem(name: str) -> str:
        name = name.strip("`")
        return name if name.isidentifier() else "operator"

    stems = [stem(m.name) for m in members]
    keys: List[str] = []
    for m, s in zip(members, stems):
        if stems.count(s) == 1:
            keys.append(s)
        else:
            labels = "".join(capitalize_first(p.call_label or p.binding_name) for p in m.parameters)
            keys.append(s + labels)

    seen = {}
    unique: List[str] = []
    for k in keys:
        if keys.count(k) > 1:
            seen[k] = seen.get(k, 0) + 1
            unique.append(f"{k}{seen[k]}")
        else:
            unique.append(k)
    return unique


def mentions_any(type_text: Optional[str], names: Sequence[str]) -> bool:
    if not type_text or not names:
        return False
    return any(re.search(rf"\b{re.escape(n)}\b", type_text) for n in names)


def returns_method_generic(member) -> bool:
    """`func load<T>() -> T`: the return type names the member's own generic parameter."""
    return mentions_any(member.return_type, generic_names(member.generic_parameters))


# ============================================================
# Mock shape
# ============================================================

@dataclass(frozen=True)
class MockShape:
    mock_name: str
    header: str                  # declaration line without the opening brace
    inherits_source: bool        # subclass of the mocked class
    is_struct: bool              # rendered as a value type
    is_protocol: bool
    type_access: str             # "public " / "" for members that follow the mock's access


class MockStrategy:
    """
    Contract shared by the three strategies.

    generate(element) -> Swift source text for the mock type (or function).
    Subclasses fill in the per-member hooks; layout, headers, signatures
    and initializers are rendered here once for all of them.
    """

    kind: MockKind = MockKind.STUB
    renders_struct_as_class = False
    supports_result = True

    def __init__(self, use_result: bool = False) -> None:
        self.use_result = use_result and self.supports_result
        self.defaults = self.make_defaults()
        self.argument_defaults = DefaultValueSynthesizer()

    def make_defaults(self) -> DefaultValueSynthesizer:
        return DefaultValueSynthesizer()

    def mock_name(self, name: str) -> str:
        return f"{name}{self.kind.value}"

    # ---------------- entry point ----------------

    def generate(self, element: Element) -> str:
        w = SourceWriter()
        if isinstance(element, ProtocolElement):
            self.render_type(w, element, self.protocol_shape(element))
        elif isinstance(element, ClassElement):
            self.render_type(w, element, self.class_shape(element))
        elif isinstance(element, FunctionElement):
            self.render_function(w, element)
        else:
            raise TypeError(f"Cannot generate a mock for {type(element).__name__}")
        return w.render()

    # ---------------- shapes ----------------

    def _type_access(self, access: AccessLevel) -> str:
        if access in (AccessLevel.PUBLIC, AccessLevel.OPEN):
            return "public "
        return ""

    def protocol_shape(self, element: ProtocolElement) -> MockShape:
        name = self.mock_name(element.name)
        access = self._type_access(element.access_level)
        generics = [
            f"{a.name}: {a.constraint}" if a.constraint else a.name
            for a in element.associated_types
            if a.default_type is None
        ]
        conformances = [element.name]
        keyword = "class"
        if element.is_sendable:
            keyword = "final class"
            conformances.append(_UNCHECKED_SENDABLE)
        header = f"{access}{keyword} {name}{render_generics(generics)}: {', '.join(conformances)}"
        return MockShape(name, header, inherits_source=False, is_struct=False, is_protocol=True, type_access=access)

    def class_shape(self, element: ClassElement) -> MockShape:
        name = self.mock_name(element.name)
        access = self._type_access(element.access_level)
        generics = render_generics(element.generic_parameters)
        generic_args = render_generics(generic_names(element.generic_parameters))

        if not element.is_final and not element.is_value_type:
            keyword = "class"
            conformances = [f"{element.name}{generic_args}"]
            if element.is_sendable:
                keyword = "final class"
                conformances.append(_UNCHECKED_SENDABLE)
            header = f"{access}{keyword} {name}{generics}: {', '.join(conformances)}"
            return MockShape(name, header, inherits_source=True, is_struct=False, is_protocol=False, type_access=access)

        as_struct = element.is_value_type and not self.renders_struct_as_class
        keyword = "struct" if as_struct else "final class"
        conformances: List[str] = []
        for entry in element.inheritance:
            names = inheritance_names([entry])
            if element.is_value_type and not as_struct and any(n in _SYNTHESIZED_FOR_STRUCTS for n in names):
                continue
            if element.is_sendable and not as_struct and names == ["Sendable"]:
                continue
            conformances.append(entry)
        if element.is_sendable and not as_struct:
            conformances.append(_UNCHECKED_SENDABLE)
        header = f"{access}{keyword} {name}{generics}"
        if conformances:
            header += f": {', '.join(conformances)}"
        return MockShape(name, header, inherits_source=False, is_struct=as_struct, is_protocol=False, type_access=access)

    # ---------------- member selection ----------------

    def _visible(self, member) -> bool:
        return member.access_level not in (AccessLevel.PRIVATE, AccessLevel.FILEPRIVATE)

    def visible_methods(self, element, shape: MockShape) -> List[MethodElement]:
        methods = [m for m in element.methods if self._visible(m)]
        if shape.inherits_source:
            methods = [m for m in methods if not m.is_static]
        return methods

    def visible_properties(self, element, shape: MockShape) -> List[PropertyElement]:
        if shape.inherits_source:
            return []
        return [p for p in element.properties if self._visible(p)]

    # ---------------- prefixes & signatures ----------------

    def member_access(self, member, shape: MockShape) -> str:
        if shape.is_protocol:
            return shape.type_access
        level = member.access_level
        if level is AccessLevel.OPEN:
            return "open " if shape.inherits_source else "public "
        if level is AccessLevel.PUBLIC:
            return "public "
        return ""

    def method_prefix(self, method: MethodElement, shape: MockShape) -> str:
        prefix = self.member_access(method, shape)
        if shape.inherits_source:
            prefix += "override "
        if method.is_static:
            prefix += "static "
        if shape.is_struct and method.is_mutating:
            prefix += "mutating "
        return prefix

    def field_prefix(self, member, shape: MockShape) -> str:
        """Prefix for generated storage that belongs to a member (static members get static storage)."""
        prefix = shape.type_access
        if getattr(member, "is_static", False):
            prefix += "static "
        return prefix

    def method_signature(self, method, prefix: str, name: Optional[str] = None) -> str:
        sig = f"{prefix}func {name or method.name}{render_generics(method.generic_parameters)}"
        sig += f"({render_parameters(method.parameters)})"
        sig += render_effects(method.is_async, method.is_throwing)
        if not is_void(method.return_type):
            sig += f" -> {method.return_type}"
        return sig

    # ---------------- type layout ----------------

    def render_type(self, w: SourceWriter, element, shape: MockShape) -> None:
        methods = self.visible_methods(element, shape)
        keys = tracking_keys(methods)
        properties = self.visible_properties(element, shape)

        with w.block(shape.header):
            if isinstance(element, ProtocolElement):
                for a in element.associated_types:
                    if a.default_type is not None:
                        w.line(f"{shape.type_access}typealias {a.name} = {a.default_type}")
                w.blank()

            self.render_fields(w, shape, methods, keys)
            w.blank()

            for prop in properties:
                self.render_property(w, prop, shape)
            w.blank()

            if isinstance(element, ClassElement):
                self.render_initializers(w, element, shape)
            else:
                w.member(f"{shape.type_access}init()", [self.initializer_comment()])
            w.blank()

            for method, key in zip(methods, keys):
                self.render_method(w, method, key, shape)
                w.blank()

            self.render_extras(w, shape, methods, keys)

    # ---------------- hooks ----------------

    def result_field(self, member, key: str, prefix: str) -> str:
        """`var fooReturnValue: Result<T, Error> = .success(<default>)`"""
        return f"{prefix}var {key}ReturnValue: {self.result_type(member)} = {self.result_default(member)}"

    def result_type(self, member) -> str:
        # a method's own generic parameter is out of scope at type level
        if returns_method_generic(member):
            return "Result<Any, Error>"
        return f"Result<{member.return_type}, Error>"

    def result_default(self, member) -> str:
        if returns_method_generic(member):
            return ".success(())"
        return f".success({self.defaults.value_for(member.return_type)})"

    def result_return(self, member, key: str) -> str:
        if returns_method_generic(member):
            return f"return try {key}ReturnValue.get() as! {member.return_type}"
        return f"return try {key}ReturnValue.get()"

    def render_fields(self, w: SourceWriter, shape: MockShape, methods, keys) -> None:
        """Storage declared at the top of the mock."""

    def render_property(self, w: SourceWriter, prop: PropertyElement, shape: MockShape) -> None:
        prefix = self.member_access(prop, shape)
        if prop.is_static:
            prefix += "static "
        w.line(f"{prefix}var {prop.name}: {prop.type} = {self.defaults.value_for(prop.type)}")

    def method_body(self, method, key: str, shape: Optional[MockShape]) -> List[str]:
        if is_void(method.return_type):
            return []
        return [return_statement(self.defaults.value_for(method.return_type))]

    def render_method(self, w: SourceWriter, method: MethodElement, key: str, shape: MockShape) -> None:
        signature = self.method_signature(method, self.method_prefix(method, shape))
        w.member(signature, self.method_body(method, key, shape))

    def render_extras(self, w: SourceWriter, shape: MockShape, methods, keys) -> None:
        """Trailing members (spy reset / verification)."""

    def initializer_comment(self) -> Optional[str]:
        return None

    # ---------------- initializers ----------------

    def _init_signature(self, init: InitializerElement, shape: MockShape) -> str:
        prefix = self.member_access(init, shape)
        if prefix == "open ":
            prefix = "public "
        if init.is_required:
            prefix += "required "
        elif shape.inherits_source and not init.is_convenience:
            prefix += "override "
        if init.is_convenience and not shape.is_struct:
            prefix += "convenience "
        sig = f"{prefix}init{init.failable_suffix}({render_parameters(init.parameters)})"
        sig += render_effects(False, init.is_throwing)
        return sig

    def _delegation(self, caller: InitializerElement, target: InitializerElement, receiver: str, forward: bool) -> str:
        args = forward_arguments(target.parameters) if forward else placeholder_arguments(target.parameters, self.argument_defaults)
        call = f"{receiver}.init({args})"
        if target.is_throwing:
            call = f"try {call}" if caller.is_throwing else f"try! {call}"
        if target.is_failable and not target.is_implicitly_unwrapped and not caller.is_failable:
            call = f"{call}!"
        return call

    def render_initializers(self, w: SourceWriter, element: ClassElement, shape: MockShape) -> None:
        comment = self.initializer_comment()
        designated = [i for i in element.initializers if not i.is_convenience and self._visible(i)]
        convenience = [i for i in element.initializers if i.is_convenience and self._visible(i)]

        if not designated:
            designated = [InitializerElement()]
            if shape.inherits_source:
                w.member(f"{shape.type_access}override init()", [comment, "super.init()"])
            else:
                w.member(f"{shape.type_access}init()", [comment])
            w.blank()
        else:
            for init in designated:
                body = [comment]
                if shape.inherits_source:
                    body.append(self._delegation(init, init, "super", forward=True))
                w.member(self._init_signature(init, shape), body)
                w.blank()

        target = designated[0]
        for init in convenience:
            w.member(
                self._init_signature(init, shape),
                [comment, self._delegation(init, target, "self", forward=False)],
            )
            w.blank()

    # ---------------- standalone functions ----------------

    def render_function(self, w: SourceWriter, fn: FunctionElement) -> None:
        access = self._type_access(fn.access_level)
        key = fn.name.strip("`")
        self.function_prelude(w, fn, key, access)
        signature = self.method_signature(fn, access, name=self.mock_name(key))
        w.member(signature, self.method_body(fn, key, None))

    def function_prelude(self, w: SourceWriter, fn: FunctionElement, key: str, access: str) -> None:
        """Global storage emitted ahead of a standalone function mock."""
