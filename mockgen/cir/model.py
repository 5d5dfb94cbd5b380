from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class MockKind(Enum):
    STUB = "Stub"
    SPY = "Spy"
    DUMMY = "Dummy"

    @property
    def marker(self) -> str:
        return f"@{self.value}"


class AccessLevel(Enum):
    PRIVATE = "private"
    FILEPRIVATE = "fileprivate"
    INTERNAL = "internal"
    PUBLIC = "public"
    OPEN = "open"

    @property
    def rank(self) -> int:
        return _ACCESS_ORDER.index(self)

    @property
    def keyword(self) -> str:
        """Rendered prefix; internal is the implicit default and renders empty."""
        if self is AccessLevel.INTERNAL:
            return ""
        return f"{self.value} "

    def __lt__(self, other: "AccessLevel") -> bool:
        if not isinstance(other, AccessLevel):
            return NotImplemented
        return self.rank < other.rank


_ACCESS_ORDER = (
    AccessLevel.PRIVATE,
    AccessLevel.FILEPRIVATE,
    AccessLevel.INTERNAL,
    AccessLevel.PUBLIC,
    AccessLevel.OPEN,
)


@dataclass(frozen=True)
class ParameterElement:
    binding_name: str                       # internal name used inside the body
    type: str                               # raw type text, attributes kept (@escaping ...)
    external_label: Optional[str] = None    # None = same as binding, "_" = omitted
    default_value: Optional[str] = None
    is_inout: bool = False
    is_variadic: bool = False

    def __post_init__(self) -> None:
        if not self.binding_name:
            raise ValueError("ParameterElement.binding_name must be non-empty")

    @property
    def call_label(self) -> Optional[str]:
        """Label written at call sites, or None when the argument is unlabeled."""
        if self.external_label == "_":
            return None
        return self.external_label or self.binding_name


@dataclass(frozen=True)
class MethodElement:
    name: str
    parameters: Tuple[ParameterElement, ...] = ()
    return_type: Optional[str] = None
    access_level: AccessLevel = AccessLevel.INTERNAL
    is_static: bool = False
    is_async: bool = False
    is_throwing: bool = False
    is_mutating: bool = False
    generic_parameters: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionElement:
    name: str
    parameters: Tuple[ParameterElement, ...] = ()
    return_type: Optional[str] = None
    access_level: AccessLevel = AccessLevel.INTERNAL
    is_static: bool = False
    is_async: bool = False
    is_throwing: bool = False
    generic_parameters: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PropertyElement:
    name: str
    type: str
    access_level: AccessLevel = AccessLevel.INTERNAL
    is_static: bool = False
    has_getter: bool = True
    has_setter: bool = False
    is_lazy: bool = False


@dataclass(frozen=True)
class InitializerElement:
    parameters: Tuple[ParameterElement, ...] = ()
    access_level: AccessLevel = AccessLevel.INTERNAL
    is_failable: bool = False
    is_convenience: bool = False
    is_throwing: bool = False
    is_required: bool = False
    is_implicitly_unwrapped: bool = False   # init! rather than init?

    @property
    def failable_suffix(self) -> str:
        if not self.is_failable:
            return ""
        return "!" if self.is_implicitly_unwrapped else "?"


@dataclass(frozen=True)
class AssociatedTypeElement:
    name: str
    constraint: Optional[str] = None
    default_type: Optional[str] = None


@dataclass(frozen=True)
class ProtocolElement:
    name: str
    methods: Tuple[MethodElement, ...] = ()
    properties: Tuple[PropertyElement, ...] = ()
    associated_types: Tuple[AssociatedTypeElement, ...] = ()
    inheritance: Tuple[str, ...] = ()
    access_level: AccessLevel = AccessLevel.INTERNAL
    generic_parameters: Tuple[str, ...] = ()
    is_sendable: bool = False


@dataclass(frozen=True)
class ClassElement:
    name: str
    methods: Tuple[MethodElement, ...] = ()
    properties: Tuple[PropertyElement, ...] = ()
    initializers: Tuple[InitializerElement, ...] = ()
    inheritance: Tuple[str, ...] = ()
    access_level: AccessLevel = AccessLevel.INTERNAL
    generic_parameters: Tuple[str, ...] = ()
    is_final: bool = False
    is_sendable: bool = False
    is_value_type: bool = False             # struct


Element = Union[ProtocolElement, ClassElement, FunctionElement]


def element_kind(element: Element) -> str:
    if isinstance(element, ProtocolElement):
        return "protocol"
    if isinstance(element, ClassElement):
        return "struct" if element.is_value_type else "class"
    if isinstance(element, FunctionElement):
        return "function"
    raise TypeError(f"Not an Element: {type(element).__name__}")


@dataclass(frozen=True)
class SourceLocation:
    line: int
    column: int
    file: str


@dataclass(frozen=True)
class Annotation:
    kind: MockKind
    element: Element
    location: SourceLocation


@dataclass(frozen=True)
class GeneratedMock:
    kind: MockKind
    declaration_name: str
    file_name: str
    source: str
    location: Optional[SourceLocation] = None

    def to_dict(self) -> dict:
        out = {
            "kind": self.kind.value,
            "declaration_name": self.declaration_name,
            "file_name": self.file_name,
            "source": self.source,
        }
        if self.location is not None:
            out["line"] = self.location.line
        return out


@dataclass(frozen=True)
class GenerationReport:
    """Per-file outcome: successes and per-declaration failures side by side."""
    file: str
    mocks: Tuple[GeneratedMock, ...] = ()
    errors: Tuple[dict, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "mocks": [m.to_dict() for m in self.mocks],
            "errors": list(self.errors),
        }
