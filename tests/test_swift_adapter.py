import os
import sys

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mockgen.adapters.swift_adapter import SwiftAdapter
from mockgen.adapters.swift_syntax import DeclNode, SwiftSyntaxTree
from mockgen.cir.model import AccessLevel, ClassElement, FunctionElement, ProtocolElement
from mockgen.errors import UnsupportedDeclarationKind


def extract_first(code, adapter=None):
    adapter = adapter or SwiftAdapter()
    tree = adapter.parse_to_ast(code)
    node = next(d for d in tree.declarations if d.kind != "import")
    return adapter.extract(node)


def test_protocol_members_and_effects_are_independent():
    code = """public protocol Loader: AnyObject {
    associatedtype Output = Data
    var name: String { get set }
    var id: Int { get }
    func a() async
    func b() throws
    func c() async throws -> Int
    mutating func d(_ x: inout Int)
    static func e() -> Self
}
"""
    element = extract_first(code)
    assert isinstance(element, ProtocolElement)
    assert element.access_level is AccessLevel.PUBLIC
    assert element.inheritance == ("AnyObject",)
    assert element.is_sendable is False

    methods = {m.name: m for m in element.methods}
    assert (methods["a"].is_async, methods["a"].is_throwing) == (True, False)
    assert (methods["b"].is_async, methods["b"].is_throwing) == (False, True)
    assert (methods["c"].is_async, methods["c"].is_throwing) == (True, True)
    assert methods["c"].return_type == "Int"
    assert methods["a"].return_type is None
    assert methods["d"].is_mutating
    assert methods["d"].parameters[0].is_inout
    assert methods["e"].is_static
    # requirements inherit the protocol's access level
    assert methods["a"].access_level is AccessLevel.PUBLIC

    props = {p.name: p for p in element.properties}
    assert props["name"].has_setter is True
    assert props["id"].has_setter is False

    assoc = element.associated_types[0]
    assert (assoc.name, assoc.constraint, assoc.default_type) == ("Output", None, "Data")


def test_sendable_detection():
    assert extract_first("protocol P: AnyObject, Sendable {}").is_sendable
    assert extract_first("final class C: @unchecked Sendable {}").is_sendable
    assert extract_first("struct S: Codable & Sendable {}").is_sendable
    assert not extract_first("protocol Q: Codable {}").is_sendable


def test_custom_sendable_marker():
    adapter = SwiftAdapter(sendable_marker="ThreadSafe")
    assert extract_first("protocol P: ThreadSafe {}", adapter).is_sendable
    assert not extract_first("protocol P: Sendable {}", adapter).is_sendable


def test_class_property_setters_and_inferred_types():
    code = """class Settings {
    var a: Int = 0
    let b: Int = 1
    private(set) var c: Int = 0
    var d: Int { return 1 }
    var e: Int {
        get { 1 }
        set { }
    }
    var f = "x"
    var g = compute()
    static var shared = Settings()
    lazy var h = 2.5
    var i: Bool = false { didSet { } }
}
"""
    element = extract_first(code)
    assert isinstance(element, ClassElement)
    props = {p.name: p for p in element.properties}

    assert props["a"].has_setter is True
    assert props["b"].has_setter is False
    assert props["c"].has_setter is False
    assert props["d"].has_setter is False
    assert props["e"].has_setter is True
    assert props["f"].type == "String"
    assert "g" not in props
    assert props["shared"].type == "Settings"
    assert props["shared"].is_static
    assert props["h"].type == "Double"
    assert props["h"].is_lazy
    assert props["i"].has_setter is True


def test_class_flags_and_access_defaults():
    code = """public final class Client: NSObject {
    func run() {}
    private func hidden() {}
    public func visible() {}
}
"""
    element = extract_first(code)
    assert element.is_final
    assert not element.is_value_type
    methods = {m.name: m for m in element.methods}
    assert methods["run"].access_level is AccessLevel.INTERNAL
    assert methods["hidden"].access_level is AccessLevel.PRIVATE
    assert methods["visible"].access_level is AccessLevel.PUBLIC


def test_struct_is_value_type_and_generics_kept():
    element = extract_first("struct Box<T: Equatable> { var value: T }")
    assert element.is_value_type
    assert element.generic_parameters == ("T: Equatable",)
    assert element.properties[0].type == "T"


def test_initializers():
    code = """class Parser {
    required init(text: String) throws {}
    convenience init?(data: Data) { nil }
    convenience init!(raw: Int) { nil }
}
"""
    inits = extract_first(code).initializers
    assert inits[0].is_required and inits[0].is_throwing
    assert inits[1].is_convenience and inits[1].is_failable
    assert inits[1].failable_suffix == "?"
    assert inits[2].failable_suffix == "!"
    assert inits[0].parameters[0].binding_name == "text"


def test_standalone_function():
    element = extract_first("public func fetchUser(id: Int, _ retries: Int = 3) async throws -> User { User() }")
    assert isinstance(element, FunctionElement)
    assert element.name == "fetchUser"
    assert element.access_level is AccessLevel.PUBLIC
    assert element.is_async and element.is_throwing
    assert [p.call_label for p in element.parameters] == ["id", None]
    assert element.parameters[1].default_value == "3"


@pytest.mark.parametrize(
    "code,kind",
    [
        ("enum Color { case red }", "enum"),
        ("actor Counter {}", "actor"),
        ("extension String {}", "extension"),
        ("let answer = 42", "let"),
        ("typealias ID = String", "typealias"),
    ],
)
def test_unsupported_kinds_raise(code, kind):
    with pytest.raises(UnsupportedDeclarationKind) as exc_info:
        extract_first(code)
    assert isinstance(exc_info.value, ValueError)
    assert exc_info.value.kind == kind
    assert kind in str(exc_info.value)


def test_parse_errors_become_value_errors():
    with pytest.raises(ValueError) as exc_info:
        SwiftAdapter().parse_to_ast("protocol P {")
    assert "Swift syntax error" in str(exc_info.value)


def test_extract_all_collects_failures_per_declaration():
    good = DeclNode(kind="protocol", name="Good", start_line=1, start_column=1, end_line=1)
    broken = DeclNode(kind="func", name="broken", start_line=2, start_column=1, end_line=2, parameters=("x",))
    fine = DeclNode(kind="struct", name="Fine", start_line=3, start_column=1, end_line=3)
    tree = SwiftSyntaxTree(source="", declarations=(good, broken, fine))

    elements, errors = SwiftAdapter().extract_all(tree, "Sample.swift")
    assert [e.name for _, e in elements] == ["Good", "Fine"]
    assert len(errors) == 1
    assert errors[0]["declaration"] == "broken"
    assert errors[0]["file"] == "Sample.swift"
    assert errors[0]["line"] == 2


def test_unnamed_parameter_keeps_the_declaration():
    element = extract_first("protocol Handler { func handle(_: Int, _: String) }")
    params = element.methods[0].parameters
    assert [p.binding_name for p in params] == ["arg0", "arg1"]
    assert [p.call_label for p in params] == [None, None]
