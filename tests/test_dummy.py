import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mockgen.adapters.swift_adapter import SwiftAdapter
from mockgen.generators.defaults import DUMMY_FAILURE
from mockgen.generators.dummy import DUMMY_INIT_COMMENT, DummyStrategy

adapter = SwiftAdapter()


def element_for(code):
    tree = adapter.parse_to_ast(code)
    return adapter.extract(tree.declarations[0])


def test_protocol_dummy():
    element = element_for("""protocol Renderer {
    var theme: Theme { get }
    var title: String { get set }
    var palette: Palette { get set }
    func count() -> Int
    func make() -> Widget
    func draw()
}
""")
    assert DummyStrategy().generate(element) == (
        "class RendererDummy: Renderer {\n"
        f"    var theme: Theme {{ {DUMMY_FAILURE} }}\n"
        "    var title: String = \"\"\n"
        "    var palette: Palette {\n"
        f"        get {{ {DUMMY_FAILURE} }}\n"
        "        set { }\n"
        "    }\n"
        "\n"
        "    init() {\n"
        f"        {DUMMY_INIT_COMMENT}\n"
        "    }\n"
        "\n"
        "    func count() -> Int {\n"
        "        return 0\n"
        "    }\n"
        "\n"
        "    func make() -> Widget {\n"
        f"        {DUMMY_FAILURE}\n"
        "    }\n"
        "\n"
        "    func draw() {}\n"
        "}\n"
    )


def test_class_dummy_initializers_carry_the_marker_comment():
    element = element_for("""class Engine {
    init(power: Int) {}
}
""")
    source = DummyStrategy().generate(element)
    assert (
        "    override init(power: Int) {\n"
        f"        {DUMMY_INIT_COMMENT}\n"
        "        super.init(power: power)\n"
        "    }\n"
    ) in source


def test_class_dummy_without_initializers():
    source = DummyStrategy().generate(element_for("class Engine {}"))
    assert source == (
        "class EngineDummy: Engine {\n"
        "    override init() {\n"
        f"        {DUMMY_INIT_COMMENT}\n"
        "        super.init()\n"
        "    }\n"
        "}\n"
    )


def test_dummy_ignores_result_mode():
    element = element_for("""protocol Api {
    func names() async throws -> [String]
}
""")
    assert DummyStrategy(use_result=True).generate(element) == DummyStrategy().generate(element)
    assert "ReturnValue" not in DummyStrategy(use_result=True).generate(element)


def test_function_dummy():
    element = element_for("func makeWidget(size: Int) -> Widget { Widget() }")
    assert DummyStrategy().generate(element) == (
        "func makeWidgetDummy(size: Int) -> Widget {\n"
        f"    {DUMMY_FAILURE}\n"
        "}\n"
    )


def test_composites_holding_a_custom_type_fail_on_use():
    element = element_for("""protocol Repo {
    var latest: Result<Widget, Error> { get }
    var cached: (Widget, Int) { get set }
    func pair() -> (Widget, Int)
    func loader() -> () -> Widget
}
""")
    source = DummyStrategy().generate(element)

    assert f"    var latest: Result<Widget, Error> {{ {DUMMY_FAILURE} }}\n" in source
    assert (
        "    var cached: (Widget, Int) {\n"
        f"        get {{ {DUMMY_FAILURE} }}\n"
        "        set { }\n"
        "    }\n"
    ) in source
    assert f"    func pair() -> (Widget, Int) {{\n        {DUMMY_FAILURE}\n    }}\n" in source
    assert f"        return {{ {DUMMY_FAILURE} }}\n" in source
    assert ".success(fatalError" not in source
    assert "(fatalError" not in source


def test_sendable_sources_give_unchecked_sendable_dummies():
    protocol = element_for("protocol Clock: Sendable { func now() -> Date }")
    assert DummyStrategy().generate(protocol).startswith("final class ClockDummy: Clock, @unchecked Sendable {\n")

    base = element_for("class Engine: Sendable {}")
    assert DummyStrategy().generate(base).startswith("final class EngineDummy: Engine, @unchecked Sendable {\n")

    final = element_for("""final class Clock: Sendable {
    func tick() -> Int { 0 }
}
""")
    assert DummyStrategy().generate(final).startswith("final class ClockDummy: @unchecked Sendable {\n")
