import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mockgen.adapters.swift_adapter import SwiftAdapter
from mockgen.cir.model import MethodElement, ParameterElement
from mockgen.generators.spy import SpyStrategy, recorded_arguments

adapter = SwiftAdapter()


def element_for(code):
    tree = adapter.parse_to_ast(code)
    return adapter.extract(tree.declarations[0])


STORE = """protocol Store {
    func save(_ value: String)
    func load(key: String, fallback: Int) async throws -> [String]
    var name: String { get set }
}
"""


def test_spy_fields_per_member():
    source = SpyStrategy().generate(element_for(STORE))
    assert source.startswith("class StoreSpy: Store {\n")
    for line in [
        "    private(set) var saveCallCount = 0\n",
        "    private(set) var saveCalled = false\n",
        "    private(set) var saveReceivedArguments: [String] = []\n",
        "    private(set) var loadReceivedArguments: [(key: String, fallback: Int)] = []\n",
        "    var loadReturnValue: [String] = []\n",
        "    var loadThrowError: Error?\n",
        "    var name: String = \"\"\n",
    ]:
        assert line in source
    assert "saveReturnValue" not in source
    assert "saveThrowError" not in source


def test_spy_method_bodies_record_in_call_order():
    source = SpyStrategy().generate(element_for(STORE))
    assert (
        "    func save(_ value: String) {\n"
        "        saveCallCount += 1\n"
        "        saveCalled = true\n"
        "        saveReceivedArguments.append(value)\n"
        "    }\n"
    ) in source
    assert (
        "    func load(key: String, fallback: Int) async throws -> [String] {\n"
        "        loadCallCount += 1\n"
        "        loadCalled = true\n"
        "        loadReceivedArguments.append((key: key, fallback: fallback))\n"
        "        if let error = loadThrowError { throw error }\n"
        "        return loadReturnValue\n"
        "    }\n"
    ) in source


def test_reset_restores_every_field():
    source = SpyStrategy().generate(element_for(STORE))
    assert (
        "    func reset() {\n"
        "        saveCallCount = 0\n"
        "        saveCalled = false\n"
        "        saveReceivedArguments = []\n"
        "        loadCallCount = 0\n"
        "        loadCalled = false\n"
        "        loadReceivedArguments = []\n"
        "        loadReturnValue = []\n"
        "        loadThrowError = nil\n"
        "    }\n"
    ) in source


def test_verification_helpers():
    source = SpyStrategy().generate(element_for(STORE))
    assert "    func verifySaveCalled() -> Bool {\n        return saveCalled\n    }\n" in source
    assert "    func verifySaveCallCount(_ expected: Int) -> Bool {\n        return saveCallCount == expected\n    }\n" in source
    assert (
        "    func verifySaveCalledWith(_ value: String) -> Bool {\n"
        "        return saveReceivedArguments.contains { $0 == value }\n"
        "    }\n"
    ) in source
    assert (
        "    func verifyLoadCalledWith(key: String, fallback: Int) -> Bool {\n"
        "        return loadReceivedArguments.contains { $0.key == key && $0.fallback == fallback }\n"
        "    }\n"
    ) in source


def test_result_mode_replaces_return_and_error_fields():
    source = SpyStrategy(use_result=True).generate(element_for(STORE))
    assert "    var loadReturnValue: Result<[String], Error> = .success([])\n" in source
    assert "loadThrowError" not in source
    assert "        return try loadReturnValue.get()\n" in source
    assert "        loadReturnValue = .success([])\n" in source


def test_closures_and_generics_are_not_compared():
    element = element_for("""protocol Loader {
    func load(id: Int, completion: @escaping (Data) -> Void)
    func each(_ body: (Int) -> Void)
    func decode<T: Decodable>(_ value: T) -> T
}
""")
    source = SpyStrategy().generate(element)
    assert "private(set) var loadReceivedArguments: [(id: Int, completion: (Data) -> Void)] = []" in source
    assert "return loadReceivedArguments.contains { $0.id == id }" in source

    # non-escaping closure is never stored
    assert "private(set) var eachReceivedArguments: [()] = []" in source
    assert "eachReceivedArguments.append(())" in source

    assert "private(set) var decodeReceivedArguments: [Any] = []" in source
    assert "var decodeReturnValue: Any? = nil" in source
    assert "return decodeReturnValue as! T" in source
    assert "func verifyDecodeCalledWith() -> Bool {\n        return !decodeReceivedArguments.isEmpty\n    }" in source


def test_recorded_arguments_variadic_and_opaque():
    method = MethodElement(
        name="log",
        parameters=(
            ParameterElement("items", "Int", is_variadic=True),
            ParameterElement("sink", "some Sink"),
        ),
    )
    recorded = recorded_arguments(method)
    assert [(r.stored_type, r.comparable) for r in recorded] == [("[Int]", True), ("any Sink", False)]


def test_static_members_use_type_qualified_reset():
    element = element_for("""protocol Factory {
    static func make() -> Int
}
""")
    source = SpyStrategy().generate(element)
    assert "    private(set) static var makeCallCount = 0\n" in source
    assert "    static var makeReturnValue: Int = 0\n" in source
    assert "        FactorySpy.makeCallCount = 0\n" in source
    assert "    static func verifyMakeCalled() -> Bool {\n" in source


def test_struct_is_spied_with_a_final_class():
    element = element_for("""struct Tracker: Equatable {
    mutating func track(event: String) {}
}
""")
    source = SpyStrategy().generate(element)
    assert source.startswith("final class TrackerSpy {\n")
    assert "    func track(event: String) {\n" in source
    assert "mutating" not in source


def test_subclass_spy_overrides():
    element = element_for("""open class Session {
    open func start(id: Int) -> Bool { true }
}
""")
    source = SpyStrategy().generate(element)
    assert source.startswith("public class SessionSpy: Session {\n")
    assert "    open override func start(id: Int) -> Bool {\n" in source
    assert "    public func reset() {\n" in source


def test_function_spy_wraps_a_class():
    element = element_for("func track(event: String, count: Int) {}")
    source = SpyStrategy().generate(element)
    assert source.startswith("class TrackSpy {\n")
    assert "    private(set) var trackReceivedArguments: [(event: String, count: Int)] = []\n" in source
    assert "    init() {}\n" in source
    assert "    func track(event: String, count: Int) {\n" in source
    assert "    func verifyTrackCalledWith(event: String, count: Int) -> Bool {\n" in source


def test_result_mode_erases_method_generic_returns():
    element = element_for("""protocol Api {
    func load<T: Decodable>(_ id: Int) async throws -> T
}
""")
    source = SpyStrategy(use_result=True).generate(element)
    assert "    var loadReturnValue: Result<Any, Error> = .success(())\n" in source
    assert "        return try loadReturnValue.get() as! T\n" in source
    assert "        loadReturnValue = .success(())\n" in source
    assert "Result<T, Error>" not in source


def test_source_reset_is_tracked_and_spy_reset_is_renamed():
    element = element_for("""protocol Session {
    func reset()
    func start()
}
""")
    source = SpyStrategy().generate(element)
    assert source.count("func reset()") == 1
    assert "    func reset() {\n        resetCallCount += 1\n" in source
    assert "    func resetSpy() {\n" in source
    assert "        resetCallCount = 0\n" in source
    assert "        startCallCount = 0\n" in source


def test_reset_with_arguments_keeps_the_spy_reset_name():
    element = element_for("""protocol Cache {
    func reset(key: String)
}
""")
    source = SpyStrategy().generate(element)
    assert "    func reset() {\n" in source
    assert "resetSpy" not in source


def test_sendable_sources_give_unchecked_sendable_spies():
    protocol = element_for("protocol Clock: Sendable { func now() -> Date }")
    assert SpyStrategy().generate(protocol).startswith("final class ClockSpy: Clock, @unchecked Sendable {\n")

    base = element_for("""class Engine: Sendable {
    func start() {}
}
""")
    assert SpyStrategy().generate(base).startswith("final class EngineSpy: Engine, @unchecked Sendable {\n")

    point = element_for("""struct Point: Equatable, Sendable {
    var x: Double
}
""")
    assert SpyStrategy().generate(point).startswith("final class PointSpy: @unchecked Sendable {\n")

    plain = element_for("protocol Clock { func now() -> Date }")
    assert "Sendable" not in SpyStrategy().generate(plain)
