from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from mockgen.cir.model import FunctionElement, MethodElement, MockKind, ParameterElement
from mockgen.generators.base import (
    MockShape,
    MockStrategy,
    mentions_any,
    returns_method_generic,
    tracking_keys,
    uses_result,
)
from mockgen.generators.defaults import is_void
from mockgen.generators.writer import SourceWriter
from mockgen.typetext import (
    capitalize_first,
    generic_names,
    is_balanced_wrapper,
    is_function_type,
    strip_type_attributes,
)


@dataclass(frozen=True)
class RecordedArgument:
    parameter: ParameterElement
    stored_type: str
    comparable: bool          # takes part in verify...CalledWith equality


def _is_closure(type_text: str) -> bool:
    t = type_text.strip()
    while t.endswith("?") or t.endswith("!"):
        t = t[:-1].rstrip()
    if is_balanced_wrapper(t, "(", ")"):
        t = t[1:-1].strip()
    return is_function_type(t)


def recorded_arguments(method) -> List[RecordedArgument]:
    """
    Which arguments a spy stores per call, and as what type.

    Non-escaping closures cannot outlive the call and are left out.
    Closures, existentials and method-generic types are stored but never
    compared.
    """
    generics = generic_names(method.generic_parameters)
    out: List[RecordedArgument] = []
    for p in method.parameters:
        raw = p.type
        t = strip_type_attributes(raw)
        closure = _is_closure(t)
        optional = t.endswith("?") or t.endswith("!")
        if closure and not optional and "@escaping" not in raw:
            continue
        if p.is_variadic:
            t = f"[{t}]"
        if t.startswith("some "):
            t = "any " + t[len("some "):]
        comparable = not closure
        if mentions_any(t, generics):
            t = "Any"
            comparable = False
        if t == "Any" or t.startswith("any ") or t == "AnyObject":
            comparable = False
        out.append(RecordedArgument(p, t, comparable))
    return out


def reset_name(methods) -> str:
    """`reset`, or `resetSpy` when the mocked type already has a parameterless reset()."""
    if any(m.name.strip("`") == "reset" and not m.parameters for m in methods):
        return "resetSpy"
    return "reset"


class SpyStrategy(MockStrategy):
    """
    Records every call: count, called flag, received arguments in call order.

    Per member `foo`:
      fooCallCount, fooCalled, fooReceivedArguments
      fooReturnValue            (non-void)
      fooThrowError             (throwing, default mode)
      fooReturnValue: Result<>  (Result-wrapped mode, replaces both above)

    plus reset() (resetSpy() when the source declares its own reset()) and
    verifyFooCalled / verifyFooCallCount / verifyFooCalledWith.
    Struct sources are spied with a final class so the recorded state is
    shared by every copy a test hands out.
    """

    kind = MockKind.SPY
    renders_struct_as_class = True

    # ---------------- field naming ----------------

    def _record_type(self, recorded: List[RecordedArgument]) -> str:
        if not recorded:
            return "()"
        if len(recorded) == 1:
            return recorded[0].stored_type
        inner = ", ".join(f"{r.parameter.binding_name}: {r.stored_type}" for r in recorded)
        return f"({inner})"

    def _record_value(self, recorded: List[RecordedArgument]) -> str:
        if not recorded:
            return "()"
        if len(recorded) == 1:
            return recorded[0].parameter.binding_name
        inner = ", ".join(f"{r.parameter.binding_name}: {r.parameter.binding_name}" for r in recorded)
        return f"({inner})"

    def _return_default(self, method) -> str:
        if uses_result(method, self.use_result):
            return self.result_default(method)
        if returns_method_generic(method):
            return "nil"
        return self.defaults.value_for(method.return_type)

    def _owner(self, method, shape: MockShape) -> str:
        """Qualifier used from instance context (reset) to reach the member's storage."""
        return f"{shape.mock_name}." if method.is_static else ""

    # ---------------- fields ----------------

    def render_fields(self, w: SourceWriter, shape: MockShape, methods, keys) -> None:
        for method, key in zip(methods, keys):
            self._render_member_fields(w, method, key, shape)
            w.blank()

    def _render_member_fields(self, w: SourceWriter, method, key: str, shape: MockShape) -> None:
        access = shape.type_access
        static = "static " if method.is_static else ""
        tracked = f"{access}private(set) {static}var"
        settable = f"{access}{static}var"

        w.line(f"{tracked} {key}CallCount = 0")
        w.line(f"{tracked} {key}Called = false")
        record_type = self._record_type(recorded_arguments(method))
        w.line(f"{tracked} {key}ReceivedArguments: [{record_type}] = []")

        if uses_result(method, self.use_result):
            w.line(self.result_field(method, key, f"{access}{static}"))
            return
        if not is_void(method.return_type):
            if returns_method_generic(method):
                w.line(f"{settable} {key}ReturnValue: Any? = nil")
            else:
                w.line(f"{settable} {key}ReturnValue: {method.return_type} = {self._return_default(method)}")
        if method.is_throwing:
            w.line(f"{settable} {key}ThrowError: Error?")

    # ---------------- method bodies ----------------

    def method_body(self, method, key: str, shape: Optional[MockShape]) -> List[str]:
        recorded = recorded_arguments(method)
        body = [
            f"{key}CallCount += 1",
            f"{key}Called = true",
            f"{key}ReceivedArguments.append({self._record_value(recorded)})",
        ]
        if uses_result(method, self.use_result):
            body.append(self.result_return(method, key))
            return body
        if method.is_throwing:
            body.append(f"if let error = {key}ThrowError {{ throw error }}")
        if not is_void(method.return_type):
            if returns_method_generic(method):
                body.append(f"return {key}ReturnValue as! {method.return_type}")
            else:
                body.append(f"return {key}ReturnValue")
        return body

    # ---------------- reset & verification ----------------

    def render_extras(self, w: SourceWriter, shape: MockShape, methods, keys) -> None:
        self._render_reset(w, shape, methods, keys)
        w.blank()
        for method, key in zip(methods, keys):
            self._render_verification(w, method, key, shape)
            w.blank()

    def _render_reset(self, w: SourceWriter, shape: MockShape, methods, keys) -> None:
        lines: List[str] = []
        for method, key in zip(methods, keys):
            owner = self._owner(method, shape)
            lines.append(f"{owner}{key}CallCount = 0")
            lines.append(f"{owner}{key}Called = false")
            lines.append(f"{owner}{key}ReceivedArguments = []")
            if uses_result(method, self.use_result) or not is_void(method.return_type):
                lines.append(f"{owner}{key}ReturnValue = {self._return_default(method)}")
            if method.is_throwing and not uses_result(method, self.use_result):
                lines.append(f"{owner}{key}ThrowError = nil")
        w.member(f"{shape.type_access}func {reset_name(methods)}()", lines)

    def _render_verification(self, w: SourceWriter, method, key: str, shape: MockShape) -> None:
        prefix = shape.type_access + ("static " if method.is_static else "")
        name = capitalize_first(key)

        w.member(f"{prefix}func verify{name}Called() -> Bool", [f"return {key}Called"])
        w.blank()
        w.member(
            f"{prefix}func verify{name}CallCount(_ expected: Int) -> Bool",
            [f"return {key}CallCount == expected"],
        )
        w.blank()
        if not method.parameters:
            return

        recorded = recorded_arguments(method)
        comparable = [r for r in recorded if r.comparable]
        if not comparable:
            w.member(
                f"{prefix}func verify{name}CalledWith() -> Bool",
                [f"return !{key}ReceivedArguments.isEmpty"],
            )
            return

        params = []
        for r in comparable:
            p = r.parameter
            names = p.binding_name if p.external_label is None else f"{p.external_label} {p.binding_name}"
            params.append(f"{names}: {r.stored_type}")
        if len(recorded) == 1:
            condition = f"$0 == {comparable[0].parameter.binding_name}"
        else:
            condition = " && ".join(
                f"$0.{r.parameter.binding_name} == {r.parameter.binding_name}" for r in comparable
            )
        w.member(
            f"{prefix}func verify{name}CalledWith({', '.join(params)}) -> Bool",
            [f"return {key}ReceivedArguments.contains {{ {condition} }}"],
        )

    # ---------------- standalone functions ----------------

    def render_function(self, w: SourceWriter, fn: FunctionElement) -> None:
        access = self._type_access(fn.access_level)
        name = f"{capitalize_first(fn.name)}{self.kind.value}"
        shape = MockShape(
            mock_name=name,
            header=f"{access}class {name}",
            inherits_source=False,
            is_struct=False,
            is_protocol=False,
            type_access=access,
        )
        method = MethodElement(
            name=fn.name,
            parameters=fn.parameters,
            return_type=fn.return_type,
            access_level=fn.access_level,
            is_async=fn.is_async,
            is_throwing=fn.is_throwing,
            generic_parameters=fn.generic_parameters,
        )
        methods = [method]
        keys = tracking_keys(methods)
        with w.block(shape.header):
            self.render_fields(w, shape, methods, keys)
            w.line(f"{access}init() {{}}")
            w.blank()
            self.render_method(w, method, keys[0], shape)
            w.blank()
            self.render_extras(w, shape, methods, keys)
