"""
DefaultValueSynthesizer

Type name (raw Swift text) -> literal expression that type-checks as that
type. Classification is purely by surface syntax, in this order:

  1. primitive table          Int -> 0, Double -> 0.0, Bool -> false, String -> "" ...
  2. [T] / [K: V]             -> [] / [:]
  3. Array<..> Set<..> Dictionary<..>
  4. T? / T! / Optional<T>    -> nil
  5. function types           -> no-op closure of matching arity
  6. tuples                   -> tuple of element defaults
     T.Type, Result<T, E>     -> T.self, .success(<default of T>)
  7. anything else            -> T()            (Stub / Spy)
                                 fatalError(..) (Dummy)

The function is total: step 7 always answers.
"""
from __future__ import annotations

import re

from mockgen.typetext import (
    find_top_level,
    function_type_parts,
    is_balanced_wrapper,
    is_function_type,
    split_top_level,
    strip_type_attributes,
)

DUMMY_FAILURE = 'fatalError("Dummy implementation - not meant to be called")'

VOID_TYPES = ("Void", "()")

_INTEGER_TYPES = (
    "Int", "Int8", "Int16", "Int32", "Int64",
    "UInt", "UInt8", "UInt16", "UInt32", "UInt64",
    "NSInteger", "NSUInteger",
)
_FLOAT_TYPES = ("Double", "Float", "Float16", "Float32", "Float64", "Float80", "CGFloat", "TimeInterval")

PRIMITIVE_DEFAULTS = {
    **{t: "0" for t in _INTEGER_TYPES},
    **{t: "0.0" for t in _FLOAT_TYPES},
    "Bool": "false",
    "String": '""',
    "Substring": '""',
    "Character": '" "',
    "Void": "()",
    "()": "()",
    "Any": "()",
}

_COLLECTION_PREFIXES = (
    ("Array<", "[]"),
    ("ContiguousArray<", "[]"),
    ("Set<", "Set()"),
    ("Dictionary<", "[:]"),
)

_EXISTENTIAL_RE = re.compile(r"^(?:some|any)\s+")


def is_void(type_name: str | None) -> bool:
    if type_name is None:
        return True
    return type_name.strip() in VOID_TYPES or not type_name.strip()


class DefaultValueSynthesizer:
    """Stub / Spy variant: custom types default to their parameterless initializer."""

    def fallback(self, type_name: str) -> str:
        return f"{type_name}()"

    def value_for(self, type_name: str) -> str:
        t = strip_type_attributes(type_name or "").strip()
        if not t:
            return "()"

        if t in PRIMITIVE_DEFAULTS:
            return PRIMITIVE_DEFAULTS[t]

        if is_balanced_wrapper(t, "[", "]"):
            inner = t[1:-1]
            return "[:]" if find_top_level(inner, ":") >= 0 else "[]"

        for prefix, literal in _COLLECTION_PREFIXES:
            if t.startswith(prefix) and t.endswith(">"):
                return literal

        function_type = is_function_type(t)
        if not function_type and (t.endswith("?") or t.endswith("!") or t.startswith("Optional<")):
            return "nil"

        if function_type:
            return self.closure_for(t)

        if is_balanced_wrapper(t, "(", ")"):
            return self.tuple_for(t)

        stripped = _EXISTENTIAL_RE.sub("", t)
        if stripped != t:
            return self.value_for(stripped)

        if t.endswith(".Type"):
            return f"{t[:-len('.Type')]}.self"

        if t.startswith("Result<") and t.endswith(">"):
            args = split_top_level(t[len("Result<"):-1])
            if args:
                return f".success({self.value_for(args[0])})"

        return self.fallback(t)

    def closure_for(self, type_name: str) -> str:
        parts = function_type_parts(type_name)
        if parts is None:
            return self.fallback(type_name)
        params, return_type = parts
        if params == ["Void"]:
            params = []
        body = "" if is_void(return_type) else self.value_for(return_type)
        if not params:
            return f"{{ {body} }}" if body else "{ }"
        placeholders = ", ".join("_" for _ in params)
        if body:
            return f"{{ {placeholders} in {body} }}"
        return f"{{ {placeholders} in }}"

    def tuple_for(self, type_name: str) -> str:
        elements = split_top_level(type_name[1:-1])
        if not elements:
            return "()"
        if len(elements) == 1:
            return self.value_for(elements[0])
        rendered = []
        for element in elements:
            colon = find_top_level(element, ":")
            if colon >= 0:
                label = element[:colon].strip()
                rendered.append(f"{label}: {self.value_for(element[colon + 1:])}")
            else:
                rendered.append(self.value_for(element))
        return "(" + ", ".join(rendered) + ")"


class DummyDefaultValueSynthesizer(DefaultValueSynthesizer):
    """
    Dummy variant: custom types abort when the value is actually produced.

    A composite that would evaluate the abort while being built
    (`(Widget, Int)`, `Result<Widget, Error>`) collapses to the bare abort
    call. Closures keep it inside their body, where it only runs on call.
    """

    def fallback(self, type_name: str) -> str:
        return DUMMY_FAILURE

    def value_for(self, type_name: str) -> str:
        value = super().value_for(type_name)
        if value != DUMMY_FAILURE and fails_eagerly(value):
            return DUMMY_FAILURE
        return value


def fails_eagerly(value: str) -> bool:
    """True when the Dummy abort sits outside every closure body of `value`."""
    start = value.find(DUMMY_FAILURE)
    while start >= 0:
        if value[:start].count("{") == value[:start].count("}"):
            return True
        start = value.find(DUMMY_FAILURE, start + 1)
    return False


def return_statement(value: str) -> str:
    """`return 0`, or the bare abort call for the Dummy marker."""
    if value.startswith("fatalError("):
        return value
    return f"return {value}"


_default = DefaultValueSynthesizer()
_dummy = DummyDefaultValueSynthesizer()


def default_value(type_name: str) -> str:
    return _default.value_for(type_name)


def dummy_value(type_name: str) -> str:
    return _dummy.value_for(type_name)
