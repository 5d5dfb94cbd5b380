from __future__ import annotations

from typing import Optional

from mockgen.cir.model import MockKind, PropertyElement
from mockgen.generators.base import MockShape, MockStrategy
from mockgen.generators.defaults import DUMMY_FAILURE, DummyDefaultValueSynthesizer
from mockgen.generators.writer import SourceWriter

DUMMY_INIT_COMMENT = "// Dummy initializer - intentionally does nothing"


class DummyStrategy(MockStrategy):
    """
    Compiles and fills a parameter slot, nothing more.

    Primitive, collection, optional and closure returns still get their
    literal default; custom types abort with fatalError when reached.
    Result-wrapped mode does not apply.
    """

    kind = MockKind.DUMMY
    supports_result = False

    def make_defaults(self) -> DummyDefaultValueSynthesizer:
        return DummyDefaultValueSynthesizer()

    def initializer_comment(self) -> Optional[str]:
        return DUMMY_INIT_COMMENT

    def render_property(self, w: SourceWriter, prop: PropertyElement, shape: MockShape) -> None:
        value = self.defaults.value_for(prop.type)
        if value != DUMMY_FAILURE:
            super().render_property(w, prop, shape)
            return

        # a stored fatalError() would abort at init time; fail on read instead
        prefix = self.member_access(prop, shape)
        if prop.is_static:
            prefix += "static "
        header = f"{prefix}var {prop.name}: {prop.type}"
        if not prop.has_setter:
            w.line(f"{header} {{ {DUMMY_FAILURE} }}")
            return
        with w.block(header):
            w.line(f"get {{ {DUMMY_FAILURE} }}")
            w.line("set { }")
