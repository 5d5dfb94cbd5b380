from __future__ import annotations

from typing import List, Optional

from mockgen.cir.model import FunctionElement, MockKind
from mockgen.generators.base import MockShape, MockStrategy, uses_result
from mockgen.generators.writer import SourceWriter


class StubStrategy(MockStrategy):
    """
    Every member returns the synthesized default for its return type.

    With use_result, async + throwing + non-void members instead read a
    `<member>ReturnValue: Result<T, Error>` field, so a test can swap in a
    failure. Everything else renders exactly as without the toggle.
    """

    kind = MockKind.STUB

    def render_fields(self, w: SourceWriter, shape: MockShape, methods, keys) -> None:
        for method, key in zip(methods, keys):
            if uses_result(method, self.use_result):
                w.line(self.result_field(method, key, self.field_prefix(method, shape)))

    def method_body(self, method, key: str, shape: Optional[MockShape]) -> List[str]:
        if uses_result(method, self.use_result):
            return [self.result_return(method, key)]
        return super().method_body(method, key, shape)

    def function_prelude(self, w: SourceWriter, fn: FunctionElement, key: str, access: str) -> None:
        if uses_result(fn, self.use_result):
            w.line(self.result_field(fn, key, access))
            w.blank()
