from __future__ import annotations

from typing import Iterable, List, Tuple

from mockgen.cir.model import ParameterElement
from mockgen.typetext import collapse_whitespace, find_top_level

# Ownership keyword that may prefix the type
_INOUT_WORDS = ("inout",)


class ParameterModelBuilder:
    """
    Raw Swift parameter text -> ParameterElement.

      "name: String"                 -> binding=name, external=None
      "for key: String"              -> external=for, binding=key
      "_ value: Int = 0"             -> external="_", default "0"
      "values: Int..."               -> variadic, type "Int"
      "buffer: inout [UInt8]"        -> is_inout, type "[UInt8]"
      "handler: @escaping () -> Void" keeps the attribute in the type
      "_: Int"  (3rd parameter)      -> external="_", binding=arg2
    """

    def build(self, raw: str, index: int = 0) -> ParameterElement:
        text = collapse_whitespace(raw)
        if not text:
            raise ValueError("Empty parameter declaration")

        default_value = None
        eq = find_top_level(text, "=")
        if eq >= 0:
            default_value = text[eq + 1:].strip() or None
            text = text[:eq].strip()

        colon = find_top_level(text, ":")
        if colon < 0:
            raise ValueError(f"Parameter without type annotation: '{raw.strip()}'")

        names = text[:colon].split()
        type_text = text[colon + 1:].strip()
        # @ViewBuilder content: () -> V  -> attribute travels with the type
        attrs = [n for n in names if n.startswith("@")]
        if attrs:
            names = [n for n in names if not n.startswith("@")]
            type_text = " ".join(attrs + [type_text])
        if not names or not type_text:
            raise ValueError(f"Malformed parameter: '{raw.strip()}'")
        if len(names) > 2:
            raise ValueError(f"Too many parameter names: '{raw.strip()}'")

        if len(names) == 1:
            external = None
            binding = names[0]
        else:
            external, binding = names

        # `_: Int` / `label _: Int` bind nothing; the mock still needs a name
        if binding == "_":
            if external is None:
                external = "_"
            binding = f"arg{index}"

        type_text, is_inout = self._strip_inout(type_text)

        is_variadic = False
        if type_text.endswith("..."):
            is_variadic = True
            type_text = type_text[:-3].rstrip()

        return ParameterElement(
            binding_name=binding,
            type=type_text,
            external_label=external,
            default_value=default_value,
            is_inout=is_inout,
            is_variadic=is_variadic,
        )

    def build_all(self, raws: Iterable[str]) -> Tuple[ParameterElement, ...]:
        params: List[ParameterElement] = [self.build(r, i) for i, r in enumerate(raws)]
        return tuple(params)

    def _strip_inout(self, type_text: str) -> Tuple[str, bool]:
        for word in _INOUT_WORDS:
            if type_text.startswith(word + " "):
                return type_text[len(word) + 1:].lstrip(), True
        return type_text, False
