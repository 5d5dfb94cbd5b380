import networkx as nx # type: ignore
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Dict

from mockgen.cir.model import (
    ClassElement,
    Element,
    FunctionElement,
    ProtocolElement,
    element_kind,
)
from mockgen.typetext import inheritance_names


def _flat(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_flat(v) for v in value]
    return value


class ElementGraph:
    """
    Typed multi-graph view over extracted Elements.
    Nodes: type, func, method, property, init, assoc, param
    Edges: HAS_METHOD, HAS_PROPERTY, HAS_INIT, HAS_ASSOCIATED_TYPE,
           PARAM_OF, INHERITS
    """
    def __init__(self) -> None:
        self.g = nx.MultiDiGraph()

    def add_node(self, node_id: str, kind: str, payload: Any) -> None:
        self.g.add_node(node_id, kind=kind, payload=payload)

    def add_edge(self, src: str, dst: str, etype: str) -> None:
        self.g.add_edge(src, dst, etype=etype)

    def _add_params(self, owner_id: str, params) -> None:
        for idx, p in enumerate(params):
            pid = f"{owner_id}#param:{idx}:{p.binding_name}"
            self.add_node(pid, "param", p)
            self.add_edge(pid, owner_id, "PARAM_OF")

    def add_element(self, element: Element, source_file: str | None = None) -> str:
        kind = element_kind(element)
        if isinstance(element, FunctionElement):
            fid = f"func:{element.name}"
            self.add_node(fid, "func", element)
            self.g.nodes[fid]["source_file"] = source_file
            self._add_params(fid, element.parameters)
            return fid

        tid = f"type:{element.name}"
        self.add_node(tid, "type", element)
        self.g.nodes[tid]["decl_kind"] = kind
        self.g.nodes[tid]["source_file"] = source_file

        for m_idx, m in enumerate(element.methods):
            mid = f"{tid}#method:{m_idx}:{m.name}"
            self.add_node(mid, "method", m)
            self.add_edge(tid, mid, "HAS_METHOD")
            self._add_params(mid, m.parameters)

        for p in element.properties:
            pid = f"{tid}#property:{p.name}"
            self.add_node(pid, "property", p)
            self.add_edge(tid, pid, "HAS_PROPERTY")

        if isinstance(element, ClassElement):
            for i_idx, init in enumerate(element.initializers):
                iid = f"{tid}#init:{i_idx}"
                self.add_node(iid, "init", init)
                self.add_edge(tid, iid, "HAS_INIT")
                self._add_params(iid, init.parameters)

        if isinstance(element, ProtocolElement):
            for a in element.associated_types:
                aid = f"{tid}#assoc:{a.name}"
                self.add_node(aid, "assoc", a)
                self.add_edge(tid, aid, "HAS_ASSOCIATED_TYPE")

        # inheritance targets may be external (Sendable, NSObject): placeholder nodes
        for parent in inheritance_names(element.inheritance):
            parent_id = f"type:{parent}"
            if parent_id not in self.g:
                self.add_node(parent_id, "type", {"name": parent, "external": True})
            self.add_edge(tid, parent_id, "INHERITS")
        return tid

    def to_debug_json(self) -> Dict[str, Any]:
        """
        Convert graph to JSON-like dict for debugging / API responses.
        Nested member tuples are summarized by the graph edges, so only
        scalar attributes are kept on each node.
        """
        nodes = []
        for node_id, data in self.g.nodes(data=True):
            payload = data.get("payload")
            attrs: Dict[str, Any] = {}
            if is_dataclass(payload):
                for f in fields(payload):
                    value = getattr(payload, f.name)
                    if isinstance(value, tuple) and value and is_dataclass(value[0]):
                        continue
                    attrs[f.name] = _flat(value)
            elif isinstance(payload, dict):
                attrs = dict(payload)
            for extra in ("decl_kind", "source_file"):
                if data.get(extra) is not None:
                    attrs[extra] = data[extra]
            nodes.append({
                "id": node_id,
                "kind": data.get("kind"),
                "attrs": attrs,
            })

        edges = []
        for src, dst, data in self.g.edges(data=True):
            edges.append({
                "src": src,
                "dst": dst,
                "type": data.get("etype"),
            })

        return {"nodes": nodes, "edges": edges}
