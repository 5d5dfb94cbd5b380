import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mockgen.adapters.swift_adapter import SwiftAdapter


def test_element_graph_nodes_and_edges():
    code = """protocol Cache: Sendable {
    associatedtype Key
    var size: Int { get }
    func get(key: Key) -> Data?
}

class Disk: Storage {
    init(path: String) {}
}

func purge(all: Bool) {}

enum Ignored { case a }
"""
    adapter = SwiftAdapter()
    graph = adapter.build_cir_graph_for_code(code, "Cache.swift")
    data = graph.to_debug_json()

    nodes = {n["id"]: n for n in data["nodes"]}
    edges = {(e["src"], e["dst"], e["type"]) for e in data["edges"]}

    cache = nodes["type:Cache"]
    assert cache["kind"] == "type"
    assert cache["attrs"]["decl_kind"] == "protocol"
    assert cache["attrs"]["source_file"] == "Cache.swift"
    assert cache["attrs"]["is_sendable"] is True
    assert cache["attrs"]["access_level"] == "internal"
    assert "methods" not in cache["attrs"]

    method_id = "type:Cache#method:0:get"
    assert ("type:Cache", method_id, "HAS_METHOD") in edges
    assert (f"{method_id}#param:0:key", method_id, "PARAM_OF") in edges
    assert ("type:Cache", "type:Cache#property:size", "HAS_PROPERTY") in edges
    assert ("type:Cache", "type:Cache#assoc:Key", "HAS_ASSOCIATED_TYPE") in edges
    assert ("type:Cache", "type:Sendable", "INHERITS") in edges
    assert nodes["type:Sendable"]["attrs"] == {"name": "Sendable", "external": True}

    assert nodes["type:Disk"]["attrs"]["decl_kind"] == "class"
    assert ("type:Disk", "type:Disk#init:0", "HAS_INIT") in edges
    assert ("type:Disk#init:0#param:0:path", "type:Disk#init:0", "PARAM_OF") in edges

    assert nodes["func:purge"]["kind"] == "func"
    assert ("func:purge#param:0:all", "func:purge", "PARAM_OF") in edges

    assert "type:Ignored" not in nodes
    assert graph.g.graph["parse_errors"] == []
