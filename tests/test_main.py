import os
import sys

from fastapi.testclient import TestClient  # type: ignore

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mockgen.main import app

client = TestClient(app)

CODE = """// @Spy
protocol Logger {
    func log(_ message: String)
}

// @Stub
actor Worker {}
"""


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_parse_returns_element_graph():
    resp = client.post("/parse", json={"code": CODE, "filename": "Logger.swift"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["language"] == "swift"
    ids = {n["id"] for n in body["cir"]["nodes"]}
    assert "type:Logger" in ids
    assert body["parse_errors"] == []


def test_generate_returns_mocks_and_errors():
    resp = client.post("/mocks/generate", json={"code": CODE, "filename": "Logger.swift", "use_result": False})
    assert resp.status_code == 200
    body = resp.json()
    assert body["file"] == "Logger.swift"
    assert [m["file_name"] for m in body["mocks"]] == ["LoggerSpy.swift"]
    assert body["mocks"][0]["kind"] == "Spy"
    assert body["mocks"][0]["line"] == 2
    assert "logReceivedArguments.append(message)" in body["mocks"][0]["source"]
    assert len(body["errors"]) == 1
    assert body["errors"][0]["declaration"] == "Worker"


def test_generate_with_module_adds_testable_import():
    resp = client.post("/mocks/generate", json={"code": CODE, "module": "Core", "use_result": False})
    assert "@testable import Core" in resp.json()["mocks"][0]["source"]


def test_syntax_errors_are_bad_requests():
    for path in ("/parse", "/mocks/generate"):
        resp = client.post(path, json={"code": "protocol P {"})
        assert resp.status_code == 400
        assert "Swift syntax error" in resp.json()["detail"]


def test_project_endpoint():
    resp = client.post(
        "/mocks/project",
        json={
            "files": [
                {"filename": "Logger.swift", "code": CODE},
                {"filename": "Bad.swift", "code": "struct S {"},
            ],
            "use_result": False,
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [f["file"] for f in body["files"]] == ["Logger.swift", "Bad.swift"]
    assert len(body["files"][0]["mocks"]) == 1
    assert len(body["errors"]) == 2
    assert body["errors"][1]["file"] == "Bad.swift"


def test_run_endpoint_writes_mocks(tmp_path):
    sources = tmp_path / "Sources"
    sources.mkdir()
    (sources / "Logger.swift").write_text(
        "// @Spy\nprotocol Logger {\n    func log(_ message: String)\n}\n",
        encoding="utf-8",
    )
    out = tmp_path / "Mocks"

    resp = client.post(
        "/mocks/run",
        json={"input_path": str(sources), "output_dir": str(out), "module": "App"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["files"] == 1
    assert body["module"] == "App"
    assert body["errors"] == []
    assert body["written"] == [str(out / "LoggerSpy.swift")]

    written = (out / "LoggerSpy.swift").read_text(encoding="utf-8")
    assert "@testable import App" in written
    assert "class LoggerSpy: Logger" in written


def test_run_endpoint_rejects_missing_input(tmp_path):
    resp = client.post(
        "/mocks/run",
        json={"input_path": str(tmp_path / "nope"), "output_dir": str(tmp_path / "out")},
    )
    assert resp.status_code == 400
    assert "Invalid input path" in resp.json()["detail"]
