from fastapi import FastAPI, HTTPException # type: ignore
from pydantic import BaseModel # type: ignore
from typing import Any, Dict, List

from mockgen import config
from mockgen import pipeline
from mockgen.pipeline import adapter, generate_for_source, generate_for_sources

app = FastAPI(title="Swift Mock Generator (annotated Swift -> Stub / Spy / Dummy)")


class ParseRequest(BaseModel):
    code: str
    filename: str | None = None


class GenerateRequest(BaseModel):
    code: str
    filename: str | None = None
    use_result: bool | None = None   # None -> MOCKGEN_USE_RESULT
    module: str | None = None        # adds @testable import <module>


class SourceFile(BaseModel):
    filename: str
    code: str


class ProjectRequest(BaseModel):
    files: List[SourceFile]
    use_result: bool | None = None
    module: str | None = None


class RunRequest(BaseModel):
    input_path: str
    output_dir: str
    clean: bool = False
    module: str | None = None        # None -> detected from Package.swift / .xcodeproj
    use_result: bool | None = None


@app.get("/health")
def health():
    return {"ok": True}


@app.post("/parse")
def parse(req: ParseRequest):
    try:
        graph = adapter.build_cir_graph_for_code(req.code, req.filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "language": adapter.language,
        "cir": graph.to_debug_json(),
        "parse_errors": graph.g.graph.get("parse_errors", []),
    }


@app.post("/mocks/generate")
def generate(req: GenerateRequest) -> Dict[str, Any]:
    try:
        report = generate_for_source(req.code, req.filename, req.use_result, req.module)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return report.to_dict()


@app.post("/mocks/project")
def generate_project(req: ProjectRequest) -> Dict[str, Any]:
    """
    Per-file results in input order. A file that fails to parse is reported
    in its own entry and in the flattened error list; the others still generate.
    """
    reports = generate_for_sources(
        [(f.filename, f.code) for f in req.files],
        use_result=req.use_result,
        module=req.module,
    )
    return {
        "files": [r.to_dict() for r in reports],
        "errors": [e for r in reports for e in r.errors],
    }


@app.post("/mocks/run")
def run(req: RunRequest) -> Dict[str, Any]:
    """Server-side paths: discover *.swift under input_path and write mocks to output_dir."""
    try:
        return pipeline.run(
            req.input_path,
            req.output_dir,
            use_result=req.use_result,
            module=req.module,
            clean=req.clean,
        )
    except (ValueError, OSError) as e:
        raise HTTPException(status_code=400, detail=str(e))


if __name__ == "__main__":
    import uvicorn # type: ignore

    uvicorn.run(app, host=config.SERVICE_HOST, port=config.SERVICE_PORT)
