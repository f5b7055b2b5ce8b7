"""Tests for source parsers, chunking and the index build lifecycle."""
import io
import zipfile

import pytest

from app.schemas.deployment import Deployment
from app.services.code_indexer import (
    CHUNK_LINES,
    CodeIndexer,
    JsTsParser,
    PARSER_VERSION,
    PythonParser,
    build_chunks,
    parse_archive,
    select_parser,
)
from app.storage.code_index import CodeIndexStorage

WORKER_TS = """import { Hono } from 'hono'

export default {
  async fetch(request, env) {
    const url = new URL(request.url)
    if (url.pathname === '/api/todos') {
      const rows = await env.DB.prepare('SELECT * FROM todos').all()
      return Response.json(rows)
    }
    return new Response('not found', { status: 404 })
  }
}

app.get('/api/health', (c) => c.text('ok'))
function helper(x) { return x }
class TodoStore {}
"""

SERVICE_PY = """import os
from fastapi import APIRouter

router = APIRouter()
TOKEN = os.environ.get("API_TOKEN")


@router.get("/api/items")
async def list_items():
    return []


@app.route("/legacy")
def legacy():
    return os.getenv("LEGACY_MODE")


class ItemStore:
    pass
"""


def make_zip(files):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def signatures(parsed, kind):
    return [s.signature for s in parsed.symbols if s.kind == kind]


class TestJsTsParser:
    def test_routes_and_pathname_checks(self):
        parsed = JsTsParser().parse(WORKER_TS)
        assert signatures(parsed, "route") == ["ROUTE /api/todos", "GET /api/health"]

    def test_declarations_env_and_sql(self):
        parsed = JsTsParser().parse(WORKER_TS)
        names = {(s.kind, s.symbol) for s in parsed.symbols}
        assert ("function", "helper") in names
        assert ("class", "TodoStore") in names
        assert ("env_binding", "DB") in names
        assert any(s.kind == "sql_ref" and "SELECT" in s.symbol for s in parsed.symbols)
        assert any(s.kind == "export" for s in parsed.symbols)

    def test_route_line_numbers(self):
        parsed = JsTsParser().parse(WORKER_TS)
        route = next(s for s in parsed.symbols if s.signature == "GET /api/health")
        assert route.line_start == 14


class TestPythonParser:
    def test_decorator_routes(self):
        parsed = PythonParser().parse(SERVICE_PY)
        assert signatures(parsed, "route") == ["GET /api/items", "ALL /legacy"]

    def test_defs_classes_env(self):
        parsed = PythonParser().parse(SERVICE_PY)
        names = {(s.kind, s.symbol) for s in parsed.symbols}
        assert ("function", "list_items") in names
        assert ("function", "legacy") in names
        assert ("class", "ItemStore") in names
        assert ("env_binding", "API_TOKEN") in names
        assert ("env_binding", "LEGACY_MODE") in names


def test_select_parser_by_extension():
    assert isinstance(select_parser("src/index.TSX"), JsTsParser)
    assert isinstance(select_parser("app/main.py"), PythonParser)
    assert select_parser("README.md") is None


def test_build_chunks_windows_and_skips_blank():
    content = "\n".join(f"line {i}" for i in range(CHUNK_LINES)) + "\n" * (CHUNK_LINES + 1) + "tail"
    chunks = build_chunks(content)
    assert [c.chunk_index for c in chunks] == [0, 1]
    assert chunks[0].line_start == 1
    assert chunks[0].line_end == CHUNK_LINES
    assert chunks[1].content == "tail"
    assert chunks[1].line_start == 2 * CHUNK_LINES + 1


def test_parse_archive_sets_paths_and_chunks_unparsed_files():
    archive = make_zip({"src/index.ts": WORKER_TS, "README.md": "# Todo", "logo.png": "binary"})
    file_count, symbols, chunks = parse_archive(archive)
    assert file_count == 2
    assert {s.path for s in symbols} == {"src/index.ts"}
    assert {c.path for c in chunks} == {"src/index.ts", "README.md"}


# --- lifecycle ---

def write_snapshot(tmp_path, files):
    path = tmp_path / "artifacts" / "dep_1" / "source.zip"
    path.parent.mkdir(parents=True)
    path.write_bytes(make_zip(files))


@pytest.mark.asyncio
async def test_index_deployment_ready(tmp_path):
    write_snapshot(tmp_path, {"src/index.ts": WORKER_TS, "service.py": SERVICE_PY})
    storage = CodeIndexStorage(data_dir=str(tmp_path))
    deployment = Deployment(id="dep_1", status="live", created_at="2026-01-01", artifact_key="artifacts/dep_1")

    status = await CodeIndexer(storage).index_deployment("proj_1", deployment)

    assert status.status == "ready"
    assert status.deployment_id == "dep_1"
    assert status.file_count == 2
    assert status.parser_version == PARSER_VERSION
    assert await storage.get_status("proj_1") == status

    routes = await storage.search_route_symbols("proj_1", "/api/todos", limit=3)
    assert [r.path for r in routes] == ["src/index.ts"]
    hits = await storage.search("proj_1", "/api/items", limit=3)
    assert hits[0].path == "service.py"


@pytest.mark.asyncio
async def test_index_deployment_without_snapshot_fails_softly(tmp_path):
    storage = CodeIndexStorage(data_dir=str(tmp_path))
    deployment = Deployment(id="dep_1", status="live", created_at="2026-01-01", artifact_key="artifacts/dep_1")

    status = await CodeIndexer(storage).index_deployment("proj_1", deployment)

    assert status.status == "failed"
    assert "source.zip" in status.error_message
    assert (await storage.get_status("proj_1")).status == "failed"


@pytest.mark.asyncio
async def test_index_deployment_without_artifact_key(tmp_path):
    storage = CodeIndexStorage(data_dir=str(tmp_path))
    deployment = Deployment(id="dep_1", status="live", created_at="2026-01-01")
    status = await CodeIndexer(storage).index_deployment("proj_1", deployment)
    assert status.status == "failed"
    assert status.error_message == "Deployment has no artifact key"
