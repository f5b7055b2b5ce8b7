# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  代码索引构建 - 从部署源码快照中提取符号并切分代码块，替换项目的最新索引
  Code Indexer - Extracts symbols and line-bounded chunks from a deployment's source
  snapshot and replaces the project's latest code index.

  Parsers are line-oriented regex scanners; one per language family.
"""

import asyncio
import re
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from app.exceptions import CollaboratorError
from app.schemas.deployment import CodeChunk, CodeSymbol, Deployment, IndexStatus, ParsedSource
from app.storage.code_index import CodeIndexStorage
from app.utils.logger import get_logger
from app.utils.redaction import redact
from app.utils.source_archive import JS_TS_EXTENSIONS, PYTHON_EXTENSIONS, iter_text_files
from app.utils.text import normalize_newlines, utc_now_iso

logger = get_logger(__name__)

CHUNK_LINES = 70
MAX_CHUNK_CHARS = 5000
MAX_SYMBOL_CHARS = 200
MAX_SIGNATURE_CHARS = 300

_SQL_RE = re.compile(r"\b(SELECT|INSERT|UPDATE|DELETE|CREATE TABLE|ALTER TABLE|DROP TABLE)\b", re.IGNORECASE)


def build_chunks(content: str) -> List[CodeChunk]:
    """
    按行切分代码块 / Split content into CHUNK_LINES-line chunks

    Blank chunks are skipped and do not consume a chunk index.
    """
    lines = normalize_newlines(content).split("\n")
    chunks: List[CodeChunk] = []
    for start in range(0, len(lines), CHUNK_LINES):
        window = lines[start:start + CHUNK_LINES]
        text = "\n".join(window).strip()
        if not text:
            continue
        chunks.append(
            CodeChunk(
                path="",
                chunk_index=len(chunks),
                line_start=start + 1,
                line_end=start + len(window),
                content=text[:MAX_CHUNK_CHARS],
            )
        )
    return chunks


def _symbol(kind: str, symbol: str, line_no: int, signature: Optional[str]) -> CodeSymbol:
    return CodeSymbol(
        path="",
        symbol=symbol[:MAX_SYMBOL_CHARS],
        kind=kind,
        line_start=line_no,
        line_end=line_no,
        signature=signature[:MAX_SIGNATURE_CHARS] if signature else None,
    )


class SourceParser(ABC):
    """
    源码解析器抽象基类 / Abstract base class for source parsers

    Attributes:
        id (str): 解析器标识 / Parser id.
        version (str): 解析器版本 / Parser version, recorded in the index status.
        extensions (tuple): 支持的扩展名 / Supported file extensions.
    """

    id: str = ""
    version: str = "v1"
    extensions: Tuple[str, ...] = ()

    def supports(self, path: str) -> bool:
        return path.lower().endswith(self.extensions)

    def parse(self, content: str) -> ParsedSource:
        symbols: List[CodeSymbol] = []
        for i, line in enumerate(normalize_newlines(content).split("\n")):
            symbols.extend(self.parse_line(line, i + 1))
        return ParsedSource(symbols=symbols, chunks=build_chunks(content))

    @abstractmethod
    def parse_line(self, line: str, line_no: int) -> List[CodeSymbol]:
        pass

    def sql_refs(self, line: str, line_no: int) -> List[CodeSymbol]:
        if not _SQL_RE.search(line):
            return []
        stripped = line.strip()
        return [_symbol("sql_ref", stripped[:120], line_no, stripped[:240])]


class JsTsParser(SourceParser):
    """JavaScript / TypeScript: express-style routes, pathname checks, declarations, env bindings."""

    id = "js_ts"
    extensions = JS_TS_EXTENSIONS

    ROUTE_RE = re.compile(r"\b(?:app|router)\.(get|post|put|patch|delete|all)\s*\(\s*[\"'`]([^\"'`]+)[\"'`]", re.IGNORECASE)
    PATHNAME_RE = re.compile(r"\bpathname\s*={2,3}\s*[\"'`]([^\"'`]+)[\"'`]", re.IGNORECASE)
    FUNCTION_RE = re.compile(r"\bfunction\s+([A-Za-z0-9_]+)\s*\(")
    CLASS_RE = re.compile(r"\bclass\s+([A-Za-z0-9_]+)")
    EXPORT_RE = re.compile(r"\bexport\b")
    ENV_RE = re.compile(r"\benv\.([A-Z_][A-Z0-9_]*)\b")

    def parse_line(self, line: str, line_no: int) -> List[CodeSymbol]:
        symbols: List[CodeSymbol] = []
        stripped = line.strip()

        route = self.ROUTE_RE.search(line)
        if route:
            signature = f"{route.group(1).upper()} {route.group(2)}"
            symbols.append(_symbol("route", signature, line_no, signature))

        pathname = self.PATHNAME_RE.search(line)
        if pathname:
            signature = f"ROUTE {pathname.group(1)}"
            symbols.append(_symbol("route", signature, line_no, signature))

        function = self.FUNCTION_RE.search(line)
        if function:
            symbols.append(_symbol("function", function.group(1), line_no, stripped[:240]))

        cls = self.CLASS_RE.search(line)
        if cls:
            symbols.append(_symbol("class", cls.group(1), line_no, stripped[:240]))

        if self.EXPORT_RE.search(line):
            symbols.append(_symbol("export", stripped[:120], line_no, stripped[:240]))

        for binding in self.ENV_RE.findall(line):
            symbols.append(_symbol("env_binding", binding, line_no, f"env.{binding}"))

        symbols.extend(self.sql_refs(line, line_no))
        return symbols


class PythonParser(SourceParser):
    """Python: decorator routes (FastAPI / Flask style), defs, classes, environment lookups."""

    id = "python"
    extensions = PYTHON_EXTENSIONS

    ROUTE_RE = re.compile(
        r"@\s*(?:app|router|bp|api)\.(get|post|put|patch|delete|route|api_route)\s*\(\s*[\"']([^\"']+)[\"']",
        re.IGNORECASE,
    )
    DEF_RE = re.compile(r"^\s*(?:async\s+)?def\s+([A-Za-z_][A-Za-z0-9_]*)\s*\(")
    CLASS_RE = re.compile(r"^\s*class\s+([A-Za-z_][A-Za-z0-9_]*)")
    ENV_RE = re.compile(r"os\.(?:environ(?:\.get)?\s*[\[(]|getenv\s*\()\s*[\"']([A-Z_][A-Z0-9_]*)[\"']")

    def parse_line(self, line: str, line_no: int) -> List[CodeSymbol]:
        symbols: List[CodeSymbol] = []
        stripped = line.strip()

        route = self.ROUTE_RE.search(line)
        if route:
            method = route.group(1).upper()
            if method in ("ROUTE", "API_ROUTE"):
                method = "ALL"
            signature = f"{method} {route.group(2)}"
            symbols.append(_symbol("route", signature, line_no, signature))

        definition = self.DEF_RE.match(line)
        if definition:
            symbols.append(_symbol("function", definition.group(1), line_no, stripped[:240]))

        cls = self.CLASS_RE.match(line)
        if cls:
            symbols.append(_symbol("class", cls.group(1), line_no, stripped[:240]))

        for binding in self.ENV_RE.findall(line):
            symbols.append(_symbol("env_binding", binding, line_no, f"os.environ[{binding!r}]"))

        symbols.extend(self.sql_refs(line, line_no))
        return symbols


PARSERS: List[SourceParser] = [JsTsParser(), PythonParser()]
PARSER_VERSION = ",".join(f"{p.id}:{p.version}" for p in PARSERS)


def select_parser(path: str) -> Optional[SourceParser]:
    for parser in PARSERS:
        if parser.supports(path):
            return parser
    return None


def parse_archive(archive: bytes) -> Tuple[int, List[CodeSymbol], List[CodeChunk]]:
    """
    解析源码压缩包 / Parse every supported file of a source archive

    Files without a parser (json, md) are chunked only. Symbols are
    deduplicated per file.

    Returns:
        (文件数, 符号, 代码块) / (file count, symbols, chunks)
    """
    file_count = 0
    symbols: List[CodeSymbol] = []
    chunks: List[CodeChunk] = []

    for path, text in iter_text_files(archive):
        file_count += 1
        parser = select_parser(path)
        parsed = parser.parse(text) if parser else ParsedSource(chunks=build_chunks(text))

        seen = set()
        for symbol in parsed.symbols:
            key = (symbol.kind, symbol.symbol, symbol.line_start, symbol.line_end, symbol.signature)
            if key in seen:
                continue
            seen.add(key)
            symbols.append(symbol.model_copy(update={"path": path}))

        chunks.extend(chunk.model_copy(update={"path": path}) for chunk in parsed.chunks)

    return file_count, symbols, chunks


class CodeIndexer:
    """
    代码索引构建器 / Code indexer

    Writes ``indexing`` first, then ``ready`` or ``failed``. A failure never
    raises to the caller; the failed status carries the redacted error.
    """

    def __init__(self, storage: CodeIndexStorage):
        self.storage = storage

    async def index_deployment(self, project_id: str, deployment: Deployment) -> IndexStatus:
        started = time.perf_counter()
        await self.storage.write_status(self._status(project_id, deployment, "indexing"))

        try:
            snapshot = self.storage.get_snapshot_path(deployment)
            if snapshot is None:
                raise CollaboratorError("Deployment has no artifact key")
            if not snapshot.exists():
                raise CollaboratorError("source.zip not found for deployment")

            archive = await self.storage.read_bytes(snapshot)
            file_count, symbols, chunks = await asyncio.to_thread(parse_archive, archive)
            await self.storage.replace_index(project_id, symbols, chunks)
        except Exception as exc:
            message = redact(str(exc) or type(exc).__name__)
            logger.error("Code index failed for %s/%s: %s", project_id, deployment.id, message)
            status = self._status(
                project_id,
                deployment,
                "failed",
                last_duration_ms=self._elapsed_ms(started),
                error_message=message,
            )
            await self.storage.write_status(status)
            return status

        status = self._status(
            project_id,
            deployment,
            "ready",
            file_count=file_count,
            symbol_count=len(symbols),
            chunk_count=len(chunks),
            last_duration_ms=self._elapsed_ms(started),
        )
        await self.storage.write_status(status)
        logger.info(
            "Indexed %s/%s: %s files, %s symbols, %s chunks",
            project_id,
            deployment.id,
            file_count,
            len(symbols),
            len(chunks),
        )
        return status

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)

    @staticmethod
    def _status(project_id: str, deployment: Deployment, status: str, **counts) -> IndexStatus:
        return IndexStatus(
            project_id=project_id,
            deployment_id=deployment.id,
            indexed_at=utc_now_iso(),
            parser_version=PARSER_VERSION,
            status=status,
            **counts,
        )
