# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  代码索引存储 - 项目最新代码索引的状态、符号和分块，以及源码快照回退检索
  Code Index Storage - Status, symbols and chunks of a project's latest code index,
  plus raw-source fallback search over a deployment snapshot.

目录结构 / Layout:
  projects/{project_id}/code_index/status.json
  projects/{project_id}/code_index/symbols.jsonl
  projects/{project_id}/code_index/chunks.jsonl
  {artifact_key}/source.zip
"""

import zipfile
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from app.exceptions import CollaboratorError
from app.schemas.deployment import CodeChunk, CodeHit, CodeSymbol, Deployment, IndexStatus, SymbolHit
from app.storage.base import BaseStorage
from app.utils.path_safety import validate_path_within
from app.utils.source_archive import SNAPSHOT_FILENAME, iter_text_files
from app.utils.text import tokenize_query


class CodeIndexStorage(BaseStorage):
    """
    代码索引存储层 / Code index storage

    Chunks are scored by how many query tokens they contain; ties are broken
    by path then chunk index so results are stable.
    """

    def get_index_dir(self, project_id: str) -> Path:
        return self.get_project_path(project_id) / "code_index"

    def get_snapshot_path(self, deployment: Deployment) -> Optional[Path]:
        """Return the source.zip path for a deployment, or None without an artifact key."""
        if not deployment.artifact_key:
            return None
        path = self.data_dir / deployment.artifact_key / SNAPSHOT_FILENAME
        return validate_path_within(path, self.data_dir)

    # ========== 读取 / Reads ==========

    async def get_status(self, project_id: str) -> Optional[IndexStatus]:
        path = self.get_index_dir(project_id) / "status.json"
        if not path.exists():
            return None
        data = await self.read_json(path)
        try:
            return IndexStatus(**data)
        except (TypeError, ValidationError) as exc:
            raise CollaboratorError(f"Invalid code index status: {exc}") from exc

    async def read_symbols(self, project_id: str) -> List[CodeSymbol]:
        rows = await self.read_jsonl(self.get_index_dir(project_id) / "symbols.jsonl")
        return [CodeSymbol(**row) for row in rows]

    async def read_chunks(self, project_id: str) -> List[CodeChunk]:
        rows = await self.read_jsonl(self.get_index_dir(project_id) / "chunks.jsonl")
        return [CodeChunk(**row) for row in rows]

    async def search(self, project_id: str, query: str, limit: int) -> List[CodeHit]:
        """
        检索代码分块

        Return up to ``limit`` chunks containing at least one query token,
        best-scoring first.
        """
        tokens = tokenize_query(query)
        if not tokens:
            return []

        scored = []
        for chunk in await self.read_chunks(project_id):
            lower = chunk.content.lower()
            score = sum(1 for token in tokens if token in lower)
            if score:
                scored.append((-score, chunk.path, chunk.chunk_index, chunk))
        scored.sort(key=lambda row: row[:3])

        return [
            CodeHit(
                path=chunk.path,
                chunk_index=chunk.chunk_index,
                line_start=chunk.line_start,
                line_end=chunk.line_end,
                snippet=chunk.content,
            )
            for _, _, _, chunk in scored[:limit]
        ]

    async def search_route_symbols(self, project_id: str, endpoint: str, limit: int) -> List[SymbolHit]:
        """Route symbols whose signature contains the endpoint (case-insensitive)."""
        needle = endpoint.lower()
        matches = [
            s for s in await self.read_symbols(project_id)
            if s.kind == "route" and needle in (s.signature or "").lower()
        ]
        matches.sort(key=lambda s: (s.path, s.line_start or 0))
        return [
            SymbolHit(
                path=s.path,
                symbol=s.symbol,
                signature=s.signature,
                line_start=s.line_start,
                line_end=s.line_end,
            )
            for s in matches[:limit]
        ]

    async def raw_source_fallback_search(self, deployment: Deployment, query: str, limit: int) -> List[CodeHit]:
        """
        源码快照回退检索

        Scan the deployment's source snapshot for files containing any query
        token. Returns [] when the deployment has no snapshot.
        """
        tokens = tokenize_query(query)
        path = self.get_snapshot_path(deployment)
        if not tokens or path is None or not path.exists():
            return []

        archive = await self.read_bytes(path)
        hits: List[CodeHit] = []
        try:
            for file_path, text in iter_text_files(archive):
                lower = text.lower()
                if not any(token in lower for token in tokens):
                    continue
                hits.append(CodeHit(path=file_path, snippet=text))
                if len(hits) >= limit:
                    break
        except zipfile.BadZipFile as exc:
            raise CollaboratorError(f"Source snapshot for {deployment.id} is not a valid zip") from exc
        return hits

    # ========== 写入 / Writes (code indexer only) ==========

    async def write_status(self, status: IndexStatus) -> None:
        path = self.get_index_dir(status.project_id) / "status.json"
        await self.write_json(path, status.model_dump(mode="json"))

    async def replace_index(self, project_id: str, symbols: List[CodeSymbol], chunks: List[CodeChunk]) -> None:
        """Replace the project's symbol and chunk snapshot."""
        index_dir = self.get_index_dir(project_id)
        await self.write_jsonl(index_dir / "symbols.jsonl", [s.model_dump(mode="json") for s in symbols])
        await self.write_jsonl(index_dir / "chunks.jsonl", [c.model_dump(mode="json") for c in chunks])
