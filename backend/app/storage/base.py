# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  存储基类 - 基于文件的异步读写（JSON / JSONL / 文本），原子写入
  Base Storage - Async file-based reads and writes (JSON / JSONL / text) with atomic writes.

目录结构 / Layout:
  {data_dir}/projects/{project_id}/...
  {data_dir}/databases/{database_ref}.sqlite3
"""

import json
import os
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles

from app.config import settings
from app.exceptions import CollaboratorError
from app.utils.path_safety import sanitize_id


class BaseStorage:
    """
    文件存储基类 / Base class for file-backed stores

    Attributes:
        data_dir (Path): 数据根目录 / Data root directory.
        encoding (str): 文本编码 / Text encoding.
    """

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = Path(data_dir or settings.data_dir)
        self.encoding = "utf-8"

    def get_project_path(self, project_id: str) -> Path:
        """Return the directory holding one project's data."""
        return self.data_dir / "projects" / sanitize_id(project_id)

    def get_deployment_path(self, project_id: str, deployment_id: str) -> Path:
        """Return the directory holding one deployment's artifacts."""
        return self.get_project_path(project_id) / "deployments" / sanitize_id(deployment_id)

    async def read_text(self, file_path: Path) -> str:
        """Read a text file. Raises FileNotFoundError when missing."""
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        async with aiofiles.open(file_path, "r", encoding=self.encoding) as f:
            return await f.read()

    async def read_bytes(self, file_path: Path) -> bytes:
        """Read a binary file. Raises FileNotFoundError when missing."""
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        async with aiofiles.open(file_path, "rb") as f:
            return await f.read()

    async def read_json(self, file_path: Path) -> Any:
        """
        读取 JSON 文件

        Read a JSON file. Missing files raise FileNotFoundError; malformed
        content raises CollaboratorError.
        """
        raw = await self.read_text(file_path)
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise CollaboratorError(f"Malformed JSON in {file_path.name}: {exc}") from exc

    async def read_jsonl(self, file_path: Path) -> List[Dict[str, Any]]:
        """Read a JSONL file, skipping blank lines. Missing file yields []."""
        if not file_path.exists():
            return []
        raw = await self.read_text(file_path)
        rows: List[Dict[str, Any]] = []
        for lineno, line in enumerate(raw.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                rows.append(json.loads(line))
            except ValueError as exc:
                raise CollaboratorError(f"Malformed JSONL in {file_path.name} line {lineno}: {exc}") from exc
        return rows

    async def write_text(self, file_path: Path, content: str) -> None:
        await self._atomic_write(file_path, content)

    async def write_json(self, file_path: Path, data: Any) -> None:
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        await self._atomic_write(file_path, payload)

    async def write_jsonl(self, file_path: Path, rows: List[Dict[str, Any]]) -> None:
        payload = "".join(json.dumps(row, ensure_ascii=False) + "\n" for row in rows)
        await self._atomic_write(file_path, payload)

    async def _atomic_write(self, file_path: Path, content: str) -> None:
        """
        原子写入：先写临时文件再替换

        Write to a sibling temp file, then ``os.replace`` it into place.
        """
        file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = file_path.with_name(f".{file_path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding=self.encoding) as f:
                await f.write(content)
            os.replace(tmp_path, file_path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
