# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  SQL存储 - 检查项目 SQLite 数据库中表是否存在（只读）
  SQL Store - Read-only table-existence checks against a project's SQLite database.
"""

import asyncio
import sqlite3
from pathlib import Path

from app.exceptions import CollaboratorError
from app.storage.base import BaseStorage
from app.utils.path_safety import sanitize_id, validate_path_within


class SqliteSqlStore(BaseStorage):
    """
    项目数据库 / Project databases

    Each database reference maps to ``databases/{ref}.sqlite3``. The file is
    opened read-only so a check can never create or modify it.
    """

    def get_database_path(self, database_ref: str) -> Path:
        path = self.data_dir / "databases" / f"{sanitize_id(database_ref)}.sqlite3"
        return validate_path_within(path, self.data_dir)

    async def table_exists(self, database_ref: str, table_name: str) -> bool:
        path = self.get_database_path(database_ref)
        if not path.exists():
            raise CollaboratorError(f"Database {database_ref} not found")
        return await asyncio.to_thread(self._table_exists_sync, path.as_uri(), table_name)

    @staticmethod
    def _table_exists_sync(uri: str, table_name: str) -> bool:
        try:
            conn = sqlite3.connect(f"{uri}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise CollaboratorError(f"Cannot open database: {exc}") from exc
        try:
            row = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name = ?",
                (table_name,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise CollaboratorError(f"Table check failed: {exc}") from exc
        finally:
            conn.close()
        return row is not None
