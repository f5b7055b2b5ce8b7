# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  会话记录存储 - 读取部署时录制的交互式会话记录（JSONL）
  Transcript Storage - Reads the interactive session transcript recorded with a deployment.
"""

from typing import Optional

from app.storage.base import BaseStorage

TRANSCRIPT_FILENAME = "session-transcript.jsonl"


class TranscriptStorage(BaseStorage):
    """Reads ``projects/{id}/deployments/{deployment_id}/session-transcript.jsonl``."""

    async def get(self, project_id: str, deployment_id: str) -> Optional[str]:
        path = self.get_deployment_path(project_id, deployment_id) / TRANSCRIPT_FILENAME
        if not path.exists():
            return None
        return await self.read_text(path)
