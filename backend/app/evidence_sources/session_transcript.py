# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  部署会话记录 - 从部署时记录的交互式会话中提取对话轮次
  Session Transcript - Extracts the conversational turns of the interactive session
  recorded with a deployment. Tool calls and tool results are dropped.
"""

import json
from typing import Any, List, Optional

from app.config import settings
from app.evidence_sources.base import AskContext, EvidenceSource
from app.services.evidence_ledger import EvidenceDraft
from app.storage.interfaces import TranscriptStore
from app.utils.logger import get_logger
from app.utils.redaction import redact
from app.utils.text import normalize_newlines

logger = get_logger(__name__)

CONVERSATIONAL_TYPES = ("user", "assistant")


def _turn_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return " ".join(
            block.get("text", "")
            for block in content
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
        )
    return ""


def parse_transcript(
    raw: str,
    turn_cap: Optional[int] = None,
    turn_chars: Optional[int] = None,
    excerpt_chars: Optional[int] = None,
) -> Optional[str]:
    """
    解析会话记录为摘录

    Parse line-delimited transcript records into an excerpt of the last
    ``turn_cap`` text turns, each rendered ``[role]: text``, redacted and
    capped. Malformed lines are skipped. Returns None when no turn survives.

    Args:
        raw: 原始 JSONL 文本 / Raw JSONL text
        turn_cap: 保留的最后轮次数 / Number of trailing turns kept
        turn_chars: 单轮截断长度 / Per-turn cap
        excerpt_chars: 摘录总长度上限 / Cap on the joined excerpt

    Returns:
        摘录或 None / Excerpt or None
    """
    turn_cap = turn_cap or settings.transcript_turn_cap
    turn_chars = turn_chars or settings.transcript_turn_chars
    excerpt_chars = excerpt_chars or settings.transcript_excerpt_chars

    turns: List[str] = []
    skipped = 0
    for line in normalize_newlines(raw).split("\n"):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            skipped += 1
            continue
        if not isinstance(record, dict) or record.get("type") not in CONVERSATIONAL_TYPES:
            continue
        message = record.get("message")
        if not isinstance(message, dict):
            continue
        text = _turn_text(message.get("content"))
        if text.strip():
            turns.append(f"[{record['type']}]: {redact(text)[:turn_chars]}")

    if skipped:
        logger.debug("Skipped %s malformed transcript lines", skipped)
    if not turns:
        return None
    return "\n\n".join(turns[-turn_cap:])[:excerpt_chars]


class SessionTranscriptSource(EvidenceSource):
    name = "deploy_session"
    evidence_type = "session_transcript"

    def __init__(
        self,
        transcripts: TranscriptStore,
        timeout: Optional[float] = None,
        turn_cap: Optional[int] = None,
        turn_chars: Optional[int] = None,
        excerpt_chars: Optional[int] = None,
    ):
        super().__init__(timeout)
        self.transcripts = transcripts
        self.turn_cap = turn_cap or settings.transcript_turn_cap
        self.turn_chars = turn_chars or settings.transcript_turn_chars
        self.excerpt_chars = excerpt_chars or settings.transcript_excerpt_chars

    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        target = context.target
        if not target.has_session_transcript:
            return []

        raw = await self.transcripts.get(context.project.id, target.id)
        if raw is None:
            return [self.gap(f"Session transcript recorded for deployment {target.id} is unavailable.")]

        excerpt = parse_transcript(raw, self.turn_cap, self.turn_chars, self.excerpt_chars)
        if not excerpt:
            return [self.gap(f"Session transcript for deployment {target.id} has no conversational turns.")]

        context.transcript_excerpt = excerpt
        return [
            EvidenceDraft(
                type="session_transcript",
                source=self.name,
                summary=f"Deploy session context: {excerpt[:200]}",
                relation="supports",
                meta={"deployment_id": target.id},
            )
        ]
