# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  证据账本 - 只追加的有序证据集合，写入时分配ID、脱敏并截断
  Evidence Ledger - Ordered, append-only evidence collection. Inserts assign the
  next sequential id, redact the summary and every string in meta, and truncate.
  Truncation always follows redaction.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from app.config import settings
from app.schemas.ask import Evidence, EvidenceType, Relation
from app.utils.redaction import redact
from app.utils.text import utc_now_iso

# Display caps for meta text fields, applied after redaction
META_TEXT_CAPS: Dict[str, int] = {
    "body_excerpt": 240,
    "snippet": 280,
}


@dataclass
class EvidenceDraft:
    """
    证据草稿 / Unredacted evidence produced by an evidence source

    Drafts live only for the duration of a request; the ledger is the sole
    place they become Evidence.
    """

    type: EvidenceType
    source: str
    summary: str
    relation: Relation
    meta: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None


def _redact_value(value: Any) -> Any:
    if isinstance(value, str):
        return redact(value)
    if isinstance(value, dict):
        return {k: _redact_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact_value(v) for v in value]
    return value


def _prepare_meta(meta: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = _redact_value(meta)
    for key, cap in META_TEXT_CAPS.items():
        if isinstance(cleaned.get(key), str):
            cleaned[key] = cleaned[key][:cap]
    return cleaned


class EvidenceLedger:
    """
    证据账本 / Evidence ledger

    Inserts are serialized with an asyncio.Lock, so ids stay unique and
    strictly increasing even when sources write concurrently.

    Attributes:
        summary_chars (int): 摘要截断长度 / Summary truncation length.
    """

    def __init__(self, summary_chars: Optional[int] = None):
        self.summary_chars = summary_chars or settings.evidence_summary_chars
        self._items: List[Evidence] = []
        self._next_index = 1
        self._lock = asyncio.Lock()

    async def add(
        self,
        type: EvidenceType,
        source: str,
        summary: str,
        relation: Relation,
        meta: Optional[Dict[str, Any]] = None,
        timestamp: Optional[str] = None,
    ) -> Evidence:
        """
        追加一条证据

        Append one item. ``summary`` is the raw adapter text; it is redacted
        then truncated here and nowhere else.
        """
        async with self._lock:
            item = Evidence(
                id=f"ev_{self._next_index:03d}",
                type=type,
                source=source,
                summary=redact(summary)[: self.summary_chars],
                timestamp=timestamp or utc_now_iso(),
                relation=relation,
                meta=_prepare_meta(meta) if meta is not None else None,
            )
            self._items.append(item)
            self._next_index += 1
            return item

    async def extend(self, drafts: Iterable[EvidenceDraft]) -> None:
        """Append drafts in iteration order."""
        for draft in drafts:
            await self.add(
                draft.type,
                draft.source,
                draft.summary,
                draft.relation,
                meta=draft.meta,
                timestamp=draft.timestamp,
            )

    def values(self) -> List[Evidence]:
        return list(self._items)

    def has_gap(self) -> bool:
        return any(item.relation == "gap" for item in self._items)

    def __len__(self) -> int:
        return len(self._items)
