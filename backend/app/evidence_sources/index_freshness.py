"""
Index freshness source: reports whether the latest code index is usable for the live deployment.
"""

from typing import List, Optional

from app.evidence_sources.base import AskContext, EvidenceSource
from app.services.evidence_ledger import EvidenceDraft
from app.storage.interfaces import CodeIndexStore


class IndexFreshnessSource(EvidenceSource):
    name = "code_index_latest"
    evidence_type = "index_status"

    def __init__(self, code_index: CodeIndexStore, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.code_index = code_index

    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        status = await self.code_index.get_status(context.project.id)
        context.index_status = status
        live_id = context.live.id

        if status is None:
            return [self.gap("No latest code index found yet.")]

        if status.status != "ready":
            draft = self.gap(
                f"Latest code index status is {status.status}.",
                meta={"deployment_id": status.deployment_id},
            )
            draft.timestamp = status.indexed_at
            return [draft]

        if status.deployment_id != live_id:
            draft = self.gap(
                f"Latest code index is stale (indexed deployment {status.deployment_id}, latest live {live_id}).",
                meta={"indexed_deployment_id": status.deployment_id, "latest_deployment_id": live_id},
            )
            draft.timestamp = status.indexed_at
            return [draft]

        return [
            EvidenceDraft(
                type="index_status",
                source=self.name,
                summary=f"Latest code index is ready for deployment {live_id}.",
                relation="supports",
                meta={
                    "deployment_id": status.deployment_id,
                    "file_count": status.file_count,
                    "symbol_count": status.symbol_count,
                    "chunk_count": status.chunk_count,
                    "last_duration_ms": status.last_duration_ms,
                },
                timestamp=status.indexed_at,
            )
        ]
