"""
Code search: relevant chunks from the code index, falling back to the raw source snapshot.
"""

from typing import List, Optional

from app.config import settings
from app.evidence_sources.base import AskContext, EvidenceSource
from app.services.evidence_ledger import EvidenceDraft
from app.storage.interfaces import CodeIndexStore


class CodeSearchSource(EvidenceSource):
    name = "code_search"
    evidence_type = "code_chunk"

    def __init__(self, code_index: CodeIndexStore, limit: Optional[int] = None, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.code_index = code_index
        self.limit = limit or settings.code_hit_limit

    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        query = context.endpoint or context.question
        drafts: List[EvidenceDraft] = []

        hits = []
        if context.index_ready:
            hits = await self.code_index.search(context.project.id, query, self.limit)

        if not hits:
            hits = await self.code_index.raw_source_fallback_search(context.target, query, self.limit)
            if hits:
                drafts.append(
                    EvidenceDraft(
                        type="index_status",
                        source="source_fallback",
                        summary="Used source fallback search because latest code index had no hits.",
                        relation="gap",
                    )
                )

        hits = hits[: self.limit]
        context.code_hits = hits
        if not hits:
            return [self.gap("No relevant code chunks were found for this query.")]

        for hit in hits:
            drafts.append(
                EvidenceDraft(
                    type="code_chunk",
                    source=self.name,
                    summary=f"Possible relevant code in {hit.path}: {hit.snippet}",
                    relation="supports",
                    meta={
                        "path": hit.path,
                        "line_start": hit.line_start,
                        "line_end": hit.line_end,
                        "snippet": hit.snippet,
                    },
                )
            )
        return drafts
