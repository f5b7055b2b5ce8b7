"""
Route symbol matcher: finds route definitions in the code index for the probed endpoint.
"""

from typing import List, Optional

from app.config import settings
from app.evidence_sources.base import AskContext, EvidenceSource
from app.services.evidence_ledger import EvidenceDraft
from app.storage.interfaces import CodeIndexStore


class RouteSymbolSource(EvidenceSource):
    name = "code_index_latest"
    evidence_type = "code_symbol"

    def __init__(self, code_index: CodeIndexStore, limit: Optional[int] = None, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.code_index = code_index
        self.limit = limit or settings.code_hit_limit

    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        endpoint = context.endpoint
        if not endpoint or not context.index_ready:
            return []

        matches = await self.code_index.search_route_symbols(context.project.id, endpoint, self.limit)
        matches = matches[: self.limit]
        context.route_matches = matches
        if not matches:
            return [self.gap(f"No route symbol match found for endpoint {endpoint}.")]

        return [
            EvidenceDraft(
                type="code_symbol",
                source=self.name,
                summary=f"Route match in {m.path}: {m.signature or m.symbol}",
                relation="supports",
                meta={"path": m.path, "line_start": m.line_start, "line_end": m.line_end},
            )
            for m in matches
        ]
