"""
Resource inventory source: counts the project's active provisioned resources by type.
"""

from collections import Counter
from typing import List, Optional

from app.evidence_sources.base import AskContext, EvidenceSource
from app.services.evidence_ledger import EvidenceDraft
from app.storage.interfaces import ResourceRegistry


class ResourceInventorySource(EvidenceSource):
    name = "resources"
    evidence_type = "env_snapshot"

    def __init__(self, resources: ResourceRegistry, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.resources = resources

    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        resources = await self.resources.list_active(context.project.id)
        context.resources = resources

        counts = Counter(r.resource_type for r in resources)
        summary = f"Project has {len(resources)} active resources."
        if counts:
            breakdown = ", ".join(f"{kind}: {count}" for kind, count in sorted(counts.items()))
            summary = f"Project has {len(resources)} active resources ({breakdown})."

        return [
            EvidenceDraft(
                type="env_snapshot",
                source=self.name,
                summary=summary,
                relation="supports",
                meta={"resource_counts": dict(sorted(counts.items()))},
            )
        ]
