"""
Deployment history source: the resolved deployment plus recent context deployments.
"""

from typing import List, Optional

from app.evidence_sources.base import AskContext, EvidenceSource
from app.services.deployment_resolver import DeploymentResolver
from app.services.evidence_ledger import EvidenceDraft


class DeploymentHistorySource(EvidenceSource):
    name = "deployments"
    evidence_type = "deployment_event"

    def __init__(self, resolver: DeploymentResolver, timeout: Optional[float] = None):
        super().__init__(timeout)
        self.resolver = resolver

    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        drafts = []
        if context.history_error:
            drafts.append(self.gap(f"Deployment history unavailable: {context.history_error}"))
        drafts.extend(self.resolver.describe(context.resolution))
        return drafts
