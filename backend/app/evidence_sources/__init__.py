"""
Evidence Sources / 证据源
Adapters that each gather one kind of evidence for an ask request
每个适配器为一次提问采集一类证据
"""

from .base import AskContext, EvidenceSource, LiveCheckBudget, ProbeResult
from .deployment_history import DeploymentHistorySource
from .resource_inventory import ResourceInventorySource
from .index_freshness import IndexFreshnessSource
from .endpoint_probe import EndpointProbeSource, project_base_url
from .schema_verifier import SchemaVerifierSource
from .route_symbols import RouteSymbolSource
from .code_search import CodeSearchSource
from .session_transcript import SessionTranscriptSource, parse_transcript

__all__ = [
    "AskContext",
    "EvidenceSource",
    "LiveCheckBudget",
    "ProbeResult",
    "DeploymentHistorySource",
    "ResourceInventorySource",
    "IndexFreshnessSource",
    "EndpointProbeSource",
    "project_base_url",
    "SchemaVerifierSource",
    "RouteSymbolSource",
    "CodeSearchSource",
    "SessionTranscriptSource",
    "parse_transcript",
]
