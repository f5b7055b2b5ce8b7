# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  证据源抽象基类 - 统一的 gather(context) 接口、请求上下文与实时检查预算
  Evidence Source Base - The single-method gather(context) interface, the per-request
  context adapters read and record into, and the live-check budget.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from app.config import settings
from app.schemas.ask import EvidenceType
from app.schemas.deployment import (
    CodeHit,
    Deployment,
    IndexStatus,
    Project,
    Resource,
    SymbolHit,
)
from app.services.deployment_resolver import DeploymentResolution
from app.services.evidence_ledger import EvidenceDraft


class LiveCheckBudget:
    """
    实时检查预算 / Per-request cap on outbound live calls

    ``try_acquire`` never awaits, so concurrent adapters on one event loop
    cannot both take the last unit.
    """

    def __init__(self, limit: int):
        self.limit = limit
        self.used = 0

    def try_acquire(self) -> bool:
        if self.used >= self.limit:
            return False
        self.used += 1
        return True

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)


@dataclass
class ProbeResult:
    status: int
    duration_ms: int
    body: str


@dataclass
class AskContext:
    """
    单次提问的上下文 / State for one ask request

    Inputs are set by the coordinator before fan-out. The fields below the
    marker are typed outputs that stage-one sources record for stage-two
    sources and the answer rules.
    """

    project: Project
    question: str
    live: Deployment
    deployments: List[Deployment]
    resolution: DeploymentResolution
    endpoint: Optional[str] = None
    method: str = "GET"
    history_error: Optional[str] = None
    budget: LiveCheckBudget = field(default_factory=lambda: LiveCheckBudget(settings.live_check_budget))

    # -- recorded by sources --
    resources: Optional[List[Resource]] = None
    index_status: Optional[IndexStatus] = None
    probe: Optional[ProbeResult] = None
    missing_table: Optional[str] = None
    table_missing_confirmed: bool = False
    route_matches: List[SymbolHit] = field(default_factory=list)
    code_hits: List[CodeHit] = field(default_factory=list)
    transcript_excerpt: Optional[str] = None

    @property
    def target(self) -> Deployment:
        return self.resolution.target

    @property
    def index_ready(self) -> bool:
        return self.index_status is not None and self.index_status.status == "ready"


class EvidenceSource(ABC):
    """
    证据源抽象基类 / Abstract base class for evidence sources

    Sources return drafts and may raise; the coordinator applies the timeout
    and turns a raised error into the draft built by ``failure_draft``.

    Attributes:
        name (str): 证据来源标识 / Value written to Evidence.source.
        evidence_type (str): 失败时的证据类型 / Evidence type used for failure gaps.
        timeout (float): 单次采集超时（秒） / Per-gather timeout in seconds.
    """

    name: str = "source"
    evidence_type: EvidenceType = "log_event"

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or settings.source_timeout_s

    @abstractmethod
    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        """
        采集证据 / Collect evidence for one request

        Returns an empty list when the source does not apply to the request.
        """
        pass

    def failure_draft(self, context: AskContext, message: str) -> EvidenceDraft:
        return self.gap(f"{self.name} failed: {message}")

    def gap(self, summary: str, meta: Optional[dict] = None) -> EvidenceDraft:
        return EvidenceDraft(
            type=self.evidence_type,
            source=self.name,
            summary=summary,
            relation="gap",
            meta=meta,
        )
