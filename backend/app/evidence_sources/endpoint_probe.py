# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  实时端点探测 - 向项目公网地址发起一次 HTTP 请求
  Live Endpoint Probe - Issues one HTTP request against the project's public URL.
  This is the only call in the engine that can have side effects on the target project.
"""

import time
from typing import List, Optional

import httpx

from app.config import settings
from app.evidence_sources.base import AskContext, EvidenceSource, ProbeResult
from app.schemas.deployment import Project
from app.services.evidence_ledger import EvidenceDraft
from app.utils.logger import get_logger

logger = get_logger(__name__)

def project_base_url(project: Project, public_domain: Optional[str] = None) -> str:
    """
    项目公网地址 / Public base URL of a project

    ``https://{owner}-{slug}.{domain}`` when the project has an owner,
    ``https://{slug}.{domain}`` otherwise. An explicit ``base_url`` wins.
    """
    if project.base_url:
        return project.base_url.rstrip("/")
    domain = public_domain or settings.public_domain
    host = f"{project.owner_username}-{project.slug}" if project.owner_username else project.slug
    return f"https://{host}.{domain}"


class EndpointProbeSource(EvidenceSource):
    """
    端点探测证据源 / Endpoint probe source

    Attributes:
        body_chars (int): 响应体截取长度 / Response body capture cap.
        transport: 可选 httpx 传输层，测试时注入 MockTransport / Optional httpx transport.
    """

    name = "live_endpoint_check"
    evidence_type = "endpoint_test"

    def __init__(
        self,
        timeout: Optional[float] = None,
        body_chars: Optional[int] = None,
        public_domain: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout or settings.probe_timeout_s)
        self.body_chars = settings.probe_body_chars if body_chars is None else body_chars
        self.public_domain = public_domain or settings.public_domain
        self.transport = transport

    async def gather(self, context: AskContext) -> List[EvidenceDraft]:
        endpoint = context.endpoint
        if not endpoint:
            return []

        method = context.method
        if not context.budget.try_acquire():
            return [self.gap(f"Skipped live check of {method} {endpoint}: live-check budget exhausted.")]

        result = await self.probe(context.project, endpoint, method)
        context.probe = result

        relation = "supports" if result.status >= 500 else "conflicts"
        return [
            EvidenceDraft(
                type="endpoint_test",
                source=self.name,
                summary=f"{method} {endpoint} returned {result.status} in {result.duration_ms}ms.",
                relation=relation,
                meta={
                    "status": result.status,
                    "duration_ms": result.duration_ms,
                    "body_excerpt": result.body,
                },
            )
        ]

    async def probe(self, project: Project, endpoint: str, method: str) -> ProbeResult:
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        url = f"{project_base_url(project, self.public_domain)}{path}"

        started = time.perf_counter()
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            response = await client.request(method, url)
        duration_ms = int((time.perf_counter() - started) * 1000)

        logger.debug("Probe %s %s -> %s (%sms)", method, url, response.status_code, duration_ms)
        return ProbeResult(
            status=response.status_code,
            duration_ms=duration_ms,
            body=response.text[: self.body_chars],
        )

    def failure_draft(self, context: AskContext, message: str) -> EvidenceDraft:
        return self.gap(f"Failed to test {context.method} {context.endpoint}: {message}")
