# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  问答协调器 - 解析目标部署、并发采集证据、计算基线答案并尝试生成式增强
  Ask Coordinator - Resolves the target deployment, fans out to the evidence sources,
  computes the heuristic baseline, then attempts the generative enhancement.

  Stage one (history, resources, index freshness, probe, transcript) and stage two
  (schema verifier, route symbols, code search) each run concurrently under one
  request deadline. Drafts are merged into the ledger in registration order.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

from app.config import Settings, settings as default_settings
from app.evidence_sources import (
    AskContext,
    CodeSearchSource,
    DeploymentHistorySource,
    EndpointProbeSource,
    EvidenceSource,
    IndexFreshnessSource,
    LiveCheckBudget,
    ResourceInventorySource,
    RouteSymbolSource,
    SchemaVerifierSource,
    SessionTranscriptSource,
)
from app.exceptions import CollaboratorError, QuestionValidationError
from app.llm_gateway.errors import classify_error
from app.schemas.ask import AskHints, AskResponse, EnhancedAnswer, Evidence
from app.schemas.deployment import Deployment
from app.services.answer_rules import AnswerFacts, match_rule
from app.services.deployment_resolver import DeploymentResolver
from app.services.evidence_ledger import EvidenceDraft, EvidenceLedger
from app.services.synthesizer import AnswerSynthesizer
from app.storage.interfaces import (
    CodeIndexStore,
    DeploymentRegistry,
    ProjectRegistry,
    ResourceRegistry,
    SqlStore,
    TranscriptStore,
)
from app.utils.logger import get_logger
from app.utils.redaction import redact
from app.utils.text import extract_endpoint

logger = get_logger(__name__)

NO_LIVE_DEPLOYMENT_ANSWER = "I can't answer this because there is no live deployment for this project yet."
REGISTRY_UNAVAILABLE_ANSWER = "I can't answer this right now because the deployment registry is unavailable."


class AskService:
    """
    问答协调器 / Ask coordinator

    Read-only over every collaborator. The endpoint probe is the only call
    that reaches the deployed project.

    Attributes:
        synthesizer (AnswerSynthesizer): 生成式增强器 / Optional enhancement.
        stage_one (list): 无依赖的证据源 / Sources with no data dependency.
        stage_two (list): 依赖第一阶段结果的证据源 / Sources that read stage-one output.
    """

    def __init__(
        self,
        projects: ProjectRegistry,
        deployments: DeploymentRegistry,
        resources: ResourceRegistry,
        code_index: CodeIndexStore,
        sql: SqlStore,
        transcripts: TranscriptStore,
        synthesizer: Optional[AnswerSynthesizer] = None,
        probe: Optional[EndpointProbeSource] = None,
        config: Optional[Settings] = None,
    ):
        self.settings = config or default_settings
        self.projects = projects
        self.deployments = deployments
        self.synthesizer = synthesizer or AnswerSynthesizer()
        self.resolver = DeploymentResolver(context_limit=self.settings.context_deployment_limit)

        limit = self.settings.code_hit_limit
        timeout = self.settings.source_timeout_s
        history = DeploymentHistorySource(self.resolver, timeout=timeout)
        inventory = ResourceInventorySource(resources, timeout=timeout)
        freshness = IndexFreshnessSource(code_index, timeout=timeout)
        probe = probe or EndpointProbeSource(
            timeout=self.settings.probe_timeout_s,
            body_chars=self.settings.probe_body_chars,
            public_domain=self.settings.public_domain,
        )
        schema = SchemaVerifierSource(sql, resources, timeout=timeout)
        routes = RouteSymbolSource(code_index, limit=limit, timeout=timeout)
        code = CodeSearchSource(code_index, limit=limit, timeout=timeout)
        transcript = SessionTranscriptSource(
            transcripts,
            timeout=timeout,
            turn_cap=self.settings.transcript_turn_cap,
            turn_chars=self.settings.transcript_turn_chars,
            excerpt_chars=self.settings.transcript_excerpt_chars,
        )

        self.stage_one: List[EvidenceSource] = [history, inventory, freshness, probe, transcript]
        self.stage_two: List[EvidenceSource] = [schema, routes, code]
        self.ledger_order: List[EvidenceSource] = [
            history, inventory, freshness, probe, schema, routes, code, transcript,
        ]

    async def ask(self, project_id: str, question: str, hints: Optional[AskHints] = None) -> AskResponse:
        """
        回答关于已部署项目的问题 / Answer a question about a deployed project

        Raises:
            QuestionValidationError: 问题为空 / Blank question
            ProjectNotFoundError: 项目不存在 / Unknown project
        """
        question = (question or "").strip()
        if not question:
            raise QuestionValidationError("Question must not be empty")
        hints = hints or AskHints()

        project = await self.projects.get(project_id)
        ledger = EvidenceLedger(summary_chars=self.settings.evidence_summary_chars)

        try:
            live = await self.deployments.get_live(project_id)
        except CollaboratorError as exc:
            logger.warning("Live deployment lookup failed for %s: %s", project_id, redact(str(exc)))
            await ledger.add("deployment_event", "deployments", f"Deployment registry unavailable: {exc}", "gap")
            return AskResponse(answer=REGISTRY_UNAVAILABLE_ANSWER, evidence=ledger.values())
        if live is None:
            await ledger.add("deployment_event", "deployments", "No live deployment found for this project.", "gap")
            logger.info("Ask %s: no live deployment", project_id)
            return AskResponse(answer=NO_LIVE_DEPLOYMENT_ANSWER, evidence=ledger.values())

        recent, history_error = await self._list_recent(project_id)
        resolution = self.resolver.resolve(question, recent, live, hints.deployment_id)
        context = AskContext(
            project=project,
            question=question,
            live=live,
            deployments=recent,
            resolution=resolution,
            endpoint=hints.endpoint or extract_endpoint(question),
            method=hints.method,
            budget=LiveCheckBudget(self.settings.live_check_budget),
            history_error=history_error,
        )

        drafts = await self._fan_out(context)
        for source in self.ledger_order:
            await ledger.extend(drafts.get(id(source), []))
        evidence = ledger.values()

        # Baseline first, always.
        facts = AnswerFacts(context=context, evidence=evidence)
        rule = match_rule(facts)
        response = AskResponse(answer=rule.answer(facts), evidence=evidence)

        enhanced = await self._try_synthesize(question, evidence, context.transcript_excerpt)
        path = rule.name
        if enhanced is not None:
            path = "synthesized"
            response = AskResponse(
                answer=enhanced.answer,
                evidence=evidence,
                root_cause=enhanced.root_cause,
                suggested_fix=enhanced.suggested_fix,
                confidence=enhanced.confidence,
            )

        logger.info(
            "Ask %s: target=%s (%s) evidence=%s answer=%s",
            project_id,
            resolution.target.id,
            resolution.reason,
            len(evidence),
            path,
        )
        return response

    async def _list_recent(self, project_id: str) -> Tuple[List[Deployment], Optional[str]]:
        """Recent deployments, or an empty list and the error message when the registry fails."""
        try:
            recent = await self.deployments.list_recent(project_id)
        except CollaboratorError as exc:
            logger.warning("Deployment history lookup failed for %s: %s", project_id, redact(str(exc)))
            return [], str(exc) or type(exc).__name__
        return list(recent)[: self.settings.recent_deployment_limit], None

    async def _fan_out(self, context: AskContext) -> Dict[int, List[EvidenceDraft]]:
        """
        两阶段并发采集 / Two-stage concurrent gathering

        Sources still running at the request deadline are cancelled and
        contribute nothing.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.request_deadline_s
        results: Dict[int, List[EvidenceDraft]] = {}

        for stage in (self.stage_one, self.stage_two):
            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning("Request deadline reached before %s sources ran", len(stage))
                break

            tasks = {
                asyncio.create_task(self._run_source(source, context)): source
                for source in stage
            }
            done, pending = await asyncio.wait(tasks, timeout=remaining)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
                logger.warning(
                    "Request deadline abandoned sources: %s",
                    ", ".join(tasks[t].name for t in pending),
                )
            for task in done:
                results[id(tasks[task])] = task.result()

        return results

    async def _run_source(self, source: EvidenceSource, context: AskContext) -> List[EvidenceDraft]:
        try:
            return await asyncio.wait_for(source.gather(context), timeout=source.timeout)
        except asyncio.TimeoutError:
            message = f"timed out after {source.timeout:g}s"
        except Exception as exc:
            message = str(exc) or type(exc).__name__
        logger.warning("Evidence source %s failed: %s", source.name, redact(message))
        return [source.failure_draft(context, message)]

    async def _try_synthesize(
        self,
        question: str,
        evidence: List[Evidence],
        transcript_excerpt: Optional[str],
    ) -> Optional[EnhancedAnswer]:
        if not self.synthesizer.enabled:
            return None
        try:
            return await asyncio.wait_for(
                self.synthesizer.synthesize(question, evidence, transcript_excerpt),
                timeout=self.settings.synthesis_timeout_s,
            )
        except Exception as exc:
            retryable, reason = classify_error(exc)
            logger.warning(
                "Answer synthesis via %s failed (%s, retryable=%s), using heuristic answer: %s",
                self.synthesizer.provider_name,
                reason,
                retryable,
                redact(str(exc)),
            )
            return None
