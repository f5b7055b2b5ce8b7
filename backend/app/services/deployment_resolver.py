# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  部署解析器 - 根据提示或问题与部署消息的匹配度选定目标部署
  Deployment Resolver - Picks the deployment a question is about, from an explicit
  hint, a "why shipped" message match, or the live deployment.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from app.schemas.deployment import Deployment
from app.services.evidence_ledger import EvidenceDraft
from app.services.intents import is_why_shipped
from app.utils.text import to_iso_timestamp, tokenize_question

ResolutionReason = Literal["hint", "message_match", "live"]


@dataclass
class DeploymentResolution:
    """Target deployment plus the context deployments reported with it."""

    target: Deployment
    reason: ResolutionReason
    others: List[Deployment] = field(default_factory=list)


def score_deployment(tokens: List[str], deployment: Deployment) -> int:
    message = (deployment.message or "").lower()
    if not message:
        return 0
    return sum(1 for token in tokens if token in message)


def _created_key(deployment: Deployment) -> str:
    return to_iso_timestamp(deployment.created_at) if deployment.created_at else ""


def match_deployment_by_message(question: str, deployments: List[Deployment]) -> Optional[Deployment]:
    """
    按部署消息匹配问题

    Score each deployment by how many question tokens occur in its message.
    The highest nonzero score wins; ties go to the most recent ``created_at``,
    then to list order.
    """
    tokens = tokenize_question(question)
    if not tokens:
        return None

    best: Optional[Deployment] = None
    best_score = 0
    for deployment in deployments:
        score = score_deployment(tokens, deployment)
        if score == 0:
            continue
        if score > best_score or (
            score == best_score and best is not None and _created_key(deployment) > _created_key(best)
        ):
            best, best_score = deployment, score
    return best


def match_deployment_by_hint(hint: Optional[str], deployments: List[Deployment]) -> Optional[Deployment]:
    """Exact id match first, then id suffix match."""
    hint = (hint or "").strip()
    if not hint:
        return None
    for deployment in deployments:
        if deployment.id == hint:
            return deployment
    for deployment in deployments:
        if deployment.id.endswith(hint):
            return deployment
    return None


def summarize_deployment(deployment: Deployment) -> str:
    created_at = to_iso_timestamp(deployment.created_at)
    if deployment.message:
        return f"Deployment {deployment.id} ({deployment.status}) at {created_at}: {deployment.message}"
    return f"Deployment {deployment.id} ({deployment.status}) at {created_at} has no deploy message"


class DeploymentResolver:
    """
    部署解析器 / Deployment resolver

    Attributes:
        context_limit (int): 额外报告的历史部署数 / Extra deployments reported for context.
    """

    def __init__(self, context_limit: int = 4):
        self.context_limit = context_limit

    def resolve(
        self,
        question: str,
        deployments: List[Deployment],
        live: Deployment,
        deployment_hint: Optional[str] = None,
    ) -> DeploymentResolution:
        candidates = list(deployments)
        if all(d.id != live.id for d in candidates):
            candidates.append(live)

        target = match_deployment_by_hint(deployment_hint, candidates)
        reason: ResolutionReason = "hint"
        if target is None and is_why_shipped(question):
            target = match_deployment_by_message(question, candidates)
            reason = "message_match"
        if target is None:
            target, reason = live, "live"

        others = [d for d in deployments if d.id != target.id][: self.context_limit]
        return DeploymentResolution(target=target, reason=reason, others=others)

    def describe(self, resolution: DeploymentResolution) -> List[EvidenceDraft]:
        """One deployment_event for the target, then one per context deployment."""
        drafts = []
        for deployment in [resolution.target, *resolution.others]:
            drafts.append(
                EvidenceDraft(
                    type="deployment_event",
                    source="deployments",
                    summary=summarize_deployment(deployment),
                    relation="supports",
                    meta={
                        "deployment_id": deployment.id,
                        "status": deployment.status,
                        "source": deployment.source,
                    },
                    timestamp=to_iso_timestamp(deployment.created_at),
                )
            )
        return drafts
