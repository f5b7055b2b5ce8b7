# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  启发式答案规则表 - 有序的 (谓词, 处理器) 规则，首个命中的规则给出基线答案
  Heuristic Answer Rules - An ordered table of (predicate, handler) rules; the first
  matching rule produces the baseline answer. New intents are added as new rows.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from app.evidence_sources.base import AskContext
from app.schemas.ask import Evidence
from app.services.intents import is_what_changed, is_why_shipped, looks_like_failure
from app.utils.redaction import redact


@dataclass
class AnswerFacts:
    """
    规则输入 / Everything the rules read

    Built once from the request context and the ledger after fan-out.
    """

    context: AskContext
    evidence: List[Evidence]

    @property
    def question(self) -> str:
        return self.context.question

    @property
    def endpoint(self) -> Optional[str]:
        return self.context.endpoint

    @property
    def probe_status(self) -> Optional[int]:
        return self.context.probe.status if self.context.probe else None

    @property
    def has_gap(self) -> bool:
        return any(item.relation == "gap" for item in self.evidence)


@dataclass(frozen=True)
class AnswerRule:
    name: str
    applies: Callable[[AnswerFacts], bool]
    answer: Callable[[AnswerFacts], str]


def _quoted_message(facts: AnswerFacts) -> Optional[str]:
    message = facts.context.target.message
    return redact(message) if message else None


def _answer_why_shipped(facts: AnswerFacts) -> str:
    message = _quoted_message(facts)
    if message:
        return f'The latest deployment appears to have been shipped for: "{message}".'
    return "I can't determine why it was shipped from deployment metadata because the deploy message is missing."


def _missing_table_confirmed(facts: AnswerFacts) -> bool:
    return bool(facts.context.table_missing_confirmed and facts.context.missing_table and facts.endpoint)


def _answer_missing_table(facts: AnswerFacts) -> str:
    return (
        f'The likely root cause is a missing database table "{facts.context.missing_table}" '
        f"for endpoint {facts.endpoint}."
    )


def _server_failure(facts: AnswerFacts) -> bool:
    return bool(facts.endpoint) and facts.probe_status is not None and facts.probe_status >= 500


def _answer_server_failure(facts: AnswerFacts) -> str:
    files: List[str] = []
    for match in facts.context.route_matches:
        if match.path not in files:
            files.append(match.path)
    if files:
        return (
            f"Endpoint {facts.endpoint} is returning {facts.probe_status}. "
            f"Likely related route code is in: {', '.join(files[:3])}."
        )
    return (
        f"Endpoint {facts.endpoint} is returning {facts.probe_status}. "
        "I can confirm a runtime failure but route mapping evidence is limited."
    )


def _not_reproduced(facts: AnswerFacts) -> bool:
    status = facts.probe_status
    return (
        bool(facts.endpoint)
        and status is not None
        and 200 <= status < 500
        and looks_like_failure(facts.question)
    )


def _answer_not_reproduced(facts: AnswerFacts) -> str:
    return f"I could not reproduce a server failure for {facts.endpoint}; current status is {facts.probe_status}."


def _answer_what_changed(facts: AnswerFacts) -> str:
    target = facts.context.target
    message = _quoted_message(facts)
    if message:
        return f'The most recent change is deployment {target.id} with message: "{message}".'
    return f"Deployment {target.id} is the most recent change, but it has no deploy message."


ANSWER_RULES: List[AnswerRule] = [
    AnswerRule("why_shipped", lambda f: is_why_shipped(f.question), _answer_why_shipped),
    AnswerRule("missing_table", _missing_table_confirmed, _answer_missing_table),
    AnswerRule("server_failure", _server_failure, _answer_server_failure),
    AnswerRule("not_reproduced", _not_reproduced, _answer_not_reproduced),
    AnswerRule("what_changed", lambda f: is_what_changed(f.question), _answer_what_changed),
    AnswerRule(
        "insufficient_evidence",
        lambda f: f.has_gap,
        lambda f: "I can't determine this confidently with the current evidence. "
        "See gaps in evidence for what's missing.",
    ),
    AnswerRule(
        "partial_context",
        lambda f: True,
        lambda f: "Based on current evidence, I can provide partial debugging context "
        "but not a high-confidence root cause yet.",
    ),
]


def match_rule(facts: AnswerFacts, rules: Optional[List[AnswerRule]] = None) -> AnswerRule:
    for rule in rules or ANSWER_RULES:
        if rule.applies(facts):
            return rule
    raise LookupError("answer rule table has no catch-all rule")


def pick_answer(context: AskContext, evidence: List[Evidence]) -> str:
    """
    计算基线答案 / Compute the heuristic baseline answer

    Deterministic for a given context and evidence list.
    """
    facts = AnswerFacts(context=context, evidence=evidence)
    return match_rule(facts).answer(facts)
