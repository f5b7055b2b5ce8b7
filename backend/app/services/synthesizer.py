# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  生成式答案增强 - 基于收集到的证据请求结构化补全
  Generative Synthesizer - Requests a structured completion grounded in the collected
  evidence. Disabled (returns None) when no provider is configured.
"""

from typing import Any, List, Optional

from app.exceptions import SynthesisError
from app.llm_gateway.providers.base import BaseLLMProvider
from app.schemas.ask import EnhancedAnswer, Evidence
from app.utils.llm_output import parse_json_object

CONFIDENCE_LEVELS = ("high", "medium", "low")

PROMPT_TEMPLATE = """You are a debugging assistant for a serverless deployment platform. Answer the user's question about their deployed project based only on the collected evidence below.

## Question
{question}

## Evidence
{evidence}{transcript}

Respond with only valid JSON (no markdown fences):
{{
  "answer": "Concise direct answer (2-4 sentences)",
  "root_cause": "Specific root cause or null",
  "suggested_fix": "Concrete fix or null",
  "confidence": "high" | "medium" | "low"
}}"""


def format_evidence(evidence: List[Evidence]) -> str:
    return "\n".join(
        f"- [{e.id}] type={e.type} source={e.source} relation={e.relation}: {e.summary}"
        for e in evidence
    )


def build_prompt(question: str, evidence: List[Evidence], transcript_excerpt: Optional[str] = None) -> str:
    transcript = ""
    if transcript_excerpt:
        transcript = f"\n\n## Deploy Session Context (recent turns)\n\n{transcript_excerpt}"
    return PROMPT_TEMPLATE.format(
        question=question,
        evidence=format_evidence(evidence),
        transcript=transcript,
    )


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_enhanced_answer(text: str) -> EnhancedAnswer:
    """
    宽松解析补全结果 / Leniently parse a completion

    Field by field: string ``answer`` is required, non-string optional fields
    are dropped, unknown confidence becomes ``low``.

    Raises:
        SynthesisError: 无法解析或缺少答案 / Unparseable or no usable answer
    """
    data, error = parse_json_object(text)
    if data is None:
        raise SynthesisError(f"Completion could not be parsed: {error}")

    answer = _optional_text(data.get("answer"))
    if answer is None:
        raise SynthesisError("Completion has no answer field")

    confidence = data.get("confidence")
    if confidence not in CONFIDENCE_LEVELS:
        confidence = "low"

    return EnhancedAnswer(
        answer=answer,
        root_cause=_optional_text(data.get("root_cause")),
        suggested_fix=_optional_text(data.get("suggested_fix")),
        confidence=confidence,
    )


class AnswerSynthesizer:
    """
    生成式答案增强器 / Generative answer synthesizer

    Failures raise; the coordinator decides what a failure means.
    """

    def __init__(self, provider: Optional[BaseLLMProvider] = None):
        self.provider = provider

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    @property
    def provider_name(self) -> Optional[str]:
        return self.provider.get_provider_name() if self.provider else None

    async def synthesize(
        self,
        question: str,
        evidence: List[Evidence],
        transcript_excerpt: Optional[str] = None,
    ) -> Optional[EnhancedAnswer]:
        if self.provider is None:
            return None

        prompt = build_prompt(question, evidence, transcript_excerpt)
        response = await self.provider.chat([{"role": "user", "content": prompt}])
        return parse_enhanced_answer(str(response.get("content") or ""))
