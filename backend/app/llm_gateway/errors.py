# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  LLM错误分类 - 为答案增强失败打上原因标签，仅用于日志
  LLM Error Classification - Labels synthesizer failures for logging. The engine never
  retries inside a request; a failed enhancement falls back to the heuristic answer.
"""

import asyncio
from typing import Tuple

from app.exceptions import SynthesisError

# 不可重试（配置或请求本身有误） / Non-retryable: configuration or request problems
NON_RETRYABLE_PATTERNS = (
    "invalid_api_key",
    "invalid api key",
    "authentication",
    "unauthorized",
    "permission",
    "forbidden",
    "model_not_found",
    "model not found",
    "invalid_request_error",
    "context length",
    "billing",
    "insufficient_quota",
)

# 可重试（临时性故障） / Retryable: transient failures
RETRYABLE_PATTERNS = (
    "timeout",
    "timed out",
    "connection",
    "network",
    "502",
    "503",
    "504",
    "overloaded",
    "rate limit",
    "rate_limit",
    "too many requests",
    "429",
)


def classify_error(error: BaseException) -> Tuple[bool, str]:
    """
    将错误分类为可重试或不可重试

    Classify an error as retryable or non-retryable.

    Args:
        error: 要分类的异常 / The exception to classify

    Returns:
        元组 (is_retryable, reason) / Tuple of (is_retryable, reason)

    Example:
        >>> classify_error(asyncio.TimeoutError())
        (True, 'timeout')
        >>> classify_error(ValueError("invalid_api_key"))
        (False, 'non_retryable:invalid_api_key')
    """
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return True, "timeout"
    if isinstance(error, SynthesisError):
        return False, "parse_error"

    error_str = str(error).lower()
    error_type = type(error).__name__.lower()

    if any(t in error_type for t in ("timeout", "connection", "network")):
        return True, "connection_error"
    if any(t in error_type for t in ("authentication", "permission")):
        return False, "auth_error"
    if "ratelimit" in error_type:
        return True, "rate_limited"

    for pattern in NON_RETRYABLE_PATTERNS:
        if pattern in error_str:
            return False, f"non_retryable:{pattern}"

    for pattern in RETRYABLE_PATTERNS:
        if pattern in error_str:
            return True, f"retryable:{pattern}"

    return True, "unknown_error"
