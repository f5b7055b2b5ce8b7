# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  文本工具 - 换行规范化、时间戳规范化、端点提取和分词
  Text Utilities - Newline and timestamp normalization, endpoint extraction, tokenization.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from app.utils.stopwords import get_stopwords

_NON_TOKEN_RE = re.compile(r"[^a-z0-9/_-]+")
_ENDPOINT_RE = re.compile(r"(/[a-zA-Z0-9._~:/?#\[\]@!$&'()*+,;=-]+)")
_TRAILING_PUNCT = "?.,!)"


def normalize_newlines(text: str | None) -> str:
    """
    规范化换行符（\\r\\n 和 \\r 转换为 \\n）

    Normalize \\r\\n and \\r to \\n. Accepts *None* safely.
    """
    return (text or "").replace("\r\n", "\n").replace("\r", "\n")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def to_iso_timestamp(value: str | None) -> str:
    """
    将存储层时间戳规范化为 ISO-8601

    Normalize a store timestamp to ISO-8601. SQL-style ``"2025-01-02 03:04:05"``
    becomes ``"2025-01-02T03:04:05Z"``; empty values become the current time.

    Example:
        >>> to_iso_timestamp("2025-01-02 03:04:05")
        '2025-01-02T03:04:05Z'
    """
    if not value:
        return utc_now_iso()
    if "T" in value:
        return value
    return f"{value.replace(' ', 'T', 1)}Z"


def extract_endpoint(question: str) -> Optional[str]:
    """
    从问题中提取以 / 开头的路径

    Extract the first ``/``-led path from the question, minus trailing
    sentence punctuation.

    Example:
        >>> extract_endpoint("Why is /api/todos returning 500?")
        '/api/todos'
    """
    match = _ENDPOINT_RE.search(question or "")
    if not match:
        return None
    path = match.group(1).rstrip(_TRAILING_PUNCT)
    return path if len(path) > 1 else None


def tokenize_question(text: str) -> List[str]:
    """
    问题分词，用于部署消息打分

    Lowercase, strip characters outside ``[a-z0-9/_-]``, split on whitespace,
    drop tokens shorter than 3 characters and stopwords.
    """
    stopwords = get_stopwords()
    tokens = _NON_TOKEN_RE.sub(" ", (text or "").lower()).split()
    return [t for t in tokens if len(t) >= 3 and t not in stopwords]


def tokenize_query(text: str, max_terms: int = 10) -> List[str]:
    """
    代码检索分词

    Tokenize a code-search key: split on whitespace and ``/``, keep tokens of
    2+ characters that are not purely numeric, deduplicate preserving order.

    Example:
        >>> tokenize_query("/api/todos 500")
        ['api', 'todos']
    """
    terms: List[str] = []
    for raw in _NON_TOKEN_RE.sub(" ", (text or "").lower()).split():
        for term in raw.split("/"):
            if len(term) < 2 or term.isdigit() or term in terms:
                continue
            terms.append(term)
    return terms[:max_terms]
