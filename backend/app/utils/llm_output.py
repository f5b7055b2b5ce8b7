# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  LLM输出解析工具 - 从可能包含噪声的LLM响应中提取JSON对象
  LLM Output Parsing Helpers - Extract a JSON object from a possibly noisy LLM response.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Optional, Tuple


def parse_json_object(text: str) -> Tuple[Optional[Dict[str, Any]], str]:
    """
    从LLM响应中解析JSON对象

    Parse a JSON object from a completion, trying in order: the whole text,
    fenced code blocks, then the first balanced ``{...}`` segment.

    Returns:
        元组 (数据, 错误代码) / Tuple of (object or None, "" on success else an error code)

    Example:
        >>> parse_json_object('{"answer": "ok"}')
        ({'answer': 'ok'}, '')
        >>> parse_json_object('Sure! ```json\\n{"answer": "ok"}\\n```')
        ({'answer': 'ok'}, '')
        >>> parse_json_object('no json here')
        (None, 'json_parse_failed')
    """
    if not text or not str(text).strip():
        return None, "empty_response"

    for candidate in _candidates(str(text)):
        data = _loads_object(candidate)
        if data is not None:
            return data, ""
        for segment in _object_segments(candidate):
            data = _loads_object(segment)
            if data is not None:
                return data, ""

    return None, "json_parse_failed"


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _candidates(text: str) -> Iterator[str]:
    """Full text first, then the bodies of fenced code blocks."""
    cleaned = text.strip()
    yield cleaned

    if "```" not in cleaned:
        return

    parts = cleaned.split("```")
    for i in range(1, len(parts), 2):
        segment = parts[i].strip()
        lines = segment.splitlines()
        if lines and lines[0].strip().lower() in {"json", "jsonc"}:
            segment = "\n".join(lines[1:]).strip()
        if segment:
            yield segment


def _object_segments(text: str) -> Iterator[str]:
    """
    用括号匹配提取完整的JSON对象片段

    Yield balanced ``{...}`` segments, skipping braces inside strings.
    """
    for start, first in enumerate(text):
        if first != "{":
            continue
        depth = 0
        in_string = False
        escape = False
        for idx in range(start, len(text)):
            ch = text[idx]
            if in_string:
                if escape:
                    escape = False
                elif ch == "\\":
                    escape = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : idx + 1]
                    break
