# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  路径安全工具 - 项目、部署和数据库标识符在拼接文件路径前的清理与校验
  Path Safety Utilities - Sanitize project, deployment and database identifiers
  before they are joined into file paths.
"""

import re
from pathlib import Path

_UNSAFE_CHARS_RE = re.compile(r"[^\w\-.]", re.UNICODE)


def sanitize_id(raw: str, max_length: int = 96) -> str:
    """
    清理标识符以安全用于文件路径

    Sanitize an identifier for use as a single path component.

    - spaces and unsafe characters become ``_``
    - ``..`` and path separators are removed
    - leading dots/underscores are stripped

    Raises:
        ValueError: 如果输入无法清理为有效ID / If nothing usable remains

    Example:
        >>> sanitize_id("dep_01HZX")
        'dep_01HZX'
        >>> sanitize_id("../../etc/passwd")
        'etcpasswd'
    """
    if not raw or not isinstance(raw, str) or not raw.strip():
        raise ValueError("ID must be a non-empty string")

    text = raw.strip().replace(" ", "_")
    text = text.replace("..", "").replace("/", "").replace("\\", "")
    text = _UNSAFE_CHARS_RE.sub("_", text)
    text = re.sub(r"_+", "_", text.lstrip("._"))
    text = text[:max_length].rstrip("._")

    if not text:
        raise ValueError(f"Cannot sanitize ID from input: {raw!r}")
    return text


def validate_path_within(child: Path, parent: Path) -> Path:
    """
    验证child路径在parent目录内

    Validate that *child* resolves inside *parent*; return the resolved path.

    Raises:
        ValueError: 如果子路径逃逸出父目录 / If the child escapes the parent
    """
    resolved_parent = parent.resolve()
    resolved_child = child.resolve()
    if resolved_child != resolved_parent and resolved_parent not in resolved_child.parents:
        raise ValueError(f"Path escapes data directory: {child}")
    return resolved_child
