# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  停用词配置 - 部署消息匹配用的停用词，支持从 YAML 文件覆盖内置默认值
  Stopwords Configuration - Stopwords for deploy-message matching, with an optional YAML override.
"""

from pathlib import Path
from typing import FrozenSet, Optional

import yaml

from app.utils.logger import get_logger

logger = get_logger(__name__)

# Built-in defaults: question words, articles, pronouns, auxiliary verbs.
# 内置默认停用词：疑问词、冠词、代词、助动词
_DEFAULT_STOPWORDS = frozenset({
    "why", "did", "we", "ship", "shipped", "how", "what", "the", "this", "that",
    "with", "from", "into", "for", "and", "our", "your", "was", "were", "is", "are",
})

_STOPWORDS_FILE = Path(__file__).parent.parent.parent / "stopwords.yaml"

_loaded: Optional[FrozenSet[str]] = None


def get_stopwords() -> FrozenSet[str]:
    """
    获取停用词集合，若可用则从文件加载

    Get the stopword set, loading ``stopwords.yaml`` on first call if present.
    The file may hold a list or a mapping with a ``stopwords`` key. A broken
    file falls back to the built-in defaults.

    Returns:
        停用词集合 / Frozen set of lowercase stopwords
    """
    global _loaded
    if _loaded is not None:
        return _loaded

    if _STOPWORDS_FILE.exists():
        try:
            with open(_STOPWORDS_FILE, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if isinstance(data, dict):
                words = data.get("stopwords", [])
            elif isinstance(data, list):
                words = data
            else:
                words = []
            _loaded = frozenset(str(w).strip().lower() for w in words if str(w).strip())
            logger.debug("Loaded %d stopwords from %s", len(_loaded), _STOPWORDS_FILE)
            return _loaded
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to load stopwords file: %s, using defaults", exc)

    _loaded = _DEFAULT_STOPWORDS
    return _loaded
