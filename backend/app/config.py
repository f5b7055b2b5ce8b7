# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  应用配置 - 从环境变量加载配置，并可由 YAML 配置文件覆盖
  Application Settings - Loaded from environment variables, optionally overlaid by a YAML file.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

_BACKEND_ROOT = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """
    运行时配置 / Runtime settings

    All time bounds are in seconds. Budgets and caps are per request.
    """

    debug: bool = Field(default_factory=lambda: _env_bool("ASKDEPLOY_DEBUG"))
    host: str = Field(default_factory=lambda: os.getenv("ASKDEPLOY_HOST", "127.0.0.1"))
    port: int = Field(default_factory=lambda: int(os.getenv("ASKDEPLOY_PORT", "8000")))

    data_dir: str = Field(default_factory=lambda: os.getenv("ASKDEPLOY_DATA_DIR", str(_BACKEND_ROOT / "data")))
    log_dir: str = Field(default_factory=lambda: os.getenv("ASKDEPLOY_LOG_DIR", str(_BACKEND_ROOT / "logs")))

    # Generative synthesizer / 生成式答案增强
    anthropic_api_key: str = Field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    synthesis_model: str = Field(
        default_factory=lambda: os.getenv("ASKDEPLOY_SYNTHESIS_MODEL", "claude-haiku-4-5-20251001")
    )
    synthesis_max_tokens: int = 512
    synthesis_timeout_s: float = Field(15.0, gt=0)

    # Evidence gathering / 证据采集
    probe_timeout_s: float = Field(8.0, gt=0)
    probe_body_chars: int = Field(600, ge=0)
    source_timeout_s: float = Field(10.0, gt=0)
    request_deadline_s: float = Field(30.0, gt=0)
    live_check_budget: int = Field(4, ge=0)
    transcript_turn_cap: int = Field(30, ge=1)
    transcript_turn_chars: int = Field(500, ge=1)
    transcript_excerpt_chars: int = Field(12000, ge=1)
    evidence_summary_chars: int = Field(500, ge=1)
    recent_deployment_limit: int = Field(10, ge=1)
    context_deployment_limit: int = Field(4, ge=0)
    code_hit_limit: int = Field(3, ge=1)

    public_domain: str = Field(default_factory=lambda: os.getenv("ASKDEPLOY_PUBLIC_DOMAIN", "runjack.xyz"))
    rate_limit: str = Field(default_factory=lambda: os.getenv("ASKDEPLOY_RATE_LIMIT", "60/minute"))

    @property
    def synthesis_enabled(self) -> bool:
        return bool(self.anthropic_api_key.strip())


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """
    加载配置，YAML 文件中的键覆盖环境变量默认值

    Load settings; keys present in the YAML file override environment defaults.
    A missing file is not an error.

    Args:
        config_path: YAML 配置文件路径 / Path to the YAML settings file

    Returns:
        Settings 实例 / Settings instance
    """
    path = config_path or Path(os.getenv("ASKDEPLOY_CONFIG", str(_BACKEND_ROOT / "askdeploy.yaml")))
    overrides: Dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Settings file must contain a mapping: {path}")
        overrides = loaded
    return Settings(**overrides)


settings = load_settings()
