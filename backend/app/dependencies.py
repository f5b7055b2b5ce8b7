# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  依赖注入工厂 - FastAPI Depends() 工厂函数，统一管理存储与服务实例创建
  Dependency Injection - FastAPI Depends() factories for stores and the ask service.

设计原则 / Design Principles:
  所有Router应通过 Depends() 获取实例，而非模块级实例化。
  Tests replace any factory through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Optional

from app.config import settings
from app.llm_gateway.providers.anthropic_provider import AnthropicProvider
from app.llm_gateway.providers.base import BaseLLMProvider
from app.services.ask_service import AskService
from app.services.code_indexer import CodeIndexer
from app.services.synthesizer import AnswerSynthesizer
from app.storage import (
    CodeIndexStorage,
    DeploymentStorage,
    ProjectStorage,
    ResourceStorage,
    SqliteSqlStore,
    TranscriptStorage,
)


@lru_cache(maxsize=1)
def get_project_storage() -> ProjectStorage:
    """
    获取或创建ProjectStorage的单例实例

    Get or create singleton ProjectStorage instance.
    """
    return ProjectStorage()


@lru_cache(maxsize=1)
def get_deployment_storage() -> DeploymentStorage:
    """
    获取或创建DeploymentStorage的单例实例

    Get or create singleton DeploymentStorage instance.
    """
    return DeploymentStorage()


@lru_cache(maxsize=1)
def get_resource_storage() -> ResourceStorage:
    return ResourceStorage()


@lru_cache(maxsize=1)
def get_code_index_storage() -> CodeIndexStorage:
    return CodeIndexStorage()


@lru_cache(maxsize=1)
def get_sql_store() -> SqliteSqlStore:
    return SqliteSqlStore()


@lru_cache(maxsize=1)
def get_transcript_storage() -> TranscriptStorage:
    return TranscriptStorage()


@lru_cache(maxsize=1)
def get_llm_provider() -> Optional[BaseLLMProvider]:
    """
    获取生成式答案增强所用的提供商

    Anthropic provider when an API key is configured, otherwise None
    (the synthesizer is then disabled).
    """
    if not settings.synthesis_enabled:
        return None
    return AnthropicProvider(
        api_key=settings.anthropic_api_key,
        model=settings.synthesis_model,
        max_tokens=settings.synthesis_max_tokens,
        timeout=settings.synthesis_timeout_s,
    )


@lru_cache(maxsize=1)
def get_ask_service() -> AskService:
    """
    获取或创建AskService的单例实例

    Get or create singleton AskService wired to the file-backed stores.

    Returns:
        AskService实例 / AskService instance
    """
    return AskService(
        projects=get_project_storage(),
        deployments=get_deployment_storage(),
        resources=get_resource_storage(),
        code_index=get_code_index_storage(),
        sql=get_sql_store(),
        transcripts=get_transcript_storage(),
        synthesizer=AnswerSynthesizer(get_llm_provider()),
    )


@lru_cache(maxsize=1)
def get_code_indexer() -> CodeIndexer:
    return CodeIndexer(get_code_index_storage())
