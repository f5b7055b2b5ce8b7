# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  LLM提供商抽象基类 - 答案增强所用补全服务的统一接口
  Base LLM Provider - Unified interface for the completion service used by the
  generative synthesizer. Tests substitute an in-memory provider.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BaseLLMProvider(ABC):
    """
    大模型提供商抽象基类 / Abstract base class for LLM providers

    Attributes:
        api_key (str): API密钥 / API key for authentication.
        model (str): 模型名称 / Model name/identifier.
        max_tokens (int): 最大生成token数 / Maximum tokens to generate.
        temperature (float): 生成温度 / Sampling temperature.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 512,
        temperature: float = 0.2
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    @abstractmethod
    async def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        发送聊天请求 / Send a chat request

        Args:
            messages: 消息列表，格式为 [{"role": "user", "content": "..."}]
                     Message list in format [{"role": "user", "content": "..."}]
            temperature: 覆盖默认温度 / Override temperature setting.
            max_tokens: 覆盖默认token限制 / Override max tokens setting.

        Returns:
            响应字典，至少包含 'content' / Response dict with at least 'content'.
            Other keys: usage, model, finish_reason.
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """获取提供商名称 / Get provider name (e.g., 'anthropic')."""
        pass
