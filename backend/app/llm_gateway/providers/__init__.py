"""
LLM Providers / 大模型提供商
"""

from .base import BaseLLMProvider
from .anthropic_provider import AnthropicProvider

__all__ = ["BaseLLMProvider", "AnthropicProvider"]
