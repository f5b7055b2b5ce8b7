# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  应用级异常层次 - 定义诊断引擎的异常继承树
  Application-level Exception Hierarchy - Diagnostic engine exception definitions.

只有 QuestionValidationError 会传播到调用方；其余异常都在证据源或协调器边界被吸收。
Only QuestionValidationError propagates to callers; the rest are absorbed at the
evidence-source or coordinator boundary.
"""


class AskDeployError(Exception):
    """
    AskDeploy 业务错误的基类

    Base exception for all AskDeploy business errors.
    """


class QuestionValidationError(AskDeployError):
    """
    问题校验失败异常

    Raised when the question is empty after trimming. Raised before any
    evidence gathering begins.
    """


class ProjectNotFoundError(AskDeployError):
    """
    项目不存在异常

    Raised by the project store when a project id is unknown.
    """


class CollaboratorError(AskDeployError):
    """
    外部协作方调用失败异常

    Raised when a registry or store fails.

    抛出时机：
    - 数据文件不可读 / Data file unreadable
    - 数据格式错误 / Invalid payload
    - 数据库不存在 / Database missing
    """


class LLMError(AskDeployError):
    """
    LLM调用失败异常

    Raised when the completion service fails (timeout, rate limit, network).
    """


class SynthesisError(LLMError):
    """
    生成式答案解析失败异常

    Raised when completion text cannot be parsed into an enhanced answer.
    """
