"""
Pydantic Data Models / Pydantic 数据模型
Define data structures for API and internal use / 定义 API 和内部使用的数据结构
"""

from .ask import AskHints, AskRequest, AskResponse, EnhancedAnswer, Evidence
from .deployment import (
    CodeChunk,
    CodeHit,
    CodeSymbol,
    Deployment,
    IndexStatus,
    ParsedSource,
    Project,
    Resource,
    SymbolHit,
)

__all__ = [
    "AskHints",
    "AskRequest",
    "AskResponse",
    "EnhancedAnswer",
    "Evidence",
    "CodeChunk",
    "CodeHit",
    "CodeSymbol",
    "Deployment",
    "IndexStatus",
    "ParsedSource",
    "Project",
    "Resource",
    "SymbolHit",
]
