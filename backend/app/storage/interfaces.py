# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  协作方接口 - 诊断引擎只读依赖的最小接口集合
  Collaborator Interfaces - The minimal read-only surfaces the diagnostic engine consumes.
  File-backed implementations live beside this module; tests supply in-memory fakes.
"""

from typing import List, Optional, Protocol

from app.schemas.deployment import (
    CodeHit,
    Deployment,
    IndexStatus,
    Project,
    Resource,
    SymbolHit,
)


class ProjectRegistry(Protocol):
    async def get(self, project_id: str) -> Project: ...


class DeploymentRegistry(Protocol):
    async def list_recent(self, project_id: str) -> List[Deployment]: ...

    async def get_live(self, project_id: str) -> Optional[Deployment]: ...


class ResourceRegistry(Protocol):
    async def list_active(self, project_id: str) -> List[Resource]: ...


class CodeIndexStore(Protocol):
    async def get_status(self, project_id: str) -> Optional[IndexStatus]: ...

    async def search(self, project_id: str, query: str, limit: int) -> List[CodeHit]: ...

    async def search_route_symbols(self, project_id: str, endpoint: str, limit: int) -> List[SymbolHit]: ...

    async def raw_source_fallback_search(self, deployment: Deployment, query: str, limit: int) -> List[CodeHit]: ...


class SqlStore(Protocol):
    async def table_exists(self, database_ref: str, table_name: str) -> bool: ...


class TranscriptStore(Protocol):
    async def get(self, project_id: str, deployment_id: str) -> Optional[str]: ...
