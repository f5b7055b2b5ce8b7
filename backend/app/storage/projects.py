# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  项目、部署与资源存储 - 部署注册表和资源注册表的文件实现
  Project, Deployment and Resource Storage - File-backed project registry,
  deployment registry and resource registry.
"""

from typing import List, Optional

from pydantic import ValidationError

from app.config import settings
from app.exceptions import CollaboratorError, ProjectNotFoundError
from app.schemas.deployment import Deployment, Project, Resource
from app.storage.base import BaseStorage


class ProjectStorage(BaseStorage):
    """Reads ``projects/{id}/project.json``."""

    async def get(self, project_id: str) -> Project:
        path = self.get_project_path(project_id) / "project.json"
        if not path.exists():
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        data = await self.read_json(path)
        try:
            return Project(**data)
        except (TypeError, ValidationError) as exc:
            raise CollaboratorError(f"Invalid project record for {project_id}: {exc}") from exc


class DeploymentStorage(BaseStorage):
    """
    部署注册表 / Deployment registry

    Reads ``projects/{id}/deployments.json``. The live deployment is the
    newest one whose status is ``live``.
    """

    def __init__(self, data_dir: Optional[str] = None, limit: Optional[int] = None):
        super().__init__(data_dir)
        self.limit = limit or settings.recent_deployment_limit

    async def _load(self, project_id: str) -> List[Deployment]:
        path = self.get_project_path(project_id) / "deployments.json"
        if not path.exists():
            return []
        rows = await self.read_json(path)
        if not isinstance(rows, list):
            raise CollaboratorError("deployments.json must contain a list")
        try:
            deployments = [Deployment(**row) for row in rows]
        except (TypeError, ValidationError) as exc:
            raise CollaboratorError(f"Invalid deployment record: {exc}") from exc
        return sorted(deployments, key=lambda d: d.created_at, reverse=True)

    async def list_recent(self, project_id: str) -> List[Deployment]:
        return (await self._load(project_id))[: self.limit]

    async def get_live(self, project_id: str) -> Optional[Deployment]:
        for deployment in await self._load(project_id):
            if deployment.status == "live":
                return deployment
        return None


class ResourceStorage(BaseStorage):
    """Reads ``projects/{id}/resources.json``; deleted resources are excluded."""

    async def list_active(self, project_id: str) -> List[Resource]:
        path = self.get_project_path(project_id) / "resources.json"
        if not path.exists():
            return []
        rows = await self.read_json(path)
        if not isinstance(rows, list):
            raise CollaboratorError("resources.json must contain a list")
        try:
            resources = [Resource(**row) for row in rows]
        except (TypeError, ValidationError) as exc:
            raise CollaboratorError(f"Invalid resource record: {exc}") from exc
        return [r for r in resources if r.status != "deleted"]
