# -*- coding: utf-8 -*-
"""
问诊 AskDeploy - 基于证据的部署诊断引擎
AskDeploy - Evidence-Based Deployment Diagnostic Engine

Copyright © 2025-2026 WenShape Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  提问路由 - 对已部署项目提问，以及重建项目代码索引
  Ask router - Ask a question about a deployed project; rebuild its code index.
"""

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_ask_service, get_code_indexer, get_deployment_storage, get_project_storage
from app.exceptions import ProjectNotFoundError, QuestionValidationError
from app.schemas.ask import AskRequest, AskResponse
from app.schemas.deployment import IndexStatus
from app.services.ask_service import AskService
from app.services.code_indexer import CodeIndexer
from app.storage import DeploymentStorage, ProjectStorage

router = APIRouter(prefix="/projects/{project_id}", tags=["ask"])


@router.post("/ask", response_model=AskResponse, response_model_exclude_none=True)
async def ask_project(
    project_id: str,
    request: AskRequest,
    service: AskService = Depends(get_ask_service),
):
    """Answer a question about a deployed project with evidence.

    Args:
        project_id: Target project id.
        request: Question and optional hints.

    Returns:
        Answer, evidence, and the optional enhanced fields when available.
    """
    try:
        return await service.ask(project_id, request.question, request.hints)
    except QuestionValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ProjectNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found")


@router.post("/code-index/rebuild", response_model=IndexStatus)
async def rebuild_code_index(
    project_id: str,
    projects: ProjectStorage = Depends(get_project_storage),
    deployments: DeploymentStorage = Depends(get_deployment_storage),
    indexer: CodeIndexer = Depends(get_code_indexer),
):
    """Rebuild the project's code index from the live deployment's source snapshot."""
    try:
        await projects.get(project_id)
    except ProjectNotFoundError:
        raise HTTPException(status_code=404, detail="Project not found")

    live = await deployments.get_live(project_id)
    if live is None:
        raise HTTPException(status_code=409, detail="Project has no live deployment")
    return await indexer.index_deployment(project_id, live)
