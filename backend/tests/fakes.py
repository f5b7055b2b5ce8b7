"""In-memory collaborators and a scripted LLM provider for engine tests."""
from typing import Dict, List, Optional

import httpx

from app.config import Settings
from app.evidence_sources import EndpointProbeSource
from app.exceptions import CollaboratorError, ProjectNotFoundError
from app.llm_gateway.providers.base import BaseLLMProvider
from app.schemas.deployment import CodeHit, Deployment, IndexStatus, Project, Resource, SymbolHit
from app.services.ask_service import AskService
from app.services.synthesizer import AnswerSynthesizer


class FakeProjects:
    def __init__(self, *projects: Project):
        self.projects = {p.id: p for p in projects}

    async def get(self, project_id: str) -> Project:
        if project_id not in self.projects:
            raise ProjectNotFoundError(project_id)
        return self.projects[project_id]


class FakeDeployments:
    def __init__(
        self,
        deployments: List[Deployment],
        live_id: Optional[str] = None,
        error: Optional[Exception] = None,
        history_error: Optional[Exception] = None,
    ):
        self.deployments = deployments
        self.live_id = live_id
        self.error = error
        self.history_error = history_error

    async def list_recent(self, project_id: str) -> List[Deployment]:
        if self.error or self.history_error:
            raise self.error or self.history_error
        return list(self.deployments)

    async def get_live(self, project_id: str) -> Optional[Deployment]:
        if self.error:
            raise self.error
        for d in self.deployments:
            if d.id == self.live_id:
                return d
        return None


class FakeResources:
    def __init__(self, resources: Optional[List[Resource]] = None, error: Optional[Exception] = None):
        self.resources = resources or []
        self.error = error
        self.calls = 0

    async def list_active(self, project_id: str) -> List[Resource]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.resources)


class FakeCodeIndex:
    def __init__(
        self,
        status: Optional[IndexStatus] = None,
        hits: Optional[List[CodeHit]] = None,
        routes: Optional[List[SymbolHit]] = None,
        fallback: Optional[List[CodeHit]] = None,
        error: Optional[Exception] = None,
    ):
        self.status = status
        self.hits = hits or []
        self.routes = routes or []
        self.fallback = fallback or []
        self.error = error
        self.queries: List[str] = []
        self.fallback_queries: List[str] = []
        self.route_queries: List[str] = []

    async def get_status(self, project_id: str) -> Optional[IndexStatus]:
        if self.error:
            raise self.error
        return self.status

    async def search(self, project_id: str, query: str, limit: int) -> List[CodeHit]:
        self.queries.append(query)
        return self.hits[:limit]

    async def search_route_symbols(self, project_id: str, endpoint: str, limit: int) -> List[SymbolHit]:
        self.route_queries.append(endpoint)
        return self.routes[:limit]

    async def raw_source_fallback_search(self, deployment: Deployment, query: str, limit: int) -> List[CodeHit]:
        self.fallback_queries.append(query)
        return self.fallback[:limit]


class FakeSqlStore:
    def __init__(self, tables: Optional[Dict[str, List[str]]] = None, error: Optional[Exception] = None):
        self.tables = tables or {}
        self.error = error
        self.calls: List[tuple] = []

    async def table_exists(self, database_ref: str, table_name: str) -> bool:
        self.calls.append((database_ref, table_name))
        if self.error:
            raise self.error
        if database_ref not in self.tables:
            raise CollaboratorError(f"Database {database_ref} not found")
        return table_name in self.tables[database_ref]


class FakeTranscripts:
    def __init__(self, transcripts: Optional[Dict[str, str]] = None):
        self.transcripts = transcripts or {}

    async def get(self, project_id: str, deployment_id: str) -> Optional[str]:
        return self.transcripts.get(deployment_id)


class FakeLLMProvider(BaseLLMProvider):
    """Returns scripted content, or raises the scripted error."""

    def __init__(self, content: str = "", error: Optional[Exception] = None):
        super().__init__(api_key="test-key", model="fake-model")
        self.content = content
        self.error = error
        self.messages: List[List[Dict[str, str]]] = []

    async def chat(self, messages, temperature=None, max_tokens=None):
        self.messages.append(messages)
        if self.error:
            raise self.error
        return {"content": self.content, "usage": {}, "model": self.model, "finish_reason": "end_turn"}

    def get_provider_name(self) -> str:
        return "fake"


def probe_returning(status: int, body: str = "", calls: Optional[list] = None) -> EndpointProbeSource:
    """An endpoint probe whose HTTP traffic is answered by MockTransport."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status, text=body)

    return EndpointProbeSource(timeout=2, body_chars=600, transport=httpx.MockTransport(handler))


def failing_probe(message: str = "connection refused") -> EndpointProbeSource:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(message, request=request)

    return EndpointProbeSource(timeout=2, transport=httpx.MockTransport(handler))


def make_settings(**overrides) -> Settings:
    values = dict(
        anthropic_api_key="",
        request_deadline_s=5,
        source_timeout_s=2,
        synthesis_timeout_s=2,
        live_check_budget=4,
    )
    values.update(overrides)
    return Settings(**values)


def build_service(
    project: Optional[Project] = None,
    deployments: Optional[FakeDeployments] = None,
    resources: Optional[FakeResources] = None,
    code_index: Optional[FakeCodeIndex] = None,
    sql: Optional[FakeSqlStore] = None,
    transcripts: Optional[FakeTranscripts] = None,
    provider: Optional[BaseLLMProvider] = None,
    probe: Optional[EndpointProbeSource] = None,
    **settings_overrides,
) -> AskService:
    project = project or Project(id="proj_1", slug="todo-app", owner_username="alice")
    return AskService(
        projects=FakeProjects(project),
        deployments=deployments or FakeDeployments([]),
        resources=resources or FakeResources(),
        code_index=code_index or FakeCodeIndex(),
        sql=sql or FakeSqlStore(),
        transcripts=transcripts or FakeTranscripts(),
        synthesizer=AnswerSynthesizer(provider),
        probe=probe or probe_returning(200, "ok"),
        config=make_settings(**settings_overrides),
    )
