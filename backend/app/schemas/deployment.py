"""
Collaborator data models: projects, deployments, resources and the code index.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Project(BaseModel):
    """A deployed project as seen by the diagnostic engine."""

    id: str
    slug: str
    owner_username: Optional[str] = None
    base_url: Optional[str] = Field(default=None, description="Overrides the derived public URL")


class Deployment(BaseModel):
    """Immutable deployment record owned by the deployment registry."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: str
    source: str = "unknown"
    message: Optional[str] = None
    created_at: str
    artifact_key: Optional[str] = None
    has_session_transcript: bool = False


class Resource(BaseModel):
    """An active provisioned resource (database, bucket, queue, ...)."""

    id: str
    resource_type: str
    provider_id: Optional[str] = None
    status: str = "active"
    created_at: Optional[str] = None


class IndexStatus(BaseModel):
    """Status of the project's latest code index."""

    project_id: str
    deployment_id: str
    indexed_at: str
    parser_version: str = ""
    status: Literal["ready", "indexing", "failed"]
    file_count: int = 0
    symbol_count: int = 0
    chunk_count: int = 0
    last_duration_ms: int = 0
    error_message: Optional[str] = None


class CodeSymbol(BaseModel):
    """A symbol extracted by the code indexer."""

    path: str
    symbol: str
    kind: Literal["route", "function", "class", "export", "env_binding", "sql_ref"]
    line_start: Optional[int] = None
    line_end: Optional[int] = None
    signature: Optional[str] = None


class CodeChunk(BaseModel):
    """A line-bounded slice of a source file."""

    path: str
    chunk_index: int
    line_start: Optional[int] = None
    line_end: Optional[int] = None
    content: str


class CodeHit(BaseModel):
    """A code search result."""

    path: str
    chunk_index: Optional[int] = None
    line_start: Optional[int] = None
    line_end: Optional[int] = None
    snippet: str


class SymbolHit(BaseModel):
    """A route-definition symbol matching an endpoint."""

    path: str
    symbol: str
    signature: Optional[str] = None
    line_start: Optional[int] = None
    line_end: Optional[int] = None


class ParsedSource(BaseModel):
    """Parser output for one file."""

    symbols: List[CodeSymbol] = Field(default_factory=list)
    chunks: List[CodeChunk] = Field(default_factory=list)
