"""
Ask-project request, evidence and response models.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

EvidenceType = Literal[
    "endpoint_test",
    "log_event",
    "sql_result",
    "deployment_event",
    "env_snapshot",
    "code_chunk",
    "code_symbol",
    "index_status",
    "session_transcript",
]
Relation = Literal["supports", "conflicts", "gap"]
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
Confidence = Literal["high", "medium", "low"]


class AskHints(BaseModel):
    """Optional caller hints that narrow the investigation."""

    endpoint: Optional[str] = Field(default=None, description="Endpoint path to probe, e.g. /api/todos")
    method: HttpMethod = Field(default="GET", description="HTTP method for the probe")
    deployment_id: Optional[str] = Field(default=None, description="Deployment id or id suffix")

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if value is None:
            return "GET"
        return value.upper() if isinstance(value, str) else value


class AskRequest(BaseModel):
    """Request body for asking a question about a deployed project."""

    question: str = Field(..., description="Free-text question; must be non-empty after trim")
    hints: Optional[AskHints] = None


class Evidence(BaseModel):
    """One redacted, timestamped observation."""

    id: str = Field(..., description="Sequential id, ev_001, ev_002, ...")
    type: EvidenceType
    source: str = Field(..., description="Adapter that produced the item")
    summary: str = Field(..., description="Redacted summary, at most 500 characters")
    timestamp: str
    relation: Relation
    meta: Optional[Dict[str, Any]] = None


class EnhancedAnswer(BaseModel):
    """Fields the generative synthesizer may supply."""

    answer: str
    root_cause: Optional[str] = None
    suggested_fix: Optional[str] = None
    confidence: Confidence = "low"


class AskResponse(BaseModel):
    """Assembled answer. Optional fields are only set by the synthesizer."""

    answer: str
    evidence: List[Evidence] = Field(default_factory=list)
    root_cause: Optional[str] = None
    suggested_fix: Optional[str] = None
    confidence: Optional[Confidence] = None
