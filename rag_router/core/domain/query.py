"""Query, routing and result models for the orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from .document import RetrievalResult

PREVIEW_LENGTH = 200


class QueryMode(str, Enum):
    """How an answer is generated.

    Attributes:
        AUTO: Pick HYBRID or LLM from retrieval relevance.
        RAG: Ground the answer in retrieved context only.
        HYBRID: Quote retrieved context, then add model knowledge.
        LLM: Answer without retrieved context.
    """

    AUTO = "auto"
    RAG = "rag"
    HYBRID = "hybrid"
    LLM = "llm"


class RoutingReason(str, Enum):
    """Relevance classification of a retrieval."""

    NO_DOCUMENTS = "no_documents"
    LOW_RELEVANCE = "low_relevance"
    RELEVANT_CONTENT = "relevant_content"


@dataclass
class QueryWarnings:
    """Non-blocking warnings attached to an allowed query."""

    sensitive_topics: list[str]
    message: str


@dataclass
class QueryValidationResult:
    """Outcome of validating an incoming query."""

    allowed: bool
    reason: str | None = None
    sanitized: str | None = None
    warnings: QueryWarnings | None = None


@dataclass
class ResponseValidationResult:
    """Outcome of validating a generated response."""

    allowed: bool
    reason: str | None = None
    sanitized: str | None = None


@dataclass
class DocumentValidationResult:
    """Outcome of checking a context document before generation."""

    allowed: bool
    reason: str | None = None


@dataclass
class RoutingInfo:
    """Relevance summary of a retrieval, reported with query results."""

    top_score: float
    avg_score: float
    doc_count: int

    @classmethod
    def from_results(cls, results: list[RetrievalResult]) -> "RoutingInfo":
        if not results:
            return cls(top_score=0.0, avg_score=0.0, doc_count=0)
        return cls(
            top_score=results[0].score,
            avg_score=sum(r.score for r in results) / len(results),
            doc_count=len(results),
        )


@dataclass
class RoutingDecision:
    """Whether retrieved context is relevant enough to ground an answer."""

    use_rag: bool
    reason: RoutingReason
    top_score: float = 0.0
    avg_score: float = 0.0
    docs: list[RetrievalResult] = field(default_factory=list)


@dataclass
class QueryOptions:
    """Per-call options for ``QueryOrchestrator.query``.

    ``mode`` and ``top_k`` fall back to the orchestrator defaults when None.
    A non-empty ``system_prompt`` is used verbatim instead of the mode prompt.
    """

    mode: QueryMode | None = None
    top_k: int | None = None
    user_id: str = "default"
    system_prompt: str | None = None
    history: list[dict[str, str]] | None = None
    temperature: float | None = None


def make_preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    """Truncate ``content`` to ``length`` characters, marking the cut with '...'."""
    if len(content) > length:
        return content[:length] + "..."
    return content


@dataclass
class SourceDocument:
    """A context document as reported back to the caller."""

    id: str
    content: str
    preview: str
    metadata: dict[str, Any]
    score: float

    @classmethod
    def from_result(cls, result: RetrievalResult) -> "SourceDocument":
        return cls(
            id=result.id,
            content=result.content,
            preview=make_preview(result.content),
            metadata=result.metadata,
            score=result.score,
        )


@dataclass
class QueryResult:
    """Assembled answer returned by the orchestrator.

    Attributes:
        answer: Final answer text (or the blocked/safe substitute).
        sources: Context documents that passed document validation.
        query: The sanitized query.
        mode: The resolved generation mode.
        routing: Relevance summary, None when retrieval was skipped.
        warnings: Sensitive-topic warnings from query validation.
        blocked: True when the query itself was rejected.
        reason: Rejection reason for a blocked query.
    """

    answer: str
    sources: list[SourceDocument]
    query: str
    mode: QueryMode
    routing: RoutingInfo | None = None
    warnings: QueryWarnings | None = None
    blocked: bool = False
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert the result to a JSON-serializable dictionary."""
        return {
            "answer": self.answer,
            "sources": [
                {
                    "id": s.id,
                    "content": s.content,
                    "preview": s.preview,
                    "metadata": s.metadata,
                    "score": s.score,
                }
                for s in self.sources
            ],
            "query": self.query,
            "mode": self.mode.value,
            "routing": (
                {
                    "top_score": self.routing.top_score,
                    "avg_score": self.routing.avg_score,
                    "doc_count": self.routing.doc_count,
                }
                if self.routing
                else None
            ),
            "warnings": (
                {
                    "sensitive_topics": self.warnings.sensitive_topics,
                    "message": self.warnings.message,
                }
                if self.warnings
                else None
            ),
            "blocked": self.blocked,
            "reason": self.reason,
        }


StreamEventType = Literal["sources", "content", "done"]


@dataclass
class StreamEvent:
    """One event of a streamed answer.

    A stream is one ``sources`` event, zero or more ``content`` events and a
    terminal ``done`` event.
    """

    type: StreamEventType
    sources: list[SourceDocument] | None = None
    content: str | None = None
