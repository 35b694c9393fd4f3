"""Retrieval-and-routing query pipeline with guardrails."""

from .core.domain import Document, QueryMode, QueryOptions, QueryResult, StreamEvent
from .core.services.guardrails import Guardrails, RateLimitConfig
from .core.services.query_orchestrator import QueryOrchestrator
from .core.services.tfidf_embeddings import TfidfEmbeddings

__version__ = "0.1.0"

__all__ = [
    "Document",
    "QueryMode",
    "QueryOptions",
    "QueryResult",
    "StreamEvent",
    "Guardrails",
    "RateLimitConfig",
    "QueryOrchestrator",
    "TfidfEmbeddings",
]
