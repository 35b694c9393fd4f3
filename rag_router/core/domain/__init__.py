"""Domain models for the RAG router.

- document: Document, IndexedDocument, RetrievalResult, SimilarityMatch
- query: modes, validation results, routing decisions and query results

All models are re-exported here:

    from rag_router.core.domain import Document, QueryMode, QueryResult
"""

from .document import Document, IndexedDocument, RetrievalResult, SimilarityMatch
from .query import (
    PREVIEW_LENGTH,
    DocumentValidationResult,
    QueryMode,
    QueryOptions,
    QueryResult,
    QueryValidationResult,
    QueryWarnings,
    ResponseValidationResult,
    RoutingDecision,
    RoutingInfo,
    RoutingReason,
    SourceDocument,
    StreamEvent,
    make_preview,
)

__all__ = [
    # Document models
    "Document",
    "IndexedDocument",
    "RetrievalResult",
    "SimilarityMatch",
    # Query models
    "PREVIEW_LENGTH",
    "QueryMode",
    "QueryOptions",
    "QueryResult",
    "QueryValidationResult",
    "QueryWarnings",
    "ResponseValidationResult",
    "DocumentValidationResult",
    "RoutingDecision",
    "RoutingInfo",
    "RoutingReason",
    "SourceDocument",
    "StreamEvent",
    "make_preview",
]
