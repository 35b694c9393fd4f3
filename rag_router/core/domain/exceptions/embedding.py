"""Embedding exceptions."""

from .base import RagRouterError


class EmbeddingError(RagRouterError):
    """Failed to generate embeddings."""

    error_code = "RR_EMB_001"


class VocabularyNotBuiltError(EmbeddingError):
    """Text was embedded before a corpus vocabulary was built."""

    error_code = "RR_EMB_002"
