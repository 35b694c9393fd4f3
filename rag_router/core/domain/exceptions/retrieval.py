"""Retrieval exceptions."""

from .base import RagRouterError


class RetrievalError(RagRouterError):
    """Error during document retrieval."""

    error_code = "RR_RET_001"


class DimensionMismatchError(RetrievalError):
    """A vector does not match the dimension of the active index."""

    error_code = "RR_RET_002"
