"""Data source exceptions."""

from .base import RagRouterError


class DataSourceError(RagRouterError):
    """Base error for document store operations."""

    error_code = "RR_DSR_001"


class DocumentNotFoundError(DataSourceError):
    """Requested document does not exist."""

    error_code = "RR_DSR_002"
