"""Exception hierarchy for the RAG router.

Each exception carries an error code, the location it was raised from,
an optional cause and a ``to_dict`` form for structured logging.

    from rag_router.core.domain.exceptions import RagRouterError, MissingComponentError
"""

# Base classes
from .base import RagRouterError, RaiseLocation

# Configuration exceptions
from .configuration import (
    ConfigurationError,
    EngineNotInitializedError,
    InvalidConfigurationError,
    MissingComponentError,
)

# Data source exceptions
from .data_source import (
    DataSourceError,
    DocumentNotFoundError,
)

# Embedding exceptions
from .embedding import (
    EmbeddingError,
    VocabularyNotBuiltError,
)

# Generation exceptions
from .generation import (
    GenerationConnectionError,
    GenerationError,
    GenerationFailedError,
)

# Retrieval exceptions
from .retrieval import (
    DimensionMismatchError,
    RetrievalError,
)

__all__ = [
    # Base
    "RaiseLocation",
    "RagRouterError",
    # Configuration
    "ConfigurationError",
    "MissingComponentError",
    "InvalidConfigurationError",
    "EngineNotInitializedError",
    # Data source
    "DataSourceError",
    "DocumentNotFoundError",
    # Embedding
    "EmbeddingError",
    "VocabularyNotBuiltError",
    # Generation
    "GenerationError",
    "GenerationConnectionError",
    "GenerationFailedError",
    # Retrieval
    "RetrievalError",
    "DimensionMismatchError",
]
