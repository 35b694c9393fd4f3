"""Generation backend exceptions."""

from .base import RagRouterError


class GenerationError(RagRouterError):
    """Base error for text generation backends."""

    error_code = "RR_GEN_001"


class GenerationConnectionError(GenerationError):
    """Failed to reach the generation provider.

    Common causes:
    - Missing or invalid API key
    - Network issues
    - Service unavailable
    """

    error_code = "RR_GEN_002"


class GenerationFailedError(GenerationError):
    """The provider returned no usable text.

    Common causes:
    - Content filtered by provider safety settings
    - Token limit exceeded
    """

    error_code = "RR_GEN_003"
