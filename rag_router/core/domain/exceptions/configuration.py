"""Configuration and lifecycle exceptions."""

from .base import RagRouterError


class ConfigurationError(RagRouterError):
    """Configuration or wiring errors.

    Fatal: raised at construction or startup, never recovered from inside
    a query.
    """

    error_code = "RR_CFG_001"


class MissingComponentError(ConfigurationError):
    """A required collaborator (data source or generation backend) is missing."""

    error_code = "RR_CFG_002"


class InvalidConfigurationError(ConfigurationError):
    """Configuration value is invalid."""

    error_code = "RR_CFG_003"


class EngineNotInitializedError(ConfigurationError):
    """The orchestrator was used before ``initialize()`` completed."""

    error_code = "RR_CFG_004"
