"""Composition root wiring settings and adapters into the orchestrator."""

from __future__ import annotations

import logging

from ..config import Settings, settings, setup_logging
from ..core.domain import QueryMode
from ..core.ports.data_source_port import DataSourcePort
from ..core.ports.generation_port import GenerationPort
from ..core.services.guardrails import Guardrails, RateLimitConfig
from ..core.services.query_orchestrator import QueryOrchestrator
from ..core.services.tfidf_embeddings import TfidfEmbeddings

logger = logging.getLogger(__name__)


def configure_logging(config: Settings = settings) -> logging.Logger:
    return setup_logging(
        level=config.log_level, log_file=config.log_file, json_format=config.log_json
    )


def build_guardrails(config: Settings = settings) -> Guardrails | None:
    if not config.guardrails_enabled:
        logger.info("Guardrails disabled by configuration")
        return None

    rate_limit = None
    if config.rate_limit_enabled:
        rate_limit = RateLimitConfig(
            requests=config.rate_limit_requests, window_ms=config.rate_limit_window_ms
        )

    return Guardrails(
        enabled=True,
        blocked_terms=config.blocked_term_list,
        sensitive_topics=config.sensitive_topic_list,
        max_query_length=config.max_query_length,
        max_response_length=config.max_response_length,
        rate_limit=rate_limit,
    )


def build_generation_backend(config: Settings = settings) -> GenerationPort:
    from ..adapters.llm.gemini_llm import GeminiGenerationBackend

    logger.info("Initializing GeminiGenerationBackend...")
    return GeminiGenerationBackend(api_key=config.google_api_key, model=config.llm_model)


def build_orchestrator(
    data_source: DataSourcePort,
    llm: GenerationPort | None = None,
    config: Settings = settings,
) -> QueryOrchestrator:
    """Assemble a QueryOrchestrator from settings.

    ``llm`` defaults to the Gemini backend configured in ``config``.
    """
    logger.info("Initializing QueryOrchestrator (composition root)...")
    return QueryOrchestrator(
        data_source=data_source,
        llm=llm or build_generation_backend(config),
        embeddings=TfidfEmbeddings(dimension=config.embedding_dimension),
        guardrails=build_guardrails(config),
        top_k=config.top_k,
        similarity_threshold=config.similarity_threshold,
        routing_threshold=config.routing_threshold,
        default_mode=QueryMode(config.default_mode),
    )
