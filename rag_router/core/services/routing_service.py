"""Relevance classification and generation-mode resolution."""

import logging

from ..domain import QueryMode, RetrievalResult, RoutingDecision, RoutingInfo, RoutingReason
from .prompts import DIRECT_LLM_PROMPT, HYBRID_PROMPT

logger = logging.getLogger(__name__)


class RoutingService:
    """Decides whether retrieved context should ground the answer."""

    def __init__(self, routing_threshold: float = 0.25) -> None:
        """Initialize the router.

        Args:
            routing_threshold: Minimum top score for context to count as relevant.
        """
        self.routing_threshold = routing_threshold

    def decide(self, results: list[RetrievalResult]) -> RoutingDecision:
        """Classify a retrieval as no_documents, low_relevance or relevant_content."""
        if not results:
            return RoutingDecision(use_rag=False, reason=RoutingReason.NO_DOCUMENTS, docs=[])

        info = RoutingInfo.from_results(results)
        if info.top_score < self.routing_threshold:
            reason = RoutingReason.LOW_RELEVANCE
        else:
            reason = RoutingReason.RELEVANT_CONTENT

        return RoutingDecision(
            use_rag=reason is RoutingReason.RELEVANT_CONTENT,
            reason=reason,
            top_score=info.top_score,
            avg_score=info.avg_score,
            docs=results,
        )

    def resolve_mode(
        self, mode: QueryMode, routing: RoutingInfo | None
    ) -> tuple[QueryMode, str | None]:
        """Resolve the requested mode to a concrete mode and system prompt.

        A prompt of None means the generation backend's default
        context-grounded prompt. AUTO resolves to HYBRID when the top score
        reaches the routing threshold and to LLM otherwise.
        """
        if mode is QueryMode.LLM:
            return QueryMode.LLM, DIRECT_LLM_PROMPT
        if mode is QueryMode.RAG:
            return QueryMode.RAG, None
        if mode is QueryMode.HYBRID:
            return QueryMode.HYBRID, HYBRID_PROMPT

        if routing is not None and routing.top_score >= self.routing_threshold:
            logger.debug("Auto routing -> hybrid (top score %.3f)", routing.top_score)
            return QueryMode.HYBRID, HYBRID_PROMPT

        logger.debug(
            "Auto routing -> llm (top score %s)", f"{routing.top_score:.3f}" if routing else "n/a"
        )
        return QueryMode.LLM, DIRECT_LLM_PROMPT
