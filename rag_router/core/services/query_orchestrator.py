"""Query orchestration: validation, retrieval, routing, generation, moderation."""

import logging
import threading
from collections.abc import Generator

from ...common.exception_handler import log_exception
from ..domain import (
    Document,
    QueryMode,
    QueryOptions,
    QueryResult,
    RetrievalResult,
    RoutingDecision,
    RoutingInfo,
    SourceDocument,
    StreamEvent,
)
from ..domain.exceptions import (
    EngineNotInitializedError,
    InvalidConfigurationError,
    MissingComponentError,
)
from ..ports.data_source_port import DataSourcePort
from ..ports.embedding_port import EmbeddingPort
from ..ports.generation_port import GenerationPort
from .guardrails import Guardrails
from .retrieval_service import RetrievalService
from .routing_service import RoutingService

logger = logging.getLogger(__name__)


class QueryOrchestrator:
    """Runs a query through the retrieval-and-routing pipeline.

    Ordering of ``query``:

    1. Retrieve candidates (unless mode is LLM) and summarize their scores.
    2. Resolve the mode and its system prompt. A caller-supplied prompt
       bypasses resolution: the requested mode is kept (AUTO stays AUTO) and
       the filtered context is passed through.
    3. Validate the query; a rejection returns a blocked result and nothing
       is generated.
    4. Drop context documents that fail document validation.
    5. Generate from the sanitized query and the filtered context.
    6. Validate the response; a rejection replaces only the answer text.
    7. Apply response policies once, against the validated query.
    8. Assemble the result.

    Collaborator errors are logged and propagated unchanged.
    """

    def __init__(
        self,
        data_source: DataSourcePort | None,
        llm: GenerationPort | None,
        embeddings: EmbeddingPort | None = None,
        guardrails: Guardrails | None = None,
        top_k: int = 10,
        similarity_threshold: float = 0.15,
        routing_threshold: float = 0.25,
        default_mode: QueryMode = QueryMode.HYBRID,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            data_source: Document store (required).
            llm: Generation backend (required).
            embeddings: Optional embedding function for the vector index.
                Without it retrieval uses the data source's own search.
            guardrails: Optional safety pipeline.
            top_k: Default number of documents to retrieve.
            similarity_threshold: Minimum cosine score for vector candidates.
            routing_threshold: Minimum top score for AUTO to pick HYBRID.
            default_mode: Mode used when the caller does not request one.

        Raises:
            MissingComponentError: If the data source or generation backend
                is missing.
        """
        if data_source is None:
            raise MissingComponentError("Data source is required")
        if llm is None:
            raise MissingComponentError("Generation backend is required")
        if top_k <= 0:
            raise InvalidConfigurationError("top_k must be positive", context={"top_k": top_k})

        self.data_source = data_source
        self.llm = llm
        self.embeddings = embeddings
        self.guardrails = guardrails
        self.top_k = top_k
        self.default_mode = default_mode
        self.retrieval = RetrievalService(data_source, embeddings, similarity_threshold)
        self.routing = RoutingService(routing_threshold)
        self.initialized = False
        self._refresh_lock = threading.Lock()

    @property
    def similarity_threshold(self) -> float:
        return self.retrieval.similarity_threshold

    @property
    def routing_threshold(self) -> float:
        return self.routing.routing_threshold

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Initialize collaborators and build the vector index."""
        self.data_source.initialize()
        self.llm.initialize()

        if self.embeddings is not None:
            self.retrieval.build_index(self.data_source.get_documents())

        self.initialized = True
        logger.info(
            "Query orchestrator initialized (%d documents, model=%s)",
            self._document_count(),
            self.llm.model,
        )

    def refresh(self) -> None:
        """Reload documents, rebuild the vocabulary and swap in a new index.

        The new vocabulary and vectors are built off to the side and published
        together, so queries running during a refresh score against either the
        old index or the new one in full.
        """
        with self._refresh_lock:
            self.data_source.load_documents()
            if self.embeddings is not None:
                self.retrieval.build_index(self.data_source.get_documents())
        logger.info("Index refreshed with %d documents", self._document_count())

    def close(self) -> None:
        self.data_source.close()
        self.initialized = False

    def _requested_mode(self, options: QueryOptions) -> QueryMode:
        if not options.mode:
            return self.default_mode
        try:
            return QueryMode(options.mode)
        except ValueError as e:
            raise InvalidConfigurationError(
                f"Unknown query mode: {options.mode}", cause=e, context={"mode": options.mode}
            ) from e

    def _ensure_initialized(self) -> None:
        if not self.initialized:
            raise EngineNotInitializedError(
                "Query orchestrator not initialized. Call initialize() first."
            )

    # ------------------------------------------------------------------
    # Corpus
    # ------------------------------------------------------------------

    def add_document(self, document: Document) -> str:
        """Store a document and index it under the id the data source assigns."""
        doc_id = self.data_source.add_document(document)
        stored = Document(id=doc_id, content=document.content, metadata=document.metadata or {})
        self.retrieval.index_document(stored)
        return doc_id

    def retrieve(self, query: str, top_k: int | None = None) -> list[RetrievalResult]:
        return self.retrieval.retrieve(query, top_k or self.top_k)

    def route_query(self, query: str) -> RoutingDecision:
        """Retrieve with the default ``top_k`` and classify relevance."""
        return self.routing.decide(self.retrieve(query, self.top_k))

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def query(self, query: str, options: QueryOptions | None = None) -> QueryResult:
        """Answer ``query`` through the full guardrailed pipeline."""
        self._ensure_initialized()
        options = options or QueryOptions()
        top_k = options.top_k or self.top_k
        mode = self._requested_mode(options)

        retrieved: list[RetrievalResult] = []
        routing_info: RoutingInfo | None = None
        if mode is not QueryMode.LLM:
            retrieved = self.retrieve(query, top_k)
            routing_info = RoutingInfo.from_results(retrieved)

        if options.system_prompt:
            resolved_mode, system_prompt = mode, options.system_prompt
        else:
            resolved_mode, system_prompt = self.routing.resolve_mode(mode, routing_info)

        warnings = None
        validated_query = query
        if self.guardrails is not None:
            validation = self.guardrails.validate_query(query, options.user_id)
            if not validation.allowed:
                logger.info(
                    "Query blocked",
                    extra={"user_id": options.user_id, "reason": validation.reason},
                )
                return QueryResult(
                    answer=f"I cannot process this query: {validation.reason}",
                    sources=[],
                    query=validation.sanitized or query,
                    mode=resolved_mode,
                    routing=routing_info,
                    blocked=True,
                    reason=validation.reason,
                )
            validated_query = validation.sanitized
            warnings = validation.warnings

        context_docs = retrieved
        if self.guardrails is not None:
            context_docs = [
                doc for doc in retrieved if self.guardrails.validate_document(doc.content).allowed
            ]

        try:
            answer = self.llm.generate_response(
                validated_query,
                [] if resolved_mode is QueryMode.LLM else context_docs,
                history=options.history,
                system_prompt=system_prompt,
                temperature=options.temperature,
            )
        except Exception as exc:
            log_exception(
                exc, logger, extra_context={"stage": "generation", "mode": resolved_mode.value}
            )
            raise

        final_answer = answer
        if self.guardrails is not None:
            response_validation = self.guardrails.validate_response(answer)
            if not response_validation.allowed:
                logger.info("Response blocked", extra={"reason": response_validation.reason})
                final_answer = f"Response blocked: {response_validation.reason}"
            else:
                final_answer = self.guardrails.apply_response_policies(
                    response_validation.sanitized, validated_query
                )

        logger.debug(
            "Query answered",
            extra={
                "user_id": options.user_id,
                "mode": resolved_mode.value,
                "source_count": len(context_docs),
            },
        )

        return QueryResult(
            answer=final_answer,
            sources=[SourceDocument.from_result(doc) for doc in context_docs],
            query=validated_query,
            mode=resolved_mode,
            routing=routing_info,
            warnings=warnings,
        )

    def query_stream(
        self, query: str, options: QueryOptions | None = None
    ) -> Generator[StreamEvent, None, None]:
        """Stream an answer as ``sources``, ``content``... and ``done`` events.

        Guardrails are not applied on this path; per-chunk moderation is not
        supported.
        """
        self._ensure_initialized()
        options = options or QueryOptions()
        top_k = options.top_k or self.top_k
        mode = self._requested_mode(options)

        retrieved = [] if mode is QueryMode.LLM else self.retrieve(query, top_k)
        yield StreamEvent(
            type="sources", sources=[SourceDocument.from_result(doc) for doc in retrieved]
        )

        stream_options = {
            "history": options.history,
            "system_prompt": options.system_prompt,
            "temperature": options.temperature,
        }
        for chunk in self.llm.generate_streaming_response(query, retrieved, stream_options):
            yield StreamEvent(type="content", content=chunk)

        yield StreamEvent(type="done")

    # ------------------------------------------------------------------
    # Introspection and configuration
    # ------------------------------------------------------------------

    def _document_count(self) -> int:
        return self.retrieval.index_size or self.data_source.get_document_count()

    def get_stats(self) -> dict:
        stats = {
            "initialized": self.initialized,
            "document_count": self._document_count(),
            "top_k": self.top_k,
            "similarity_threshold": self.similarity_threshold,
            "routing_threshold": self.routing_threshold,
            "default_mode": self.default_mode.value,
            "data_source_type": type(self.data_source).__name__,
            "llm_model": self.llm.model,
            "embedding_dimension": self.embeddings.get_dimension() if self.embeddings else None,
        }
        if self.guardrails is not None:
            stats["guardrails"] = self.guardrails.get_stats()
        return stats

    def update_config(
        self,
        top_k: int | None = None,
        similarity_threshold: float | None = None,
        routing_threshold: float | None = None,
    ) -> None:
        """Update retrieval settings; None leaves a value unchanged."""
        if top_k is not None:
            if top_k <= 0:
                raise InvalidConfigurationError("top_k must be positive", context={"top_k": top_k})
            self.top_k = top_k
        if similarity_threshold is not None:
            self.retrieval.similarity_threshold = similarity_threshold
        if routing_threshold is not None:
            self.routing.routing_threshold = routing_threshold
