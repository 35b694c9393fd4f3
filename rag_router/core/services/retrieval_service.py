"""Score-thresholded retrieval over the vector index or the data source."""

import logging
from collections.abc import Iterable
from typing import Any

from ..domain import Document, IndexedDocument, RetrievalResult
from ..domain.exceptions import InvalidConfigurationError
from ..ports.data_source_port import DataSourcePort
from ..ports.embedding_port import EmbeddingPort
from .vector_index import VectorIndex

logger = logging.getLogger(__name__)


class RetrievalService:
    """Returns a ranked, score-thresholded candidate set for a query."""

    # Candidates fetched per requested result before threshold filtering
    CANDIDATE_MULTIPLIER = 2

    def __init__(
        self,
        data_source: DataSourcePort,
        embeddings: EmbeddingPort | None = None,
        similarity_threshold: float = 0.15,
    ) -> None:
        """Initialize the retriever.

        Args:
            data_source: Store used for native keyword search when no vector
                index is available.
            embeddings: Optional embedding function backing the vector index.
            similarity_threshold: Minimum cosine score a candidate must reach.
        """
        self.data_source = data_source
        self.embeddings = embeddings
        self.similarity_threshold = similarity_threshold
        self.index = VectorIndex(embeddings.get_dimension()) if embeddings else None

    @property
    def index_size(self) -> int:
        return len(self.index) if self.index is not None else 0

    def _to_indexed(self, document: Document, vocabulary: Any) -> IndexedDocument:
        vector = self.embeddings.embed(document.content, vocabulary)
        return IndexedDocument(
            id=document.id,
            content=document.content,
            metadata=document.metadata,
            vector=tuple(vector),
        )

    def build_index(self, documents: Iterable[Document], vocabulary: Any = None) -> int:
        """Embed every document into a new index and swap it in.

        Without ``vocabulary`` one is fitted to ``documents`` first. The
        vectors and the vocabulary they were built from are published
        together, so a concurrent ``retrieve`` never pairs a query embedded
        with one vocabulary against vectors from another.

        Returns:
            Number of documents indexed.
        """
        if self.embeddings is None or self.index is None:
            return 0

        documents = list(documents)
        if vocabulary is None:
            vocabulary = self.embeddings.build_vocabulary([doc.content for doc in documents])

        entries = [self._to_indexed(doc, vocabulary) for doc in documents]
        self.index.replace(entries, vocabulary)
        logger.info("Vector index built with %d documents", len(entries))
        return len(entries)

    def index_document(self, document: Document) -> None:
        """Embed one document and add it to the active index."""
        if self.embeddings is None or self.index is None:
            return
        # Re-embed if a rebuild swapped the vocabulary underneath us
        while True:
            vocabulary = self.index.snapshot().vocabulary
            if self.index.add(self._to_indexed(document, vocabulary), vocabulary):
                return

    def retrieve(self, query: str, top_k: int) -> list[RetrievalResult]:
        """Retrieve at most ``top_k`` results, best first.

        Uses the vector index when it is populated, otherwise the data
        source's own search.
        """
        if top_k <= 0:
            raise InvalidConfigurationError("top_k must be positive", context={"top_k": top_k})

        if self.embeddings is not None and self.index is not None and len(self.index) > 0:
            return self._retrieve_by_vector(query, top_k)

        if self.embeddings is not None:
            logger.debug("Vector index empty; falling back to data source search")
        return list(self.data_source.search(query, top_k))[:top_k]

    def _retrieve_by_vector(self, query: str, top_k: int) -> list[RetrievalResult]:
        # One snapshot per call so a concurrent rebuild cannot mix indexes
        snapshot = self.index.snapshot()
        entries = snapshot.entries
        query_vector = self.embeddings.embed(query, snapshot.vocabulary)
        matches = self.embeddings.find_similar(
            query_vector, list(entries.values()), top_k * self.CANDIDATE_MULTIPLIER
        )

        results = [
            self._to_result(entries[m.id], m.score)
            for m in matches
            if m.score >= self.similarity_threshold
        ][:top_k]

        # Never return nothing while candidates exist
        if not results and matches:
            logger.debug(
                "No candidate reached similarity threshold %.2f; returning best %d",
                self.similarity_threshold,
                top_k,
            )
            results = [self._to_result(entries[m.id], m.score) for m in matches[:top_k]]

        return results

    @staticmethod
    def _to_result(entry: IndexedDocument, score: float) -> RetrievalResult:
        return RetrievalResult(
            id=entry.id, content=entry.content, metadata=entry.metadata, score=score
        )
