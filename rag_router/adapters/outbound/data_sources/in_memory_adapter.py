"""Process-local document store implementing the data source port."""

import logging
import threading
from collections.abc import Callable, Iterable

from ....common.utils import tokenize
from ....core.domain import Document, RetrievalResult
from ....core.domain.exceptions import DataSourceError, DocumentNotFoundError
from ....core.ports.data_source_port import DataSourcePort

logger = logging.getLogger(__name__)

DocumentLoader = Callable[[], Iterable[Document]]


class InMemoryDataSource(DataSourcePort):
    """Keeps documents in insertion order and searches them by keyword overlap.

    An optional ``loader`` supplies the document set on ``initialize`` and
    again on every ``load_documents`` (used by index refreshes).
    """

    def __init__(
        self,
        documents: Iterable[Document] | None = None,
        loader: DocumentLoader | None = None,
    ) -> None:
        self._documents: dict[str, Document] = {}
        self._loader = loader
        self._lock = threading.Lock()
        self._next_id = 1
        self.initialized = False
        for document in documents or []:
            self._store(document)

    def _store(self, document: Document) -> str:
        doc_id = document.id
        if not doc_id:
            while f"doc_{self._next_id}" in self._documents:
                self._next_id += 1
            doc_id = f"doc_{self._next_id}"
            self._next_id += 1
        self._documents[doc_id] = Document(
            id=doc_id, content=document.content, metadata=dict(document.metadata or {})
        )
        return doc_id

    def initialize(self) -> None:
        if self.initialized:
            return
        if self._loader is not None:
            self.load_documents()
        self.initialized = True
        logger.info("In-memory data source ready with %d documents", len(self._documents))

    def load_documents(self) -> None:
        if self._loader is None:
            return
        try:
            documents = list(self._loader())
        except Exception as e:
            raise DataSourceError("Document loader failed", cause=e) from e

        with self._lock:
            self._documents = {}
            self._next_id = 1
            for document in documents:
                self._store(document)
        logger.debug("Reloaded %d documents", len(documents))

    def get_documents(self) -> list[Document]:
        return list(self._documents.values())

    def get_document(self, doc_id: str) -> Document:
        try:
            return self._documents[doc_id]
        except KeyError as e:
            raise DocumentNotFoundError(
                f"Document not found: {doc_id}", context={"id": doc_id}
            ) from e

    def search(self, query: str, limit: int = 5) -> list[RetrievalResult]:
        """Score documents by the fraction of query terms they contain."""
        terms = set(tokenize(query))
        if not terms or limit <= 0:
            return []

        scored = []
        for document in self._documents.values():
            overlap = terms & set(tokenize(document.content))
            if overlap:
                scored.append((len(overlap) / len(terms), document))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            RetrievalResult(id=doc.id, content=doc.content, metadata=doc.metadata, score=score)
            for score, doc in scored[:limit]
        ]

    def add_document(self, document: Document) -> str:
        with self._lock:
            return self._store(document)

    def get_document_count(self) -> int:
        return len(self._documents)

    def close(self) -> None:
        self.initialized = False
