"""Data Source Port Interface."""

from abc import ABC, abstractmethod

from ..domain import Document, RetrievalResult


class DataSourcePort(ABC):
    """Abstract interface for document stores.

    Concrete backends (files, relational, columnar, vector stores, search
    engines) each provide an adapter; the query pipeline never branches on
    the concrete type.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Open connections and load the initial document set."""
        ...

    @abstractmethod
    def get_documents(self) -> list[Document]:
        """Return all documents in a stable order."""
        ...

    @abstractmethod
    def search(self, query: str, limit: int = 5) -> list[RetrievalResult]:
        """Native (keyword) search, best match first."""
        ...

    @abstractmethod
    def add_document(self, document: Document) -> str:
        """Store a document and return its id."""
        ...

    @abstractmethod
    def get_document_count(self) -> int:
        """Number of stored documents."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release connections."""
        ...

    def load_documents(self) -> None:
        """Reload documents from the underlying store.

        Backends whose documents cannot change outside this process keep the
        default no-op.
        """
        return None
