"""Embedding Port Interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from ..domain import IndexedDocument, SimilarityMatch


class EmbeddingPort(ABC):
    """Abstract interface for corpus-fitted embedding functions.

    A fitted vocabulary is an opaque, immutable value. Callers that must keep
    query and document vectors consistent pass the vocabulary explicitly to
    ``embed`` instead of relying on the current one.
    """

    @abstractmethod
    def initialize(self, corpus_texts: Sequence[str]) -> None: ...

    @abstractmethod
    def build_vocabulary(self, corpus_texts: Sequence[str]) -> Any:
        """Fit a vocabulary, make it current and return it."""
        ...

    @abstractmethod
    def embed(self, text: str, vocabulary: Any = None) -> list[float]:
        """Embed with ``vocabulary``, or with the current one when None."""
        ...

    @abstractmethod
    def find_similar(
        self,
        query_vector: Sequence[float],
        candidates: Sequence[IndexedDocument],
        k: int,
    ) -> list[SimilarityMatch]: ...

    @abstractmethod
    def get_dimension(self) -> int: ...
