"""Generation Backend Port Interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

from ..domain import RetrievalResult


class GenerationPort(ABC):
    """Abstract interface for text generation backends."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Identifier of the model in use."""
        ...

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the client (credentials, connection)."""
        ...

    @abstractmethod
    def generate_response(
        self,
        query: str,
        context_docs: list[RetrievalResult],
        *,
        history: list[dict[str, str]] | None = None,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """Generate a full answer.

        A ``system_prompt`` of None means the backend's default
        context-grounded prompt.
        """
        ...

    @abstractmethod
    def generate_streaming_response(
        self,
        query: str,
        context_docs: list[RetrievalResult],
        options: dict[str, Any] | None = None,
    ) -> Iterator[str]:
        """Generate an answer as a lazy, finite sequence of text chunks."""
        ...
