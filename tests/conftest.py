"""
Pytest configuration and shared fixtures.
"""

from collections.abc import Iterator
from typing import Any

import pytest

from rag_router.adapters.outbound.data_sources.in_memory_adapter import InMemoryDataSource
from rag_router.core.domain import Document, RetrievalResult
from rag_router.core.ports.generation_port import GenerationPort


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (require API keys)")


class FakeGenerationBackend(GenerationPort):
    """Generation backend that records calls and returns canned text."""

    def __init__(
        self,
        response: str = "Generated answer",
        chunks: list[str] | None = None,
        error: Exception | None = None,
    ):
        self.response = response
        self.chunks = chunks if chunks is not None else ["Hello", " world"]
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.stream_calls: list[dict[str, Any]] = []
        self.initialized = False

    @property
    def model(self) -> str:
        return "fake-model"

    def initialize(self) -> None:
        self.initialized = True

    def generate_response(
        self,
        query: str,
        context_docs: list[RetrievalResult],
        *,
        history=None,
        system_prompt=None,
        temperature=None,
    ) -> str:
        self.calls.append(
            {
                "query": query,
                "context_docs": list(context_docs),
                "history": history,
                "system_prompt": system_prompt,
                "temperature": temperature,
            }
        )
        if self.error is not None:
            raise self.error
        return self.response

    def generate_streaming_response(
        self,
        query: str,
        context_docs: list[RetrievalResult],
        options: dict[str, Any] | None = None,
    ) -> Iterator[str]:
        self.stream_calls.append(
            {"query": query, "context_docs": list(context_docs), "options": options}
        )
        yield from self.chunks


class FakeClock:
    """Manually advanced clock for rate limit tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_corpus():
    """Three short documents about machine learning topics."""
    return [
        Document(
            id="doc1",
            content="Machine learning is a subset of artificial intelligence "
            "that enables systems to learn from data.",
            metadata={"source": "ml-intro"},
        ),
        Document(
            id="doc2",
            content="Deep learning uses neural networks with many layers "
            "to model complex patterns.",
            metadata={"source": "dl-intro"},
        ),
        Document(
            id="doc3",
            content="Natural language processing helps computers understand human language.",
            metadata={"source": "nlp-intro"},
        ),
    ]


@pytest.fixture
def data_source(sample_corpus):
    """In-memory data source seeded with the sample corpus."""
    return InMemoryDataSource(documents=sample_corpus)


@pytest.fixture
def fake_llm():
    """Recording generation backend."""
    return FakeGenerationBackend()


@pytest.fixture
def fake_clock():
    """Controllable monotonic clock."""
    return FakeClock()


@pytest.fixture
def make_llm():
    """Factory for generation backends with a custom response, chunks or error."""
    return FakeGenerationBackend
