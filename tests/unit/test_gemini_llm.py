"""Tests for the Gemini generation backend with a mocked client."""

from unittest.mock import MagicMock

import pytest

from rag_router.adapters.llm.gemini_llm import NO_CONTEXT, GeminiGenerationBackend
from rag_router.core.domain import RetrievalResult
from rag_router.core.domain.exceptions import (
    GenerationConnectionError,
    GenerationError,
    GenerationFailedError,
)
from rag_router.core.services.prompts import RAG_PROMPT

pytestmark = pytest.mark.unit


@pytest.fixture
def context_docs():
    return [
        RetrievalResult(
            id="doc1",
            content="Machine learning learns from data.",
            metadata={"source": "ml-intro"},
            score=0.4,
        )
    ]


@pytest.fixture
def backend():
    llm = GeminiGenerationBackend(api_key="test-key", model="gemini-test")
    llm._client = MagicMock()
    return llm


class TestPrompt:
    def test_default_prompt_includes_context_and_question(self, backend, context_docs):
        prompt = backend.build_prompt("What is ML?", context_docs)

        assert prompt.startswith(RAG_PROMPT)
        assert "[Source: ml-intro]\nMachine learning learns from data." in prompt
        assert prompt.endswith("Question: What is ML?")

    def test_custom_prompt_and_history(self, backend):
        prompt = backend.build_prompt(
            "And then?",
            [],
            history=[{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}],
            system_prompt="Be brief.",
        )

        assert prompt.startswith("Be brief.")
        assert "user: Hi\nassistant: Hello" in prompt
        assert NO_CONTEXT in prompt


class TestGenerate:
    def test_missing_api_key(self):
        llm = GeminiGenerationBackend(api_key="")

        with pytest.raises(GenerationConnectionError):
            llm.generate_response("q", [])

    def test_returns_text(self, backend, context_docs):
        backend._client.models.generate_content.return_value = MagicMock(
            candidates=[MagicMock()], text="\ufeffAn answer"
        )

        answer = backend.generate_response("What is ML?", context_docs, temperature=0.1)

        assert answer == "An answer"
        kwargs = backend._client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert "Question: What is ML?" in kwargs["contents"]
        assert kwargs["config"].temperature == 0.1

    def test_empty_candidates(self, backend):
        backend._client.models.generate_content.return_value = MagicMock(candidates=[], text="")

        with pytest.raises(GenerationFailedError):
            backend.generate_response("q", [])

    def test_client_error_wrapped(self, backend):
        backend._client.models.generate_content.side_effect = RuntimeError("quota")

        with pytest.raises(GenerationError) as exc_info:
            backend.generate_response("q", [])
        assert isinstance(exc_info.value.cause, RuntimeError)


class TestStreaming:
    def test_yields_non_empty_chunks(self, backend, context_docs):
        backend._client.models.generate_content_stream.return_value = iter(
            [MagicMock(text="Hel"), MagicMock(text=""), MagicMock(text="lo")]
        )

        chunks = list(backend.generate_streaming_response("q", context_docs, {"temperature": 0.3}))

        assert chunks == ["Hel", "lo"]

    def test_stream_error_wrapped(self, backend):
        backend._client.models.generate_content_stream.side_effect = RuntimeError("reset")

        with pytest.raises(GenerationError):
            list(backend.generate_streaming_response("q", []))

    def test_model_property(self, backend):
        assert backend.model == "gemini-test"
