"""Google Gemini generation backend using the google-genai SDK."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from rich.console import Console

from ...common.utils import clean_text
from ...core.domain import RetrievalResult
from ...core.domain.exceptions import (
    GenerationConnectionError,
    GenerationError,
    GenerationFailedError,
)
from ...core.ports.generation_port import GenerationPort
from ...core.services.prompts import CONTEXT_TEMPLATE, RAG_PROMPT

if TYPE_CHECKING:
    from google import genai

logger = logging.getLogger(__name__)
console = Console()

DEFAULT_TEMPERATURE = 0.7
NO_CONTEXT = "No context documents were provided."


class GeminiGenerationBackend(GenerationPort):
    """Generation backend for Google Gemini models."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        max_tokens: int = 2048,
        max_context_chars: int = 8000,
    ) -> None:
        """Initialize the backend.

        Args:
            api_key: Google AI API key.
            model: Model to use.
            max_tokens: Maximum tokens to generate.
            max_context_chars: Context documents beyond this budget are dropped.
        """
        self.api_key = api_key
        self.model_name = model
        self.max_tokens = max_tokens
        self.max_context_chars = max_context_chars
        self._client: genai.Client | None = None

    @property
    def model(self) -> str:
        return self.model_name

    def initialize(self) -> None:
        self._get_client()

    def _get_client(self) -> "genai.Client":
        """Lazy load the Gemini client."""
        if self._client is None:
            if not self.api_key:
                raise GenerationConnectionError(
                    "Google API key not set. Set GOOGLE_API_KEY in your .env file."
                )

            from google import genai

            self._client = genai.Client(api_key=self.api_key)
            console.print(f"[green]Gemini client initialized for model: {self.model_name}[/]")

        return self._client

    def build_prompt(
        self,
        query: str,
        context_docs: list[RetrievalResult],
        history: list[dict[str, str]] | None = None,
        system_prompt: str | None = None,
    ) -> str:
        """Combine system prompt, history, context and question into one prompt."""
        parts = [system_prompt if system_prompt is not None else RAG_PROMPT]

        if history:
            turns = "\n".join(f"{m.get('role', 'user')}: {m.get('content', '')}" for m in history)
            parts.append(f"Conversation so far:\n{turns}")

        context_parts = []
        char_count = 0
        for doc in context_docs:
            if char_count > self.max_context_chars:
                break
            source = doc.metadata.get("source") or doc.metadata.get("title") or doc.id
            context_parts.append(f"[Source: {source}]\n{doc.content}")
            char_count += len(doc.content)
        context = "\n\n".join(context_parts) if context_parts else NO_CONTEXT

        parts.append(CONTEXT_TEMPLATE.format(context=context, question=query))
        return clean_text("\n\n---\n\n".join(parts))

    def _config(self, temperature: float | None) -> Any:
        from google.genai.types import GenerateContentConfig

        return GenerateContentConfig(
            temperature=DEFAULT_TEMPERATURE if temperature is None else temperature,
            max_output_tokens=self.max_tokens,
        )

    def generate_response(
        self,
        query: str,
        context_docs: list[RetrievalResult],
        *,
        history: list[dict[str, str]] | None = None,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> str:
        client = self._get_client()
        prompt = self.build_prompt(query, context_docs, history, system_prompt)

        try:
            response = client.models.generate_content(
                model=self.model_name, contents=prompt, config=self._config(temperature)
            )
        except Exception as e:
            raise GenerationError(
                "Gemini generation failed", cause=e, context={"model": self.model_name}
            ) from e

        if not response.candidates or not response.text:
            raise GenerationFailedError(
                "Gemini returned no text", context={"model": self.model_name}
            )
        return clean_text(response.text)

    def generate_streaming_response(
        self,
        query: str,
        context_docs: list[RetrievalResult],
        options: dict[str, Any] | None = None,
    ) -> Iterator[str]:
        options = options or {}
        client = self._get_client()
        prompt = self.build_prompt(
            query, context_docs, options.get("history"), options.get("system_prompt")
        )

        try:
            stream = client.models.generate_content_stream(
                model=self.model_name,
                contents=prompt,
                config=self._config(options.get("temperature")),
            )
            for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(
                "Gemini streaming failed", cause=e, context={"model": self.model_name}
            ) from e
