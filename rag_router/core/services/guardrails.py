"""Query, document and response guardrails.

Validation, sanitization, content moderation, per-user rate limiting and
disclaimer injection applied around every query.
"""

import logging
import re
from dataclasses import dataclass, field, replace

from ...common.rate_limiter import SlidingWindowRateLimitStore
from ..domain import (
    DocumentValidationResult,
    QueryValidationResult,
    QueryWarnings,
    ResponseValidationResult,
)
from ..ports.rate_limit_port import RateLimitStorePort

logger = logging.getLogger(__name__)

DEFAULT_BLOCKED_TERMS = (
    "hack",
    "exploit",
    "malware",
    "virus",
    "phishing",
    "illegal",
    "unlawful",
    "harmful",
    "dangerous",
)

DEFAULT_SENSITIVE_TOPICS = (
    "medical advice",
    "legal advice",
    "financial advice",
    "personal information",
    "private data",
)

EXPLICIT_TERMS = ("explicit", "nsfw", "adult content")
VIOLENCE_TERMS = ("kill", "murder", "violence", "harm", "attack")

# Violence terms only block responses shorter than this (longer text is
# assumed to be educational)
VIOLENCE_LENGTH_CUTOFF = 500

SENSITIVE_TOPIC_MESSAGE = (
    "This query may involve sensitive topics. Responses are for informational purposes only."
)

MEDICAL_KEYWORDS = ("symptom", "diagnosis", "treatment", "medical")
LEGAL_KEYWORDS = ("legal", "law", "lawsuit", "attorney")
FINANCIAL_KEYWORDS = ("investment", "stock", "financial", "trading")

MEDICAL_DISCLAIMER = (
    "⚠️ This is not medical advice. Consult a healthcare professional for medical concerns."
)
LEGAL_DISCLAIMER = (
    "⚠️ This is not legal advice. Consult a qualified attorney for legal matters."
)
FINANCIAL_DISCLAIMER = (
    "⚠️ This is not financial advice. Consult a financial advisor for investment decisions."
)

_SCRIPT_BLOCK = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_JAVASCRIPT_URI = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
_SQL_METACHARACTERS = re.compile(r"['\";\\]")
_WHITESPACE = re.compile(r"\s+")

_SAFE_TAGS = ("br", "strong", "/strong", "em", "/em")


@dataclass(frozen=True)
class RateLimitConfig:
    """At most ``requests`` per user within a trailing window of ``window_ms`` milliseconds."""

    requests: int
    window_ms: float


@dataclass(frozen=True)
class ContentModeration:
    block_explicit: bool = True
    block_violence: bool = True
    block_hate_speech: bool = True


@dataclass(frozen=True)
class ResponsePolicies:
    no_medical_diagnosis: bool = True
    no_legal_advice: bool = True
    no_financial_advice: bool = True
    cite_sources: bool = True


@dataclass(frozen=True)
class PolicyTables:
    """Immutable policy snapshot.

    A request reads one snapshot from start to finish; ``update_policies``
    swaps in a new one for later requests.
    """

    blocked_terms: tuple[str, ...] = DEFAULT_BLOCKED_TERMS
    sensitive_topics: tuple[str, ...] = DEFAULT_SENSITIVE_TOPICS
    rate_limit: RateLimitConfig | None = None
    content_moderation: ContentModeration | None = field(default_factory=ContentModeration)
    response_policies: ResponsePolicies | None = field(default_factory=ResponsePolicies)


class Guardrails:
    """Safety and policy pipeline for queries, context documents and responses."""

    def __init__(
        self,
        enabled: bool = True,
        blocked_terms: list[str] | None = None,
        sensitive_topics: list[str] | None = None,
        max_query_length: int = 2000,
        max_response_length: int = 10000,
        rate_limit: RateLimitConfig | None = None,
        content_moderation: ContentModeration | None = None,
        response_policies: ResponsePolicies | None = None,
        rate_limit_store: RateLimitStorePort | None = None,
    ) -> None:
        """Initialize the guardrails.

        Args:
            enabled: When False every validation passes input through.
            blocked_terms: Terms that reject queries and documents. Empty or
                None uses ``DEFAULT_BLOCKED_TERMS``.
            sensitive_topics: Terms that attach warnings to allowed queries.
                Empty or None uses ``DEFAULT_SENSITIVE_TOPICS``.
            max_query_length: Longest accepted query, in characters.
            max_response_length: Longest accepted response, in characters.
            rate_limit: Optional per-user sliding-window limit.
            content_moderation: Moderation switches (defaults all on).
            response_policies: Disclaimer switches (defaults all on).
            rate_limit_store: Request log backing the rate limit.
        """
        self.enabled = enabled
        self.max_query_length = max_query_length
        self.max_response_length = max_response_length
        self.rate_limit_store = rate_limit_store or SlidingWindowRateLimitStore()
        self._tables = PolicyTables(
            blocked_terms=tuple(blocked_terms) if blocked_terms else DEFAULT_BLOCKED_TERMS,
            sensitive_topics=(
                tuple(sensitive_topics) if sensitive_topics else DEFAULT_SENSITIVE_TOPICS
            ),
            rate_limit=rate_limit,
            content_moderation=content_moderation or ContentModeration(),
            response_policies=response_policies or ResponsePolicies(),
        )

    @property
    def policies(self) -> PolicyTables:
        return self._tables

    @property
    def blocked_terms(self) -> tuple[str, ...]:
        return self._tables.blocked_terms

    @property
    def sensitive_topics(self) -> tuple[str, ...]:
        return self._tables.sensitive_topics

    @property
    def rate_limit(self) -> RateLimitConfig | None:
        return self._tables.rate_limit

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_query(self, query: str, user_id: str = "default") -> QueryValidationResult:
        """Validate and sanitize an incoming query.

        Checks run in order: length, rate limit, blocked terms. Sensitive
        topics never block; they add warnings to an allowed result.
        """
        if not self.enabled:
            return QueryValidationResult(allowed=True, sanitized=query)

        tables = self._tables

        if len(query) > self.max_query_length:
            return QueryValidationResult(
                allowed=False,
                reason=f"Query exceeds maximum length of {self.max_query_length} characters",
            )

        if tables.rate_limit is not None:
            limit = tables.rate_limit
            if not self.rate_limit_store.hit(user_id, limit.requests, limit.window_ms):
                logger.info("Rate limit exceeded for user %s", user_id)
                return QueryValidationResult(
                    allowed=False,
                    reason=(
                        f"Rate limit exceeded. Maximum {limit.requests} requests "
                        f"per {limit.window_ms / 1000:g} seconds"
                    ),
                )

        sanitized = self.sanitize_input(query)
        lowered = sanitized.lower()

        if any(term.lower() in lowered for term in tables.blocked_terms):
            logger.info("Query rejected: blocked content")
            return QueryValidationResult(
                allowed=False, reason="Query contains blocked content", sanitized=sanitized
            )

        sensitive_found = [topic for topic in tables.sensitive_topics if topic.lower() in lowered]
        warnings = None
        if sensitive_found:
            warnings = QueryWarnings(
                sensitive_topics=sensitive_found, message=SENSITIVE_TOPIC_MESSAGE
            )

        return QueryValidationResult(allowed=True, sanitized=sanitized, warnings=warnings)

    def validate_response(self, response: str) -> ResponseValidationResult:
        """Check length, sanitize and moderate a generated response."""
        if not self.enabled:
            return ResponseValidationResult(allowed=True, sanitized=response)

        if len(response) > self.max_response_length:
            return ResponseValidationResult(
                allowed=False,
                reason=f"Response exceeds maximum length of {self.max_response_length} characters",
            )

        sanitized = self.sanitize_output(response)

        moderation = self._tables.content_moderation
        if moderation is not None:
            reason = self._moderate(sanitized, moderation)
            if reason:
                logger.info("Response rejected by moderation: %s", reason)
                return ResponseValidationResult(allowed=False, reason=reason, sanitized=sanitized)

        return ResponseValidationResult(allowed=True, sanitized=sanitized)

    def validate_document(self, content: str) -> DocumentValidationResult:
        """Check a context document for blocked terms before generation."""
        if not self.enabled:
            return DocumentValidationResult(allowed=True)

        lowered = content.lower()
        if any(term.lower() in lowered for term in self._tables.blocked_terms):
            return DocumentValidationResult(
                allowed=False, reason="Document contains blocked content"
            )
        return DocumentValidationResult(allowed=True)

    @staticmethod
    def _moderate(text: str, moderation: ContentModeration) -> str | None:
        lowered = text.lower()

        if moderation.block_explicit and any(term in lowered for term in EXPLICIT_TERMS):
            return "Response contains inappropriate content"

        if (
            moderation.block_violence
            and len(lowered) < VIOLENCE_LENGTH_CUTOFF
            and any(term in lowered for term in VIOLENCE_TERMS)
        ):
            return "Response may contain violent content"

        return None

    # ------------------------------------------------------------------
    # Sanitization
    # ------------------------------------------------------------------

    @staticmethod
    def _sanitize_input_once(text: str) -> str:
        text = _SCRIPT_BLOCK.sub("", text)
        text = _JAVASCRIPT_URI.sub("", text)
        text = _EVENT_HANDLER.sub("", text)
        text = _SQL_METACHARACTERS.sub("", text)
        return _WHITESPACE.sub(" ", text).strip()

    @classmethod
    def sanitize_input(cls, text: str) -> str:
        """Strip script markup, event handlers and SQL metacharacters.

        Repeated until nothing changes, so removing one pattern cannot leave
        another behind and ``sanitize_input(sanitize_input(x)) ==
        sanitize_input(x)``.
        """
        if not text:
            return ""

        current = text
        while True:
            cleaned = cls._sanitize_input_once(current)
            if cleaned == current:
                return cleaned
            current = cleaned

    @staticmethod
    def sanitize_output(text: str) -> str:
        """Strip scripts, escape markup and re-permit basic formatting tags."""
        if not text:
            return ""

        text = _SCRIPT_BLOCK.sub("", text)
        text = _EVENT_HANDLER.sub("", text)
        text = text.replace("<", "&lt;").replace(">", "&gt;")
        for tag in _SAFE_TAGS:
            text = text.replace(f"&lt;{tag}&gt;", f"<{tag}>")
        return text.strip()

    # ------------------------------------------------------------------
    # Response policies
    # ------------------------------------------------------------------

    def apply_response_policies(self, response: str, query: str) -> str:
        """Append one disclaimer per matching medical/legal/financial keyword group.

        Not idempotent: call exactly once per response.
        """
        policies = self._tables.response_policies
        if policies is None:
            return response

        lowered = query.lower()
        disclaimers = []

        if policies.no_medical_diagnosis and any(k in lowered for k in MEDICAL_KEYWORDS):
            disclaimers.append(MEDICAL_DISCLAIMER)
        if policies.no_legal_advice and any(k in lowered for k in LEGAL_KEYWORDS):
            disclaimers.append(LEGAL_DISCLAIMER)
        if policies.no_financial_advice and any(k in lowered for k in FINANCIAL_KEYWORDS):
            disclaimers.append(FINANCIAL_DISCLAIMER)

        if disclaimers:
            return response + "\n\n" + "\n".join(disclaimers)
        return response

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def update_policies(
        self,
        blocked_terms: list[str] | None = None,
        sensitive_topics: list[str] | None = None,
        rate_limit: RateLimitConfig | None = None,
    ) -> None:
        """Extend the term lists and/or replace the rate limit.

        In-flight requests keep the snapshot they started with.
        """
        tables = self._tables
        changes: dict = {}
        if blocked_terms:
            changes["blocked_terms"] = tables.blocked_terms + tuple(blocked_terms)
        if sensitive_topics:
            changes["sensitive_topics"] = tables.sensitive_topics + tuple(sensitive_topics)
        if rate_limit is not None:
            changes["rate_limit"] = rate_limit
        if changes:
            self._tables = replace(tables, **changes)
            logger.info("Guardrail policies updated: %s", ", ".join(sorted(changes)))

    def reset_rate_limit(self, user_id: str) -> None:
        self.rate_limit_store.reset(user_id)

    def clear_rate_limits(self) -> None:
        self.rate_limit_store.clear()

    def get_stats(self) -> dict:
        tables = self._tables
        return {
            "enabled": self.enabled,
            "blocked_terms_count": len(tables.blocked_terms),
            "sensitive_topics_count": len(tables.sensitive_topics),
            "rate_limit": (
                {"requests": tables.rate_limit.requests, "window_ms": tables.rate_limit.window_ms}
                if tables.rate_limit
                else None
            ),
            "active_users": self.rate_limit_store.active_keys(),
        }
