"""Common utilities and shared functionality.

Helpers used across the services and adapters of the RAG router.
"""

from .exception_handler import format_exception_json, get_error_code, log_exception
from .rate_limiter import SlidingWindowRateLimitStore
from .utils import STOP_WORDS, clean_text, tokenize

__all__ = [
    # Utilities
    "clean_text",
    "tokenize",
    "STOP_WORDS",
    # Rate limiting
    "SlidingWindowRateLimitStore",
    # Exception handlers
    "format_exception_json",
    "log_exception",
    "get_error_code",
]
