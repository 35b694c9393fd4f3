"""Text helpers shared by the embedding index and the data source adapters.

Text handling contract
----------------------
* Documents and queries may arrive with BOM markers or odd Unicode forms;
  ``clean_text`` strips the markers and applies NFKC normalization.
* ``tokenize`` is the single tokenizer for both TF-IDF vectorization and
  keyword search, so the two scoring paths agree on what a term is.
"""

import re
import unicodedata

_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")

STOP_WORDS = frozenset(
    {
        "a", "about", "an", "and", "are", "as", "at", "be", "been", "but", "by",
        "can", "do", "does", "for", "from", "had", "has", "have", "how", "i",
        "if", "in", "into", "is", "it", "its", "of", "on", "or", "so", "than",
        "that", "the", "their", "then", "there", "these", "they", "this", "to",
        "was", "were", "what", "when", "where", "which", "who", "why", "will",
        "with", "you", "your",
    }
)


def clean_text(text: str, *, normalize: bool = True) -> str:
    """Remove BOM markers and optionally NFKC-normalize text.

    Args:
        text: Input text that may contain BOM or replacement characters.
        normalize: Whether to apply NFKC normalization.

    Returns:
        Cleaned text.
    """
    if not text:
        return ""

    cleaned = text.replace("\ufeff", "").replace("\ufffd", "")
    if normalize:
        cleaned = unicodedata.normalize("NFKC", cleaned)
    return cleaned


def tokenize(text: str) -> list[str]:
    """Split text into lower-case terms, dropping stop words and 1-char tokens."""
    tokens = _TOKEN_PATTERN.findall(clean_text(text).lower())
    return [t for t in tokens if len(t) > 1 and t not in STOP_WORDS]
