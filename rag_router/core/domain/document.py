"""Document and retrieval result models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Document:
    """A unit of corpus text with metadata.

    Identity is ``id``. Once a vector has been computed for ``content`` the
    content is treated as immutable; changing it requires re-embedding.

    Attributes:
        id: Unique identifier within a data source.
        content: The text content.
        metadata: Opaque key-value pairs (source, title, etc.).
        vector: Optional embedding of ``content``.
    """

    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    vector: list[float] | None = None


@dataclass(frozen=True)
class IndexedDocument:
    """A document held in the vector index together with its vector."""

    id: str
    content: str
    metadata: dict[str, Any]
    vector: tuple[float, ...]


@dataclass
class RetrievalResult:
    """A scored candidate returned by retrieval.

    Within one retrieval call results are ordered by ``score`` descending.
    """

    id: str
    content: str
    metadata: dict[str, Any]
    score: float


@dataclass(frozen=True)
class SimilarityMatch:
    """An ``(id, score)`` pair produced by nearest-neighbour scoring."""

    id: str
    score: float
