"""TF-IDF embeddings fitted to the document corpus."""

import logging
import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ...common.utils import tokenize
from ..domain import IndexedDocument, SimilarityMatch
from ..domain.exceptions import InvalidConfigurationError, VocabularyNotBuiltError
from ..ports.embedding_port import EmbeddingPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """Term → column mapping with the matching inverse document frequencies."""

    terms: dict[str, int]
    idf: np.ndarray
    corpus_size: int


class TfidfEmbeddings(EmbeddingPort):
    """Deterministic TF-IDF vectorizer with cosine-similarity search.

    The vocabulary is the ``dimension`` most document-frequent terms of the
    corpus (ties broken alphabetically). Vectors are L2-normalized and always
    ``dimension`` long; columns beyond the vocabulary size stay zero. For an
    unchanged corpus and dimension, ``embed`` always returns the same vector.
    """

    def __init__(self, dimension: int = 384) -> None:
        """Initialize the vectorizer.

        Args:
            dimension: Length of every produced vector.
        """
        if dimension <= 0:
            raise InvalidConfigurationError(
                "Embedding dimension must be positive", context={"dimension": dimension}
            )
        self.dimension = dimension
        self._vocabulary: Vocabulary | None = None

    @property
    def vocabulary(self) -> Vocabulary | None:
        return self._vocabulary

    def initialize(self, corpus_texts: Sequence[str]) -> None:
        self.build_vocabulary(corpus_texts)

    def build_vocabulary(self, corpus_texts: Sequence[str]) -> Vocabulary:
        """Fit vocabulary and idf weights to ``corpus_texts``.

        The new vocabulary replaces the old one in a single assignment and is
        returned so callers can pair it with vectors built from it.
        """
        document_frequency: Counter[str] = Counter()
        for text in corpus_texts:
            document_frequency.update(set(tokenize(text)))

        ranked = sorted(document_frequency.items(), key=lambda item: (-item[1], item[0]))
        selected = ranked[: self.dimension]

        corpus_size = len(corpus_texts)
        terms = {term: column for column, (term, _) in enumerate(selected)}
        idf = np.zeros(self.dimension, dtype=np.float64)
        for term, column in terms.items():
            idf[column] = math.log((corpus_size + 1) / (document_frequency[term] + 1)) + 1.0

        vocabulary = Vocabulary(terms=terms, idf=idf, corpus_size=corpus_size)
        self._vocabulary = vocabulary
        logger.info(
            "Built TF-IDF vocabulary: %d terms from %d documents", len(terms), corpus_size
        )
        return vocabulary

    def embed(self, text: str, vocabulary: Vocabulary | None = None) -> list[float]:
        if vocabulary is None:
            vocabulary = self._vocabulary
        if vocabulary is None:
            raise VocabularyNotBuiltError("Cannot embed text before the vocabulary is built")

        tokens = tokenize(text)
        vector = np.zeros(self.dimension, dtype=np.float64)
        if not tokens:
            return vector.tolist()

        for term, count in Counter(tokens).items():
            column = vocabulary.terms.get(term)
            if column is not None:
                vector[column] = count / len(tokens)

        vector *= vocabulary.idf
        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector.tolist()

    def find_similar(
        self,
        query_vector: Sequence[float],
        candidates: Sequence[IndexedDocument],
        k: int,
    ) -> list[SimilarityMatch]:
        """Rank candidates by cosine similarity to ``query_vector``.

        Returns at most ``k`` matches, best first; equal scores keep candidate
        order.
        """
        if k <= 0 or not candidates:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        matrix = np.asarray([c.vector for c in candidates], dtype=np.float64)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)

        # Stable sort on the negated score keeps candidate order for ties
        order = np.argsort(-scores, kind="stable")[:k]
        return [SimilarityMatch(id=candidates[i].id, score=float(scores[i])) for i in order]

    def get_dimension(self) -> int:
        return self.dimension
