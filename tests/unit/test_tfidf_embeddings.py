"""Tests for the TF-IDF embedding function."""

import math

import pytest

from rag_router.core.domain import IndexedDocument
from rag_router.core.domain.exceptions import (
    InvalidConfigurationError,
    VocabularyNotBuiltError,
)
from rag_router.core.services.tfidf_embeddings import TfidfEmbeddings

pytestmark = pytest.mark.unit


@pytest.fixture
def embeddings(sample_corpus):
    emb = TfidfEmbeddings(dimension=384)
    emb.initialize([doc.content for doc in sample_corpus])
    return emb


def _index(embeddings, corpus):
    return [
        IndexedDocument(
            id=doc.id,
            content=doc.content,
            metadata=doc.metadata,
            vector=tuple(embeddings.embed(doc.content)),
        )
        for doc in corpus
    ]


class TestVocabulary:
    def test_rejects_non_positive_dimension(self):
        with pytest.raises(InvalidConfigurationError):
            TfidfEmbeddings(dimension=0)

    def test_embed_before_build_raises(self):
        with pytest.raises(VocabularyNotBuiltError):
            TfidfEmbeddings().embed("anything")

    def test_terms_ranked_by_document_frequency_then_alphabetically(self, sample_corpus):
        emb = TfidfEmbeddings(dimension=4)
        emb.build_vocabulary([doc.content for doc in sample_corpus])

        assert emb.vocabulary.terms == {
            "learning": 0,
            "artificial": 1,
            "complex": 2,
            "computers": 3,
        }

    def test_idf_uses_smoothed_formula(self, embeddings):
        vocab = embeddings.vocabulary
        assert vocab.corpus_size == 3
        assert vocab.idf[vocab.terms["learning"]] == pytest.approx(math.log(4 / 3) + 1)
        assert vocab.idf[vocab.terms["neural"]] == pytest.approx(math.log(2) + 1)

    def test_stop_words_excluded(self, embeddings):
        assert "is" not in embeddings.vocabulary.terms
        assert "the" not in embeddings.vocabulary.terms


class TestEmbed:
    def test_vector_length_equals_dimension(self, embeddings):
        assert len(embeddings.embed("machine learning")) == 384
        assert embeddings.get_dimension() == 384

    def test_vectors_are_unit_length(self, embeddings):
        vector = embeddings.embed("Deep learning with neural networks")
        assert math.sqrt(sum(v * v for v in vector)) == pytest.approx(1.0)

    def test_embedding_is_deterministic(self, embeddings, sample_corpus):
        first = embeddings.embed("What is machine learning?")
        second = embeddings.embed("What is machine learning?")
        assert first == second

        rebuilt = TfidfEmbeddings(dimension=384)
        rebuilt.build_vocabulary([doc.content for doc in sample_corpus])
        assert rebuilt.embed("What is machine learning?") == first

    def test_unknown_terms_give_zero_vector(self, embeddings):
        assert not any(embeddings.embed("cooking recipes"))
        assert not any(embeddings.embed(""))


class TestFindSimilar:
    def test_machine_learning_ranking(self, embeddings, sample_corpus):
        candidates = _index(embeddings, sample_corpus)
        query = embeddings.embed("What is machine learning?")

        matches = embeddings.find_similar(query, candidates, k=3)

        assert [m.id for m in matches] == ["doc1", "doc2", "doc3"]
        assert matches[0].score == pytest.approx(0.429, abs=0.005)
        assert matches[1].score == pytest.approx(0.149, abs=0.005)
        assert matches[2].score == 0.0

    def test_respects_k(self, embeddings, sample_corpus):
        candidates = _index(embeddings, sample_corpus)
        query = embeddings.embed("learning")

        assert len(embeddings.find_similar(query, candidates, k=1)) == 1
        assert embeddings.find_similar(query, candidates, k=0) == []
        assert embeddings.find_similar(query, [], k=3) == []

    def test_ties_keep_candidate_order(self, embeddings, sample_corpus):
        candidates = _index(embeddings, sample_corpus)
        query = embeddings.embed("cooking recipes")

        matches = embeddings.find_similar(query, candidates, k=3)

        assert [m.id for m in matches] == ["doc1", "doc2", "doc3"]
        assert all(m.score == 0.0 for m in matches)

    def test_rebuild_swaps_vocabulary(self, embeddings):
        old = embeddings.vocabulary
        embeddings.build_vocabulary(["Quantum computing uses qubits."])

        assert embeddings.vocabulary is not old
        assert "qubits" in embeddings.vocabulary.terms
        assert "qubits" not in old.terms

    def test_build_returns_current_vocabulary(self, sample_corpus):
        emb = TfidfEmbeddings(dimension=16)
        vocab = emb.build_vocabulary([doc.content for doc in sample_corpus])

        assert vocab is emb.vocabulary

    def test_embed_with_explicit_vocabulary(self, embeddings):
        old = embeddings.vocabulary
        before = embeddings.embed("machine learning")
        embeddings.build_vocabulary(["Quantum computing uses qubits."])

        assert embeddings.embed("machine learning", old) == before
        assert embeddings.embed("machine learning") != before
