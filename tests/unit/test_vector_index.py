"""Tests for the copy-on-write vector index."""

import pytest

from rag_router.core.domain import IndexedDocument
from rag_router.core.domain.exceptions import DimensionMismatchError
from rag_router.core.services.vector_index import VectorIndex

pytestmark = pytest.mark.unit


def _entry(doc_id, vector=(1.0, 0.0, 0.0)):
    return IndexedDocument(id=doc_id, content=f"content {doc_id}", metadata={}, vector=vector)


def test_replace_swaps_whole_index():
    index = VectorIndex(dimension=3)
    index.replace([_entry("a"), _entry("b")])

    before = index.snapshot()
    index.replace([_entry("c")])

    assert set(before.entries) == {"a", "b"}
    assert set(index.snapshot().entries) == {"c"}
    assert len(index) == 1


def test_replace_publishes_vocabulary_with_entries():
    index = VectorIndex(dimension=3)
    old_vocab, new_vocab = object(), object()
    index.replace([_entry("a")], old_vocab)

    before = index.snapshot()
    index.replace([_entry("b")], new_vocab)
    after = index.snapshot()

    assert (set(before.entries), before.vocabulary) == ({"a"}, old_vocab)
    assert (set(after.entries), after.vocabulary) == ({"b"}, new_vocab)


def test_add_does_not_mutate_existing_snapshot():
    index = VectorIndex(dimension=3)
    index.replace([_entry("a")])
    snapshot = index.snapshot()

    index.add(_entry("b"))

    assert set(snapshot.entries) == {"a"}
    assert set(index.snapshot().entries) == {"a", "b"}


def test_add_overwrites_same_id():
    index = VectorIndex(dimension=3)
    index.add(_entry("a", (1.0, 0.0, 0.0)))
    index.add(_entry("a", (0.0, 1.0, 0.0)))

    assert len(index) == 1
    assert index.snapshot().entries["a"].vector == (0.0, 1.0, 0.0)


def test_add_with_stale_vocabulary_is_refused():
    index = VectorIndex(dimension=3)
    current = object()
    index.replace([_entry("a")], current)

    assert index.add(_entry("b"), object()) is False
    assert set(index.snapshot().entries) == {"a"}

    assert index.add(_entry("b"), current) is True
    assert set(index.snapshot().entries) == {"a", "b"}
    assert index.snapshot().vocabulary is current


def test_empty_index_adopts_vocabulary_of_first_entry():
    index = VectorIndex(dimension=3)
    vocab = object()

    assert index.add(_entry("a"), vocab) is True
    assert index.snapshot().vocabulary is vocab


def test_snapshot_is_read_only():
    index = VectorIndex(dimension=3)
    index.replace([_entry("a")])

    with pytest.raises(TypeError):
        index.snapshot().entries["b"] = _entry("b")


def test_dimension_mismatch_rejected():
    index = VectorIndex(dimension=3)
    index.replace([_entry("a")])

    with pytest.raises(DimensionMismatchError):
        index.replace([_entry("b", (1.0, 0.0))])
    with pytest.raises(DimensionMismatchError):
        index.add(_entry("c", (1.0,)))

    assert set(index.snapshot().entries) == {"a"}


def test_clear():
    index = VectorIndex(dimension=3)
    index.replace([_entry("a")], object())
    index.clear()
    assert len(index) == 0
    assert index.snapshot().vocabulary is None
