"""In-memory vector index with atomic wholesale replacement."""

import logging
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from ..domain import IndexedDocument
from ..domain.exceptions import DimensionMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexSnapshot:
    """Entries together with the vocabulary their vectors were built from.

    Queries must be embedded with ``vocabulary`` to be comparable with
    ``entries``.
    """

    entries: Mapping[str, IndexedDocument]
    vocabulary: Any = None


_EMPTY = IndexSnapshot(entries=MappingProxyType({}))


class VectorIndex:
    """Mapping of document id to document and vector.

    The active snapshot is never mutated in place. ``replace`` and ``add``
    build a new snapshot and swap the single reference, so a reader holding a
    ``snapshot()`` sees either the complete old index (with its vocabulary) or
    the complete new one, never a mix.
    """

    def __init__(self, dimension: int) -> None:
        self.dimension = dimension
        self._snapshot = _EMPTY
        self._write_lock = threading.Lock()

    def snapshot(self) -> IndexSnapshot:
        return self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot.entries)

    def _check_dimension(self, entry: IndexedDocument) -> None:
        if len(entry.vector) != self.dimension:
            raise DimensionMismatchError(
                "Vector dimension does not match the index",
                context={"id": entry.id, "expected": self.dimension, "got": len(entry.vector)},
            )

    def replace(self, entries: Iterable[IndexedDocument], vocabulary: Any = None) -> None:
        """Swap in a freshly built index and the vocabulary behind it."""
        fresh: dict[str, IndexedDocument] = {}
        for entry in entries:
            self._check_dimension(entry)
            fresh[entry.id] = entry

        with self._write_lock:
            self._snapshot = IndexSnapshot(MappingProxyType(fresh), vocabulary)
        logger.debug("Vector index replaced with %d entries", len(fresh))

    def add(self, entry: IndexedDocument, vocabulary: Any = None) -> bool:
        """Insert or overwrite one entry (copy-on-write).

        ``vocabulary`` is the one ``entry`` was embedded with. If the index has
        since been rebuilt on another vocabulary nothing is written and False
        is returned; the caller re-embeds and retries.
        """
        self._check_dimension(entry)
        with self._write_lock:
            current = self._snapshot
            base_vocabulary = current.vocabulary
            if vocabulary is not None and vocabulary is not base_vocabulary:
                # An empty index adopts the vocabulary of its first entry
                if current.entries:
                    return False
                base_vocabulary = vocabulary
            updated = dict(current.entries)
            updated[entry.id] = entry
            self._snapshot = IndexSnapshot(MappingProxyType(updated), base_vocabulary)
        return True

    def clear(self) -> None:
        with self._write_lock:
            self._snapshot = _EMPTY
