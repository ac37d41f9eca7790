"""Thread-safe gallery of enrolled embeddings with immutable snapshots."""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .matcher import GalleryEntry, as_embedding


class GalleryStore:
    """Holds enrolled embeddings grouped by label.

    Readers call :meth:`load_gallery` and get a tuple of frozen entries whose
    arrays are read-only, so enrollment never alters a snapshot that a
    session is matching against.
    """

    def __init__(
        self,
        *,
        database: Any = None,
        embedding_size: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._db = database
        self._embedding_size = embedding_size
        self._entries: Dict[str, List[np.ndarray]] = {}
        self._lock = threading.RLock()
        self._version = 0
        self._last_loaded: Optional[datetime] = None
        self._logger = logger or logging.getLogger(__name__)
        if self._db is not None:
            self.reload()

    def reload(self) -> int:
        """Replace in-memory entries with what the database holds."""
        if self._db is None:
            return self.count()
        rows = self._db.load_embeddings()
        with self._lock:
            self._entries = {}
            for label, vector in rows:
                try:
                    self._add_locked(label, as_embedding(vector))
                except ValueError as exc:
                    self._logger.warning("[Gallery] Skipping stored embedding for %s: %s", label, exc)
            self._version += 1
            self._last_loaded = datetime.utcnow()
            total = self.count()
        self._logger.info("[Gallery] Loaded %d embeddings for %d labels", total, len(self._entries))
        return total

    def _check_size_locked(self, vector: np.ndarray) -> None:
        if self._embedding_size is not None and vector.size != self._embedding_size:
            raise ValueError(
                f"Embedding size {vector.size} does not match gallery size {self._embedding_size}"
            )

    def _add_locked(self, label: str, vector: np.ndarray) -> None:
        self._check_size_locked(vector)
        if self._embedding_size is None:
            self._embedding_size = int(vector.size)
        self._entries.setdefault(label, []).append(vector)

    def enroll(self, label: str, embedding: Any) -> int:
        """Add one embedding under ``label``; returns how many the label owns."""
        label = (label or "").strip()
        if not label:
            raise ValueError("Label must not be empty")
        vector = as_embedding(embedding)
        with self._lock:
            self._check_size_locked(vector)
            if self._db is not None:
                self._db.add_embedding(label, vector)
            self._add_locked(label, vector)
            self._version += 1
            owned = len(self._entries[label])
        self._logger.info("[Gallery] Enrolled %s (%d embeddings)", label, owned)
        return owned

    def remove(self, label: str) -> bool:
        with self._lock:
            removed = self._entries.pop(label, None) is not None
            if self._db is not None:
                removed = bool(self._db.delete_label(label)) or removed
            if removed:
                self._version += 1
        return removed

    def load_gallery(self) -> Tuple[GalleryEntry, ...]:
        with self._lock:
            return tuple(
                GalleryEntry(label=label, embeddings=tuple(vectors))
                for label, vectors in self._entries.items()
            )

    def labels(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def count(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._entries.values())

    def describe(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "labels": len(self._entries),
                "embeddings": self.count(),
                "embedding_size": self._embedding_size,
                "version": self._version,
                "last_loaded": self._last_loaded.isoformat() if self._last_loaded else None,
            }


__all__ = ["GalleryStore"]
