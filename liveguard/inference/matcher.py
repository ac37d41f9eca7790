"""Nearest-neighbour identity matching against an enrolled gallery."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

UNKNOWN_LABEL = "unknown"


def as_embedding(vector: Any) -> np.ndarray:
    """Coerce a vector-like into a read-only 1-D float32 array."""
    arr = np.array(vector, dtype=np.float32).reshape(-1)
    if arr.size == 0:
        raise ValueError("Embedding must not be empty")
    if not np.all(np.isfinite(arr)):
        raise ValueError("Embedding contains non-finite values")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class GalleryEntry:
    label: str
    embeddings: Tuple[np.ndarray, ...]

    @classmethod
    def create(cls, label: str, embeddings: Iterable[Any]) -> "GalleryEntry":
        return cls(label=label, embeddings=tuple(as_embedding(e) for e in embeddings))


@dataclass(frozen=True)
class MatchResult:
    label: str
    distance: float

    @property
    def is_known(self) -> bool:
        return self.label != UNKNOWN_LABEL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "distance": None if math.isinf(self.distance) else float(self.distance),
        }


class IdentityMatcher:
    """Euclidean matcher.

    Each entry scores as the minimum distance over its embeddings. The best
    entry wins; on equal distances the entry met first in gallery order wins.
    """

    def __init__(self, threshold: float = 0.6) -> None:
        self.threshold = float(threshold)

    def match(
        self,
        query: Any,
        gallery: Sequence[GalleryEntry],
        threshold: Optional[float] = None,
    ) -> MatchResult:
        limit = self.threshold if threshold is None else float(threshold)
        q = as_embedding(query)

        best_label: Optional[str] = None
        best_distance = math.inf
        for entry in gallery:
            if not entry.embeddings:
                continue
            stacked = np.stack(entry.embeddings, axis=0)
            if stacked.shape[1] != q.size:
                raise ValueError(
                    f"Embedding size mismatch for '{entry.label}': {stacked.shape[1]} != {q.size}"
                )
            entry_distance = float(np.min(np.linalg.norm(stacked - q, axis=1)))
            # strict comparison keeps the earliest entry on ties
            if entry_distance < best_distance:
                best_distance = entry_distance
                best_label = entry.label

        if best_label is None or best_distance > limit:
            return MatchResult(label=UNKNOWN_LABEL, distance=best_distance)
        return MatchResult(label=best_label, distance=best_distance)


__all__ = ["GalleryEntry", "IdentityMatcher", "MatchResult", "UNKNOWN_LABEL", "as_embedding"]
