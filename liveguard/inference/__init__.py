"""Identity matching and the enrolled gallery."""

from .gallery import GalleryStore
from .matcher import UNKNOWN_LABEL, GalleryEntry, IdentityMatcher, MatchResult, as_embedding

__all__ = [
    "GalleryEntry",
    "GalleryStore",
    "IdentityMatcher",
    "MatchResult",
    "UNKNOWN_LABEL",
    "as_embedding",
]
