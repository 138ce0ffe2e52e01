"""String matching primitives: phonetic codes, edit distance, similarity."""

from genealink.matching.distance import distance_similarity, edit_distance
from genealink.matching.phonetic import phonetic_code, sounds_alike
from genealink.matching.similarity import (
    longest_common_substring,
    name_similarity,
    pattern_bonus,
)

__all__ = [
    "distance_similarity",
    "edit_distance",
    "longest_common_substring",
    "name_similarity",
    "pattern_bonus",
    "phonetic_code",
    "sounds_alike",
]
