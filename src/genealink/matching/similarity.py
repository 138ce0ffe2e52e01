"""Name similarity scoring.

Combines four signals into a single 0-100 score:

1. **Phonetic equality** (30%): 80 points when both names share a phonetic
   code.
2. **Edit distance** (40%): ``(1 - distance / longest) * 100``.
3. **Longest common substring** (20%): length of the longest shared run of
   characters over the longer name's length, times 100.
4. **Regional patterns** (10%): fixed bonuses for prefixes, suffixes and
   common given names present in *both* names.
"""

import math
from difflib import SequenceMatcher

from genealink.config.constants import (
    COMMON_GIVEN_NAME_BONUS,
    COMMON_GIVEN_NAMES,
    NAME_PREFIX_BONUS,
    NAME_PREFIXES,
    NAME_SUFFIX_BONUS,
    NAME_SUFFIXES,
)
from genealink.matching.distance import distance_similarity
from genealink.matching.phonetic import phonetic_code

SIMILARITY_WEIGHTS = {
    "phonetic": 0.3,
    "distance": 0.4,
    "substring": 0.2,
    "pattern": 0.1,
}

assert abs(sum(SIMILARITY_WEIGHTS.values()) - 1.0) < 0.001, "Similarity weights must sum to 1.0"

PHONETIC_MATCH_POINTS = 80


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores."""
    return int(math.floor(value + 0.5))


def longest_common_substring(str1: str, str2: str) -> int:
    """Length of the longest substring shared by both strings."""
    if not str1 or not str2:
        return 0
    matcher = SequenceMatcher(None, str1, str2, autojunk=False)
    return matcher.find_longest_match(0, len(str1), 0, len(str2)).size


def substring_score(str1: str, str2: str) -> float:
    """Longest common substring as a percentage of the longer string."""
    longest = max(len(str1), len(str2))
    if longest == 0:
        return 0.0
    return longest_common_substring(str1, str2) / longest * 100


def _has_prefix(name: str) -> bool:
    return name.startswith(NAME_PREFIXES)


def _has_suffix(name: str) -> bool:
    return name.endswith(NAME_SUFFIXES)


def _has_common_given_name(name: str) -> bool:
    return any(given in name for given in COMMON_GIVEN_NAMES)


def pattern_bonus(name1: str, name2: str) -> int:
    """Sum of regional pattern bonuses that both lowercase names exhibit."""
    bonus = 0
    if _has_prefix(name1) and _has_prefix(name2):
        bonus += NAME_PREFIX_BONUS
    if _has_suffix(name1) and _has_suffix(name2):
        bonus += NAME_SUFFIX_BONUS
    if _has_common_given_name(name1) and _has_common_given_name(name2):
        bonus += COMMON_GIVEN_NAME_BONUS
    return bonus


def name_similarity(name1: str | None, name2: str | None) -> int:
    """Score how alike two names are, from 0 to 100.

    Comparison is case-insensitive and ignores surrounding whitespace.
    Identical names score 100; a missing or blank name scores 0.
    """
    if not name1 or not name2:
        return 0

    clean1 = name1.lower().strip()
    clean2 = name2.lower().strip()
    if not clean1 or not clean2:
        return 0

    if clean1 == clean2:
        return 100

    phonetic = PHONETIC_MATCH_POINTS if phonetic_code(clean1) == phonetic_code(clean2) else 0

    weighted = (
        phonetic * SIMILARITY_WEIGHTS["phonetic"]
        + distance_similarity(clean1, clean2) * SIMILARITY_WEIGHTS["distance"]
        + substring_score(clean1, clean2) * SIMILARITY_WEIGHTS["substring"]
        + pattern_bonus(clean1, clean2) * SIMILARITY_WEIGHTS["pattern"]
    )

    return max(0, min(100, round_half_up(weighted)))
