"""Soundex-family phonetic encoding tuned for Cameroonian names.

Regional prefix and suffix clusters are folded to a single letter before
encoding so that spelling variants of the same family name share a code
(``Ngassa``/``Nassa``, ``Kamdem``/``Kamtou``).
"""

import re

from genealink.config.constants import (
    PHONETIC_CLASSES,
    PHONETIC_CODE_LENGTH,
    PHONETIC_EMPTY_CODE,
    PHONETIC_PREFIX_FOLDS,
    PHONETIC_PREFIX_TARGET,
    PHONETIC_SUFFIX_FOLDS,
    PHONETIC_SUFFIX_TARGET,
)

_NON_ALPHA = re.compile(r"[^A-Z]")

_LETTER_CLASS = {
    letter: digit for letters, digit in PHONETIC_CLASSES.items() for letter in letters
}


def _letter_class(letter: str) -> str:
    """Digit class for a letter, "0" for vowels and unclassified letters."""
    return _LETTER_CLASS.get(letter, "0")


def fold_regional_affixes(cleaned: str) -> str:
    """Fold one known prefix and one known suffix cluster.

    Args:
        cleaned: Uppercase, letters-only name

    Returns:
        The name with the first matching prefix and suffix folded
    """
    for prefix in PHONETIC_PREFIX_FOLDS:
        if cleaned.startswith(prefix):
            cleaned = PHONETIC_PREFIX_TARGET + cleaned[len(prefix):]
            break

    for suffix in PHONETIC_SUFFIX_FOLDS:
        if cleaned.endswith(suffix):
            cleaned = cleaned[: -len(suffix)] + PHONETIC_SUFFIX_TARGET
            break

    return cleaned


def phonetic_code(name: str | None) -> str:
    """Encode a name as a 4-character phonetic code.

    The first letter is kept literally; following letters are replaced by
    their digit class, skipping vowels and a class identical to the letter
    directly before it. Codes shorter than four characters are padded
    with zeros.

    Returns:
        4-character code, or "0000" when the name has no letters
    """
    if not name or not isinstance(name, str):
        return PHONETIC_EMPTY_CODE

    cleaned = fold_regional_affixes(_NON_ALPHA.sub("", name.upper()))
    if not cleaned:
        return PHONETIC_EMPTY_CODE

    code = cleaned[0]
    previous = _letter_class(cleaned[0])

    for letter in cleaned[1:]:
        current = _letter_class(letter)
        if current != "0" and current != previous:
            code += current
            if len(code) == PHONETIC_CODE_LENGTH:
                break
        previous = current

    return code.ljust(PHONETIC_CODE_LENGTH, "0")


def sounds_alike(name1: str | None, name2: str | None) -> bool:
    """True when both names are non-empty and share a phonetic code."""
    code1 = phonetic_code(name1)
    return code1 != PHONETIC_EMPTY_CODE and code1 == phonetic_code(name2)
