"""
Phonetic normalization of romanized place names.

Neighbourhood names are romanized inconsistently ("Atote"/"Axoxe",
"Kebele"/"Qebele", "Arabiya"/"Arabia"). ``normalize`` reduces a name to a
consonant skeleton in which those variants collapse to the same key. The
rules run in a fixed order: "iya" must be merged before vowels are removed.
"""

VOWELS = "aeiou"

# Near-homophonous consonant pairs in the transliteration scheme
CONSONANT_FOLDS = str.maketrans({"t": "x", "k": "q"})


def lowercase(text: str) -> str:
    return text.lower()


def merge_iya(text: str) -> str:
    """Merge the "iya" diphthong spelling into "ia"."""
    return text.replace("iya", "ia")


def strip_vowels(text: str) -> str:
    return "".join(ch for ch in text if ch not in VOWELS)


def fold_consonants(text: str) -> str:
    """Fold t -> x and k -> q."""
    return text.translate(CONSONANT_FOLDS)


def remove_whitespace(text: str) -> str:
    return "".join(text.split())


NORMALIZATION_STEPS = (
    lowercase,
    merge_iya,
    strip_vowels,
    fold_consonants,
    remove_whitespace,
)


def normalize(text) -> str:
    """
    Reduce a name to its comparison key.

    Args:
        text: Raw name or query (None is treated as empty)

    Returns:
        Normalized key; empty input gives an empty key
    """
    if not text:
        return ""

    key = str(text)
    for step in NORMALIZATION_STEPS:
        key = step(key)
    return key
