"""Token-set similarity between event names."""

from econcal.normalization.names import tokenize


def jaccard(tokens_a: frozenset[str], tokens_b: frozenset[str]) -> float:
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def similarity(name_a: str | None, name_b: str | None) -> float:
    """Jaccard index of the normalized names' whitespace tokens.

    Returns 0.0 when both names are empty, 1.0 for identical non-empty names.
    """
    return jaccard(tokenize(name_a), tokenize(name_b))
