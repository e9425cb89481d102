"""Search query assembly: mute-word exclusions appended to each query part."""

import re

_WHITESPACE = re.compile(r"\s")


def to_query_token(word: str) -> str:
    """Quote a mute word when it contains whitespace so it is excluded as a phrase."""
    return f'"{word}"' if _WHITESPACE.search(word) else word


def build_query_with_mute_words(query: str, mute_words: list[str]) -> str:
    """Append one ``-token`` exclusion per mute word, in order.

    >>> build_query_with_mute_words("cats", ["spam", "junk food"])
    'cats -spam -"junk food"'
    """
    if not mute_words:
        return query
    exclusions = " ".join(f"-{to_query_token(word)}" for word in mute_words)
    return f"{query} {exclusions}".strip()


def build_effective_queries(parts: list[str], mute_words: list[str]) -> dict[str, str]:
    """Map each query part to its effective query, preserving part order."""
    return {part: build_query_with_mute_words(part, mute_words) for part in parts}
