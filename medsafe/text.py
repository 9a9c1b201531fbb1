"""
Text normalization, tokenization and term-frequency tables.

The tokenizer is intentionally naive: lowercase, strip punctuation, split on
whitespace, drop short words and stop words. No stemming or lemmatization.

A frequency table is a plain dict {token: count}. Dicts keep insertion order,
which is what makes rank_top deterministic when two terms tie.
"""

import math
import re
from typing import Iterable

# Non-word, non-space characters. ASCII mode keeps the output inside [a-z0-9_\s].
_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE_RUN = re.compile(r"\s+", re.ASCII)

MIN_TOKEN_LENGTH = 3
BOOST_FACTOR = 1.5

# Domain-specific terms weighted up in the word cloud
DOMAIN_BOOST_TERMS = frozenset({
    "cyp3a4", "cyp2d6", "qt", "bleeding", "serotonin", "sedation",
    "respiratory", "hypotension", "hepatotoxicity", "nephrotoxic",
    "warfarin", "grapefruit", "alcohol", "opioid", "maoi",
})

# Basic English stop words plus label boilerplate
STOPWORDS = frozenset({
    # ── English ─────────────────────────────────────────────────────────────
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "should", "could", "may", "might", "must", "can", "this", "that",
    "these", "those", "i", "you", "he", "she", "it", "we", "they",
    "when", "where", "which", "who", "what", "how", "why", "if", "then", "else",
    "also", "other", "more", "most", "some", "any", "all", "each",
    "every", "both", "either", "neither", "one", "two", "three", "first",
    "second", "third", "last", "next", "previous", "new", "old", "same",
    "different", "such", "than", "too", "very", "so", "just", "only",
    "even", "still", "yet", "already", "again", "once", "twice", "here",
    "there", "everywhere", "nowhere", "somewhere", "anywhere",
    "up", "down", "out", "off", "over", "under", "above", "below",
    "between", "among", "through", "during", "before", "after", "while",
    "since", "until", "about", "against", "into", "onto", "upon", "within",
    "without", "across", "around", "behind", "beside", "beyond", "near",
    "far", "away", "back", "forward", "ahead", "together", "apart",
    "alone", "along", "besides", "except",
    # ── Label filler ────────────────────────────────────────────────────────
    "patients", "patient", "use", "mg", "tablet", "dose", "dosing",
    "treatment", "clinical", "studies", "study", "including",
    "include", "includes", "drug", "drugs", "medication", "medications",
    "interaction", "interactions", "adverse", "effects", "effect",
    "reaction", "reactions",
})


def normalize(text: str) -> str:
    """Lowercase and replace every non-word, non-space character with a space."""
    return _PUNCTUATION.sub(" ", text.lower())


def normalize_tokens(text: str) -> str:
    """Tokenizer variant of normalize: also collapses whitespace runs and trims."""
    return _WHITESPACE_RUN.sub(" ", normalize(text)).strip()


def extract_field_text(value) -> str:
    """
    Pull a usable string out of an openFDA field.

    Strings pass through, lists keep only their string elements joined by
    newlines, anything else (None, numbers, dicts) yields "".
    """
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(item for item in value if isinstance(item, str))
    return ""


def tokenize(text: str) -> list[str]:
    return [
        token
        for token in normalize_tokens(text).split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOPWORDS
    ]


def count_frequencies(tokens: Iterable[str]) -> dict[str, int]:
    table: dict[str, int] = {}
    for token in tokens:
        table[token] = table.get(token, 0) + 1
    return table


def merge_frequencies(tables: Iterable[dict[str, int]]) -> dict[str, int]:
    """Sum counts per token across tables. Used for fields within a label and labels within a corpus."""
    merged: dict[str, int] = {}
    for table in tables:
        for token, count in table.items():
            merged[token] = merged.get(token, 0) + count
    return merged


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rank_top(
    table: dict[str, int],
    n: int,
    boost_set: frozenset = DOMAIN_BOOST_TERMS,
    boost_factor: float = BOOST_FACTOR,
) -> list[dict]:
    """
    Return the n highest-valued terms as [{"name": term, "value": int}, ...].

    Boosted terms have their count multiplied by boost_factor before ranking.
    The sort is stable, so equal post-boost values keep the table's insertion
    order (first seen in the corpus ranks first).
    """
    boosted = [
        (term, count * boost_factor if term in boost_set else count)
        for term, count in table.items()
    ]
    boosted.sort(key=lambda item: item[1], reverse=True)
    return [{"name": term, "value": _round_half_up(value)} for term, value in boosted[:n]]
