"""
Cluster Matcher — tags label text with the interaction clusters it discusses.

A label counts once per cluster (document-level presence, not occurrences).
Each cluster also collects the dictionary phrases that matched, in the order
they were first seen, and reports at most CLUSTER_MAX_TERMS of them.
"""

import logging
import re
from functools import lru_cache
from typing import Iterable, Sequence

from medsafe.cluster_patterns import CLUSTER_DEFINITIONS, ClusterDefinition
from medsafe.config import CLUSTER_MAX_TERMS
from medsafe.text import normalize

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern | None:
    """
    Build the whole-word regex for a phrase.

    "blood clotting" -> r"\\bblood\\s+clotting\\b". A phrase that normalizes to
    nothing returns None and never matches.
    """
    words = normalize(pattern).split()
    if not words:
        return None
    return re.compile(r"\b" + r"\s+".join(re.escape(word) for word in words) + r"\b", re.IGNORECASE)


# Compile the fixed dictionary once at import
for _cluster in CLUSTER_DEFINITIONS:
    for _pattern in _cluster.patterns:
        compile_pattern(_pattern)


def _matching_patterns(normalized: str, patterns: Sequence[str]):
    for pattern in patterns:
        regex = compile_pattern(pattern)
        if regex is not None and regex.search(normalized):
            yield pattern


def matches_cluster(text: str, patterns: Sequence[str]) -> bool:
    """True if any phrase occurs in the text as a whole word or phrase."""
    return next(_matching_patterns(normalize(text), patterns), None) is not None


def extract_top_terms(text: str, patterns: Sequence[str], max_terms: int = CLUSTER_MAX_TERMS) -> list[str]:
    """Phrases present in the text, in dictionary order, stopping after max_terms."""
    terms = []
    for pattern in _matching_patterns(normalize(text), patterns):
        terms.append(pattern)
        if len(terms) >= max_terms:
            break
    return terms


def aggregate_clusters(
    texts: Iterable[str],
    definitions: Sequence[ClusterDefinition] = CLUSTER_DEFINITIONS,
    max_terms: int = CLUSTER_MAX_TERMS,
) -> list[dict]:
    """
    Count, per cluster, how many texts mention it and which phrases did.

    Returns [{"id", "label", "count", "terms"}, ...] with zero-count clusters
    dropped, ordered by count descending and then by definition order.
    """
    counts = [0] * len(definitions)
    # dict used as an insertion-ordered set
    terms: list[dict[str, None]] = [{} for _ in definitions]

    for text in texts:
        normalized = normalize(text)
        for index, cluster in enumerate(definitions):
            matched = []
            for pattern in _matching_patterns(normalized, cluster.patterns):
                matched.append(pattern)
                if len(matched) >= max_terms:
                    break
            if matched:
                counts[index] += 1
                terms[index].update(dict.fromkeys(matched))

    results = [
        {
            "id": cluster.id,
            "label": cluster.label,
            "count": counts[index],
            "terms": list(terms[index])[:max_terms],
        }
        for index, cluster in enumerate(definitions)
        if counts[index] > 0
    ]
    order = {cluster.id: index for index, cluster in enumerate(definitions)}
    results.sort(key=lambda result: (-result["count"], order[result["id"]]))

    logger.debug("Cluster hits: %s", {result["id"]: result["count"] for result in results})
    return results
