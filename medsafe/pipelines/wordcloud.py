"""
Word Cloud Pipeline — most frequent terms across openFDA label safety text.

    fetch labels -> extract five safety fields -> tokenize -> per-label table
    -> corpus table -> boost domain terms -> top 80

Besides the normal cached flow there are two diagnostic modes that never
touch the cache: selftest (fixed payload, no upstream call) and ping
(one-record upstream request to check connectivity).
"""

import logging

from medsafe.cache import TTLCache
from medsafe.config import (
    CACHE_VERSION,
    LABEL_FETCH_TIMEOUT_SECONDS,
    WORDCLOUD_CACHE_TTL_SECONDS,
    WORDCLOUD_LABEL_LIMIT,
    WORDCLOUD_TOP_N,
)
from medsafe.errors import MedsafeError, log_step, utc_now_iso
from medsafe.models import WordCloudResponse
from medsafe.text import count_frequencies, extract_field_text, merge_frequencies, rank_top, tokenize
from medsafe.tools import openfda_api

logger = logging.getLogger(__name__)

CACHE_KEY = f"wordcloud:{CACHE_VERSION}"
SOURCE_LABEL = "openFDA drug labels"

LABEL_FIELDS = (
    "drug_interactions",
    "warnings",
    "contraindications",
    "boxed_warning",
    "warnings_and_precautions",
)
SEARCH = " OR ".join(f"_exists_:{field}" for field in LABEL_FIELDS)
PREVIEW_SIZE = 10


def request_url() -> str:
    return openfda_api.label_request_url(SEARCH, WORDCLOUD_LABEL_LIMIT)


def build_word_cloud(labels: list, debug: bool = False, openfda_request_url: str | None = None) -> dict:
    """Aggregate label records into the word-cloud payload."""
    label_tables = []
    corpus_chars = 0

    for label in labels:
        if not isinstance(label, dict):
            continue
        field_tables = []
        for field in LABEL_FIELDS:
            text = extract_field_text(label.get(field))
            if text:
                corpus_chars += len(text)
                field_tables.append(count_frequencies(tokenize(text)))
        if field_tables:
            label_tables.append(merge_frequencies(field_tables))

    corpus = merge_frequencies(label_tables)
    terms = rank_top(corpus, WORDCLOUD_TOP_N)

    log_step(
        logger,
        "tokenized",
        fetchedCount=len(labels),
        uniqueTokenCount=len(corpus),
        termCount=len(terms),
    )

    response = WordCloudResponse(generated_at=utc_now_iso(), source=SOURCE_LABEL, terms=terms)
    if debug:
        response.fetched_count = len(labels)
        response.corpus_char_count = corpus_chars
        response.unique_token_count = len(corpus)
        response.top_tokens_preview = response.terms[:PREVIEW_SIZE]
        response.open_fda_request_url = openfda_request_url
    return response.to_payload()


def _fetch_and_build(debug: bool) -> dict:
    labels = openfda_api.fetch_labels(SEARCH, WORDCLOUD_LABEL_LIMIT, LABEL_FETCH_TIMEOUT_SECONDS)
    return build_word_cloud(labels, debug=debug, openfda_request_url=request_url())


def run(cache: TTLCache, debug: bool = False, refresh: bool = False) -> dict:
    """Serve the word cloud. debug skips cache read and write; refresh skips the read only."""
    return cache.get_or_compute(
        CACHE_KEY,
        lambda: _fetch_and_build(debug),
        WORDCLOUD_CACHE_TTL_SECONDS,
        read=not (debug or refresh),
        write=not debug,
    )


def selftest() -> dict:
    """Deterministic payload for checking the frontend wiring without openFDA."""
    log_step(logger, "selftest mode")
    return WordCloudResponse(
        generated_at=utc_now_iso(),
        source="selftest",
        terms=[
            {"name": "interaction", "value": 42},
            {"name": "bleeding", "value": 18},
            {"name": "cyp3a4", "value": 12},
        ],
        debug={"mode": "selftest"},
    ).to_payload()


def ping() -> tuple[int, dict]:
    """Check openFDA connectivity. Returns (http_status, payload); failures are 502."""
    url = openfda_api.label_request_url("", 1)
    try:
        fetched = openfda_api.ping(LABEL_FETCH_TIMEOUT_SECONDS)
    except MedsafeError as exc:
        log_step(logger, "ping failed", logging.ERROR, errorName=type(exc).__name__, errorMessage=str(exc))
        return 502, {
            "ok": False,
            "status": exc.extra.get("upstreamStatus", 0),
            "details": exc.details,
            "openFdaRequestUrl": url,
            "generatedAt": utc_now_iso(),
        }

    log_step(logger, "ping succeeded", fetched=fetched, openFdaRequestUrl=url)
    return 200, {
        "ok": True,
        "status": 200,
        "fetched": fetched,
        "openFdaRequestUrl": url,
        "generatedAt": utc_now_iso(),
    }
