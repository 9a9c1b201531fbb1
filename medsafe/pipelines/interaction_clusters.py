"""
Interaction Clusters Pipeline — how many openFDA labels discuss each
interaction concern (bleeding, serotonin syndrome, QT prolongation, ...).

Label text is drug_interactions, or warnings_and_precautions when the label
has no interaction section. Labels with neither are skipped but still
counted in labelCount.
"""

import logging

from medsafe.cache import TTLCache
from medsafe.cluster_matcher import aggregate_clusters
from medsafe.config import (
    CACHE_VERSION,
    CLUSTER_FETCH_TIMEOUT_SECONDS,
    CLUSTERS_CACHE_TTL_SECONDS,
    CLUSTERS_LABEL_LIMIT,
)
from medsafe.errors import log_step, utc_now_iso
from medsafe.models import InteractionClustersResponse
from medsafe.text import extract_field_text
from medsafe.tools import openfda_api

logger = logging.getLogger(__name__)

CACHE_KEY = f"clusters:{CACHE_VERSION}"
SOURCE_LABEL = "openFDA drug labels"
SEARCH = "_exists_:drug_interactions OR _exists_:warnings_and_precautions"


def interaction_text(label) -> str:
    if not isinstance(label, dict):
        return ""
    return (
        extract_field_text(label.get("drug_interactions"))
        or extract_field_text(label.get("warnings_and_precautions"))
    )


def build_interaction_clusters(labels: list, debug: bool = False, openfda_request_url: str | None = None) -> dict:
    texts = [text for text in map(interaction_text, labels) if text]
    clusters = aggregate_clusters(texts)

    log_step(
        logger,
        "processing complete",
        labelCount=len(labels),
        matchedLabelCount=len(texts),
        clusterCount=len(clusters),
    )

    response = InteractionClustersResponse(
        generated_at=utc_now_iso(),
        source=SOURCE_LABEL,
        label_count=len(labels),
        clusters=clusters,
    )
    if debug:
        response.fetched_count = len(labels)
        response.matched_label_count = len(texts)
        response.open_fda_request_url = openfda_request_url
    return response.to_payload()


def _fetch_and_build(debug: bool) -> dict:
    labels = openfda_api.fetch_labels(SEARCH, CLUSTERS_LABEL_LIMIT, CLUSTER_FETCH_TIMEOUT_SECONDS)
    url = openfda_api.label_request_url(SEARCH, CLUSTERS_LABEL_LIMIT)
    return build_interaction_clusters(labels, debug=debug, openfda_request_url=url)


def run(cache: TTLCache, debug: bool = False, refresh: bool = False) -> dict:
    return cache.get_or_compute(
        CACHE_KEY,
        lambda: _fetch_and_build(debug),
        CLUSTERS_CACHE_TTL_SECONDS,
        read=not (debug or refresh),
        write=not debug,
    )
