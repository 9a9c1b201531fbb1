"""
HTTP client for the CMS Part D Spending by Drug dataset (data.cms.gov).

    GET {CMS_DATASET_URL}?size=N   -> [ {column: value, ...}, ... ]

The column names are not a stable contract; medsafe/schema_scorer decides
which ones hold the drug name and the exposure count.
"""

import logging

import httpx

from medsafe.config import CMS_DATASET_ID, CMS_DATASET_URL, CMS_PAGE_SIZE
from medsafe.errors import UpstreamShapeInvalid, log_step
from medsafe.tools.upstream import build_url, fetch_json

logger = logging.getLogger(__name__)

SOURCE = "CMS"
SOURCE_LABEL = f"data.cms.gov Part D Spending by Drug (dataset {CMS_DATASET_ID})"


def dataset_params(size: int = CMS_PAGE_SIZE) -> dict:
    return {"size": str(size)}


def dataset_request_url(size: int = CMS_PAGE_SIZE) -> str:
    return build_url(CMS_DATASET_URL, dataset_params(size))


def fetch_rows(timeout_seconds: float, size: int = CMS_PAGE_SIZE, client: httpx.Client | None = None) -> list:
    """Return the dataset rows. An empty or non-array body raises UpstreamShapeInvalid."""
    data = fetch_json(
        CMS_DATASET_URL,
        dataset_params(size),
        source=SOURCE,
        timeout_seconds=timeout_seconds,
        client=client,
    )
    if not isinstance(data, list) or not data:
        raise UpstreamShapeInvalid("CMS API returned empty or invalid data")
    log_step(logger, "CMS rows fetched", rowCount=len(data))
    return data
