"""
HTTP client for openFDA (drug labels and FAERS adverse-event reports).

Endpoints used:
    GET {OPENFDA_LABEL_URL}?search=...&limit=N   -> {"meta": ..., "results": [label, ...]}
    GET {OPENFDA_EVENT_URL}?search=...&limit=1   -> {"meta": {"results": {"total": N}}, ...}

openFDA answers 404 when a search matches nothing. For labels that surfaces
as UpstreamUnavailable; for the adverse-event count it is one of the
failures that end in a zero count.
"""

import logging
from datetime import date, timedelta

import httpx

from medsafe.config import OPENFDA_API_KEY, OPENFDA_EVENT_URL, OPENFDA_LABEL_URL
from medsafe.errors import MedsafeError, UpstreamShapeInvalid, UpstreamUnavailable, log_step
from medsafe.tools.upstream import build_url, fetch_json

logger = logging.getLogger(__name__)

SOURCE = "openFDA"

# Which query answered an adverse-event count lookup
LOOKUP_FUZZY = "fuzzy"
LOOKUP_EXACT = "exact"
LOOKUP_FALLBACK_ZERO = "fallback-zero"


def _params(**params) -> dict:
    if OPENFDA_API_KEY:
        params["api_key"] = OPENFDA_API_KEY
    return params


def label_params(search: str, limit: int) -> dict:
    params = {"limit": str(limit)}
    if search:
        params["search"] = search
    return _params(**params)


def label_request_url(search: str, limit: int) -> str:
    """The URL fetch_labels will request (reported in debug payloads)."""
    return build_url(OPENFDA_LABEL_URL, label_params(search, limit))


def fetch_labels(search: str, limit: int, timeout_seconds: float, client: httpx.Client | None = None) -> list:
    """Return the label records for a search. Raises UpstreamShapeInvalid if "results" is not a list."""
    data = fetch_json(
        OPENFDA_LABEL_URL,
        label_params(search, limit),
        source=SOURCE,
        timeout_seconds=timeout_seconds,
        client=client,
    )
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise UpstreamShapeInvalid("Invalid response format from openFDA API: results is not an array")
    log_step(logger, "openFDA labels fetched", fetchedCount=len(results))
    return results


def ping(timeout_seconds: float, client: httpx.Client | None = None) -> int:
    """Minimal label request (limit=1, no search). Returns the number of records fetched."""
    data = fetch_json(
        OPENFDA_LABEL_URL,
        label_params("", 1),
        source=SOURCE,
        timeout_seconds=timeout_seconds,
        client=client,
    )
    results = data.get("results") if isinstance(data, dict) else None
    return len(results) if isinstance(results, list) else 0


def date_range(days: int, today: date | None = None) -> tuple[str, str]:
    """(start, end) as YYYYMMDD strings covering the last `days` days."""
    end = today or date.today()
    start = end - timedelta(days=days)
    return start.strftime("%Y%m%d"), end.strftime("%Y%m%d")


def event_search(drug_name: str, start: str, end: str, exact: bool = False) -> str:
    field = "patient.drug.medicinalproduct.exact" if exact else "patient.drug.medicinalproduct"
    name = drug_name.replace('"', "")
    return f'receivedate:[{start} TO {end}] AND {field}:"{name}"'


def _parse_total(data) -> int:
    try:
        total = data["meta"]["results"]["total"]
        return int(total)
    except (KeyError, TypeError, ValueError) as exc:
        raise UpstreamShapeInvalid("openFDA event response has no meta.results.total") from exc


def fetch_event_count(
    drug_name: str,
    days: int,
    timeout_seconds: float,
    client: httpx.Client | None = None,
    today: date | None = None,
) -> tuple[int, str]:
    """
    Count FAERS reports naming drug_name received in the last `days` days.

    Tries the tokenized field first and, after a non-2xx or network failure,
    the .exact field once. A timeout or a response without a total ends the
    lookup. When no query answers, the count is 0 and the lookup is reported
    as "fallback-zero": a zero here does not prove there were no reports.
    Returns (count, lookup) where lookup is fuzzy, exact or fallback-zero.
    """
    start, end = date_range(days, today)

    for lookup, exact in ((LOOKUP_FUZZY, False), (LOOKUP_EXACT, True)):
        params = _params(search=event_search(drug_name, start, end, exact=exact), limit="1")
        try:
            data = fetch_json(
                OPENFDA_EVENT_URL,
                params,
                source="FAERS",
                timeout_seconds=timeout_seconds,
                client=client,
            )
            count = _parse_total(data)
        except MedsafeError as exc:
            log_step(
                logger,
                "FAERS lookup failed",
                logging.WARNING,
                drugName=drug_name,
                lookup=lookup,
                errorName=type(exc).__name__,
                errorMessage=str(exc),
            )
            if isinstance(exc, UpstreamUnavailable):
                continue
            break

        log_step(logger, "FAERS count fetched", drugName=drug_name, lookup=lookup, count=count)
        return count, lookup

    # Unknown, not verified zero; kept for compatibility with the published chart
    return 0, LOOKUP_FALLBACK_ZERO
