"""
Signals vs Exposure Pipeline — FAERS report counts against CMS Part D exposure.

    CMS rows -> choose name/exposure columns -> top list (50, by exposure)
    [drug given] -> must be in the top list -> FAERS count, last 365 days
                 -> rate per 100k exposed

The top list is cached on its own key and shared by every request; each
assembled response is cached per drug. A drug outside the top list is a 404
even if the full dataset contains it.

The FAERS count never fails the request: after the exact-field fallback it
degrades to 0, which means "unknown" rather than "no reports". Debug
responses say which lookup answered.
"""

import logging

from medsafe.cache import TTLCache
from medsafe.config import (
    CACHE_VERSION,
    SIGNALS_CACHE_TTL_SECONDS,
    SIGNALS_FETCH_TIMEOUT_SECONDS,
    SIGNALS_TIME_WINDOW_DAYS,
)
from medsafe.errors import NotFound, SchemaResolutionFailure, UpstreamShapeInvalid, log_step, utc_now_iso
from medsafe.models import SignalsExposureResponse
from medsafe.rates import build_signal_item
from medsafe.schema_scorer import build_top_list, candidate_fields, choose_fields, collect_columns
from medsafe.tools import cms_api, openfda_api

logger = logging.getLogger(__name__)

TOP_LIST_KEY = f"cms-top-list:{CACHE_VERSION}"
SOURCES = {
    "faers": "openFDA drug/event.json",
    "cms": cms_api.SOURCE_LABEL,
}


def normalize_drug_name(name: str | None) -> str:
    return (name or "").strip().upper()


def response_cache_key(drug_name: str) -> str:
    return f"signals:{CACHE_VERSION}:{drug_name or '*'}"


def resolve_top_list(rows: list) -> dict:
    """
    Pick the dataset columns and build the top list.

    Raises SchemaResolutionFailure (with the scored candidates) when no column
    fits a role or one column wins both roles, UpstreamShapeInvalid when no
    row survives parsing.
    """
    columns = collect_columns(rows)
    choice = choose_fields(columns)

    unresolved = choice.name_field is None or choice.exposure_field is None
    if unresolved or choice.name_field == choice.exposure_field:
        candidates = candidate_fields(columns)
        log_step(
            logger,
            "schema resolution failed",
            logging.ERROR,
            nameField=choice.name_field,
            exposureField=choice.exposure_field,
            **candidates,
        )
        raise SchemaResolutionFailure(
            "Could not identify drug-name and exposure columns in CMS data. "
            f"Name candidates: {candidates['candidateNameFields']}; "
            f"exposure candidates: {candidates['candidateExposureFields']}",
            extra={"columns": columns, **candidates},
        )

    top_list = build_top_list(rows, choice.name_field, choice.exposure_field)
    if not top_list:
        raise UpstreamShapeInvalid("Could not extract drug names or exposure counts from CMS data")

    log_step(
        logger,
        "CMS top list built",
        count=len(top_list),
        nameField=choice.name_field,
        exposureField=choice.exposure_field,
        exposureType=choice.exposure_type,
    )
    return {
        "topList": top_list,
        "exposureType": choice.exposure_type,
        "nameField": choice.name_field,
        "exposureField": choice.exposure_field,
        "columns": columns,
    }


def _load_top_list() -> dict:
    rows = cms_api.fetch_rows(SIGNALS_FETCH_TIMEOUT_SECONDS)
    return resolve_top_list(rows)


def run(cache: TTLCache, drug: str | None = None, debug: bool = False, refresh: bool = False) -> dict:
    """
    Serve the signals payload, for the top list alone or for one drug.

    debug skips cache read and write; refresh skips the read and stores the
    recomputed top list and response.
    """
    drug_name = normalize_drug_name(drug)
    read = not (debug or refresh)
    write = not debug

    def compute() -> dict:
        top = cache.get_or_compute(TOP_LIST_KEY, _load_top_list, SIGNALS_CACHE_TTL_SECONDS, read=read, write=write)

        items = []
        lookup = None
        if drug_name:
            selected = next((entry for entry in top["topList"] if entry["drugName"] == drug_name), None)
            if selected is None:
                log_step(logger, "drug not in top list", logging.WARNING, drugName=drug_name)
                raise NotFound(f'Drug "{drug.strip()}" not found in top list', extra={"drug": drug.strip()})

            reports, lookup = openfda_api.fetch_event_count(
                selected["drugName"], SIGNALS_TIME_WINDOW_DAYS, SIGNALS_FETCH_TIMEOUT_SECONDS
            )
            items.append(build_signal_item(selected["drugName"], reports, selected["exposureCount"]))

        response = SignalsExposureResponse(
            generated_at=utc_now_iso(),
            sources=SOURCES,
            time_window_days=SIGNALS_TIME_WINDOW_DAYS,
            exposure_type=top["exposureType"],
            items=items,
            top_list=top["topList"],
        )
        if debug:
            response.debug = {
                "nameField": top["nameField"],
                "exposureField": top["exposureField"],
                "columns": top["columns"],
                "cmsRequestUrl": cms_api.dataset_request_url(),
                **candidate_fields(top["columns"]),
            }
            if lookup:
                response.debug["faersLookup"] = lookup
        return response.to_payload()

    return cache.get_or_compute(
        response_cache_key(drug_name),
        compute,
        SIGNALS_CACHE_TTL_SECONDS,
        read=read,
        write=write,
    )
