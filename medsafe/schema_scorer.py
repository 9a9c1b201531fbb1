"""
Schema Field Scorer — picks the drug-name and exposure-count columns of the
CMS Part D dataset, which publishes no stable schema contract.

Column names are scored with substring heuristics on the lower-cased name.
Weights stack: a column can satisfy several rules at once.

    Name role                              Exposure role
    exact generic_name / drug_name  100    contains bene / beneficiar  100  (type=beneficiaries)
    contains generic AND name        50    contains claim               50  (type=claims unless beneficiaries)
    contains drug AND name           40    contains count / cnt         20
    contains generic                 20    contains total / tot         10
    contains drug                    15
    contains name                    10

The parsed rows are reduced to the "top list": at most TOP_LIST_SIZE drugs,
sorted by exposure count descending. The top list is also the membership
check for per-drug lookups.
"""

import logging
import math
import numbers
from typing import Iterable, NamedTuple

import pandas as pd

from medsafe.config import TOP_LIST_SIZE

logger = logging.getLogger(__name__)

BENEFICIARIES = "beneficiaries"
CLAIMS = "claims"


class FieldChoice(NamedTuple):
    name_field: str | None
    exposure_field: str | None
    exposure_type: str


def score_name_field(field_name: str) -> int:
    name = field_name.lower()
    score = 0
    if name in ("generic_name", "drug_name"):
        score += 100
    if "generic" in name and "name" in name:
        score += 50
    if "drug" in name and "name" in name:
        score += 40
    if "generic" in name:
        score += 20
    if "drug" in name:
        score += 15
    if "name" in name:
        score += 10
    return score


def score_exposure_field(field_name: str) -> tuple[int, str | None]:
    """Score a column for the exposure role; the type is None when neither bene nor claim matched."""
    name = field_name.lower()
    score = 0
    exposure_type = None
    if "bene" in name or "beneficiar" in name:
        score += 100
        exposure_type = BENEFICIARIES
    if "claim" in name:
        score += 50
        if exposure_type != BENEFICIARIES:
            exposure_type = CLAIMS
    if "count" in name or "cnt" in name:
        score += 20
    if "total" in name or "tot" in name:
        score += 10
    return score, exposure_type


def choose_fields(columns: Iterable[str]) -> FieldChoice:
    """
    Pick the best column for each role. First-seen column wins ties; a role
    whose best score is 0 is left as None. exposure_type defaults to claims.
    """
    name_field, name_score = None, 0
    exposure_field, exposure_score, exposure_type = None, 0, None

    for column in columns:
        score = score_name_field(column)
        if score > name_score:
            name_field, name_score = column, score

        score, kind = score_exposure_field(column)
        if score > exposure_score:
            exposure_field, exposure_score, exposure_type = column, score, kind

    return FieldChoice(name_field, exposure_field, exposure_type or CLAIMS)


def candidate_fields(columns: Iterable[str]) -> dict[str, list[str]]:
    """Columns with a positive score for each role, for error diagnostics."""
    columns = list(columns)
    return {
        "candidateNameFields": [c for c in columns if score_name_field(c) > 0],
        "candidateExposureFields": [c for c in columns if score_exposure_field(c)[0] > 0],
    }


def collect_columns(rows: list[dict]) -> list[str]:
    """Union of row keys, in first-seen order."""
    columns: dict[str, None] = {}
    for row in rows:
        if isinstance(row, dict):
            columns.update(dict.fromkeys(row))
    return list(columns)


def parse_exposure(value) -> float:
    """Parse an exposure cell; thousands separators are stripped from strings. NaN on failure."""
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", "").strip())
        except ValueError:
            return math.nan
    return math.nan


def build_top_list(rows: list[dict], name_field: str, exposure_field: str, size: int = TOP_LIST_SIZE) -> list[dict]:
    """
    Reduce dataset rows to [{"drugName", "exposureCount"}, ...].

    Counts are rounded half-up to integers first; rows with a missing name
    or exposure, a blank name, an unparseable exposure or a rounded count
    below 1 are skipped. Names are trimmed and upper-cased; when a name
    repeats, its highest-exposure row is kept.
    """
    records = [row for row in rows if isinstance(row, dict)]
    if not records:
        return []

    df = pd.DataFrame.from_records(records)
    if name_field not in df.columns or exposure_field not in df.columns:
        return []

    df = df[[name_field, exposure_field]].dropna()
    names = df[name_field].astype(str).str.strip().str.upper()
    exposures = df[exposure_field].map(parse_exposure).astype(float)

    top = pd.DataFrame({"drugName": names, "exposureCount": exposures})
    parsed = (
        (top["drugName"] != "")
        & top["exposureCount"].notna()
        & (top["exposureCount"].abs() < math.inf)
    )
    top = top[parsed].assign(exposureCount=lambda frame: (frame["exposureCount"] + 0.5).map(math.floor))
    top = top[top["exposureCount"] > 0]

    top = (
        top.sort_values("exposureCount", ascending=False, kind="stable")
        .drop_duplicates(subset="drugName", keep="first")
        .head(size)
    )

    logger.info(
        "Top list built: %d of %d rows kept (name=%s, exposure=%s)",
        len(top), len(records), name_field, exposure_field,
    )
    return [
        {"drugName": str(name), "exposureCount": int(count)}
        for name, count in zip(top["drugName"], top["exposureCount"])
    ]
