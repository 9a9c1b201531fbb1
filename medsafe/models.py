"""
Response models — the JSON shapes returned by the data endpoints.

Python attributes are snake_case; the wire format is camelCase. Pipelines
build a model and return model.to_payload(), a plain dict that is what the
cache stores, so a cached response serializes to the same bytes every time.
Optional debug fields are left out of the payload when unset.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ── Word cloud ──────────────────────────────────────────────────────────────
class WordCloudTerm(CamelModel):
    name: str
    value: int


class WordCloudResponse(CamelModel):
    generated_at: str
    source: str
    terms: list[WordCloudTerm]

    # Only when debug=1
    fetched_count: Optional[int] = None
    corpus_char_count: Optional[int] = None
    unique_token_count: Optional[int] = None
    top_tokens_preview: Optional[list[WordCloudTerm]] = None
    open_fda_request_url: Optional[str] = None
    debug: Optional[dict] = None


# ── Interaction clusters ────────────────────────────────────────────────────
class Cluster(CamelModel):
    id: str
    label: str
    count: int
    terms: list[str]


class InteractionClustersResponse(CamelModel):
    generated_at: str
    source: str
    label_count: int
    clusters: list[Cluster]

    # Only when debug=1
    fetched_count: Optional[int] = None
    matched_label_count: Optional[int] = None
    open_fda_request_url: Optional[str] = None


# ── Signals vs exposure ─────────────────────────────────────────────────────
class TopDrugItem(CamelModel):
    drug_name: str
    exposure_count: int = Field(..., gt=0)


class SignalItem(CamelModel):
    drug_name: str
    faers_reports: int
    exposure_count: int
    rate_per_100k: float = Field(..., alias="ratePer100k")


class SignalSources(CamelModel):
    faers: str
    cms: str


class SignalsExposureResponse(CamelModel):
    generated_at: str
    sources: SignalSources
    time_window_days: int
    exposure_type: Literal["beneficiaries", "claims"]
    items: list[SignalItem]
    top_list: list[TopDrugItem]
    debug: Optional[dict] = None


# ── Misc ────────────────────────────────────────────────────────────────────
class ErrorResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    error: str
    details: str
    generated_at: str


class HealthResponse(CamelModel):
    ok: bool = True
    now: str
    functions: bool = True
