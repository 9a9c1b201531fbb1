"""
Unit tests for CMS column scoring, top-list parsing and rate computation.
"""

import pytest

from medsafe.errors import SchemaResolutionFailure, UpstreamShapeInvalid
from medsafe.pipelines.signals_exposure import resolve_top_list
from medsafe.rates import build_signal_item, compute_rate
from medsafe.schema_scorer import (
    BENEFICIARIES,
    CLAIMS,
    build_top_list,
    candidate_fields,
    choose_fields,
    collect_columns,
    parse_exposure,
    score_exposure_field,
    score_name_field,
)
from tests.mocks.cms_api import FAKE_ROWS


# ── Scoring ─────────────────────────────────────────────────────────────────


class TestScoreNameField:
    @pytest.mark.parametrize(
        "field, expected",
        [
            ("generic_name", 180),  # exact + generic&name + generic + name
            ("drug_name", 165),     # exact + drug&name + drug + name
            ("Gnrc_Name", 10),
            ("brand_generic_name_x", 80),
            ("drug_class", 15),
            ("total_spending", 0),
        ],
    )
    def test_weights_stack(self, field, expected):
        assert score_name_field(field) == expected


class TestScoreExposureField:
    @pytest.mark.parametrize(
        "field, expected",
        [
            ("bene_count", (120, BENEFICIARIES)),
            ("Tot_Benes_2022", (110, BENEFICIARIES)),
            ("total_claim_count", (80, CLAIMS)),
            ("tot_clms", (10, None)),
            ("beneficiary_claim_cnt", (170, BENEFICIARIES)),
            ("spending", (0, None)),
        ],
    )
    def test_weights_and_type(self, field, expected):
        assert score_exposure_field(field) == expected


class TestChooseFields:
    def test_generic_name_and_bene_count(self):
        choice = choose_fields(["generic_name", "bene_count"])
        assert choice.name_field == "generic_name"
        assert choice.exposure_field == "bene_count"
        assert choice.exposure_type == "beneficiaries"

    def test_no_suitable_columns(self):
        choice = choose_fields(["foo", "bar"])
        assert choice.name_field is None
        assert choice.exposure_field is None
        assert choice.exposure_type == "claims"

    def test_first_seen_wins_ties(self):
        choice = choose_fields(["Brnd_Name", "Gnrc_Name", "Tot_Clms_2022", "Tot_Mftr"])
        assert choice.name_field == "Brnd_Name"
        assert choice.exposure_field == "Tot_Clms_2022"
        assert choice.exposure_type == "claims"

    def test_claims_column(self):
        choice = choose_fields(["drug_name", "total_claim_count", "total_spending"])
        assert choice.exposure_field == "total_claim_count"
        assert choice.exposure_type == "claims"

    def test_candidates(self):
        assert candidate_fields(["foo", "brand_name", "tot_clms"]) == {
            "candidateNameFields": ["brand_name"],
            "candidateExposureFields": ["tot_clms"],
        }


# ── Row parsing ─────────────────────────────────────────────────────────────


class TestParseExposure:
    @pytest.mark.parametrize(
        "value, expected",
        [(12, 12.0), (3.5, 3.5), ("1,234,567", 1234567.0), (" 42 ", 42.0)],
    )
    def test_numbers(self, value, expected):
        assert parse_exposure(value) == expected

    @pytest.mark.parametrize("value", ["n/a", "", None, True, {"n": 1}])
    def test_unparseable_is_nan(self, value):
        assert parse_exposure(value) != parse_exposure(value)


class TestBuildTopList:
    def test_fake_dataset(self):
        top = build_top_list(FAKE_ROWS, "Brnd_Name", "Tot_Benes")
        assert top == [
            {"drugName": "ZESTRIL", "exposureCount": 2400000},
            {"drugName": "LIPITOR", "exposureCount": 1000000},
        ]

    def test_truncated_sorted_and_positive(self):
        rows = [{"name": f"drug {i}", "bene": str(i * 10)} for i in range(-5, 120)]
        top = build_top_list(rows, "name", "bene")

        assert len(top) == 50
        counts = [entry["exposureCount"] for entry in top]
        assert counts == sorted(counts, reverse=True)
        assert all(count > 0 for count in counts)
        assert top[0] == {"drugName": "DRUG 119", "exposureCount": 1190}

    @pytest.mark.parametrize("sub_unit", [0.4, "0.4", -0.3])
    def test_counts_rounding_to_zero_are_dropped(self, sub_unit):
        rows = [
            {"drug_name": "A", "bene_count": sub_unit},
            {"drug_name": "B", "bene_count": 5},
            {"drug_name": "C", "bene_count": 0.5},
        ]
        assert build_top_list(rows, "drug_name", "bene_count") == [
            {"drugName": "B", "exposureCount": 5},
            {"drugName": "C", "exposureCount": 1},
        ]

    def test_names_trimmed_uppercased_and_deduplicated(self):
        rows = [
            {"name": " warfarin ", "bene": 10},
            {"name": "WARFARIN", "bene": 30},
            {"name": "   ", "bene": 99},
            {"name": "heparin", "bene": 20.5},
        ]
        assert build_top_list(rows, "name", "bene") == [
            {"drugName": "WARFARIN", "exposureCount": 30},
            {"drugName": "HEPARIN", "exposureCount": 21},
        ]

    def test_missing_columns(self):
        assert build_top_list([{"a": 1}], "name", "bene") == []
        assert build_top_list([], "name", "bene") == []


class TestResolveTopList:
    def test_resolves_fake_dataset(self):
        top = resolve_top_list(FAKE_ROWS)
        assert top["nameField"] == "Brnd_Name"
        assert top["exposureField"] == "Tot_Benes"
        assert top["exposureType"] == "beneficiaries"
        assert top["columns"] == collect_columns(FAKE_ROWS)
        assert len(top["topList"]) == 2

    def test_schema_failure_lists_candidates(self):
        rows = [{"brand_name": "X", "spending": 10}]
        with pytest.raises(SchemaResolutionFailure) as excinfo:
            resolve_top_list(rows)
        assert excinfo.value.extra["candidateNameFields"] == ["brand_name"]
        assert excinfo.value.extra["candidateExposureFields"] == []
        assert excinfo.value.extra["columns"] == ["brand_name", "spending"]

    def test_one_column_winning_both_roles(self):
        rows = [{"bene_name": "X", "spend": 1}]
        with pytest.raises(SchemaResolutionFailure) as excinfo:
            resolve_top_list(rows)
        assert excinfo.value.extra["candidateNameFields"] == ["bene_name"]
        assert excinfo.value.extra["candidateExposureFields"] == ["bene_name"]

    def test_no_usable_rows(self):
        with pytest.raises(UpstreamShapeInvalid):
            resolve_top_list([{"drug_name": "X", "bene_count": "0"}])


# ── Rates ───────────────────────────────────────────────────────────────────


class TestComputeRate:
    def test_per_100k(self):
        assert compute_rate(250, 1_000_000) == 25.0

    def test_zero_exposure(self):
        assert compute_rate(1, 0) == 0

    def test_one_decimal_half_up(self):
        assert compute_rate(1, 3) == 33333.3
        assert compute_rate(2, 3) == 66666.7

    def test_signal_item_keeps_raw_counts(self):
        assert build_signal_item("LIPITOR", 250, 1_000_000) == {
            "drugName": "LIPITOR",
            "faersReports": 250,
            "exposureCount": 1_000_000,
            "ratePer100k": 25.0,
        }
