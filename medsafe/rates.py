"""
Rate Aggregator — adverse-event reports per 100,000 exposed units.

The rate is a relative signal for cross-drug comparison only. It does not
imply causation and is always returned next to both raw counts.
"""

import math

PER_UNITS = 100_000


def compute_rate(report_count: int, exposure_count: int) -> float:
    """reports / exposure * 100k, rounded half-up to one decimal; 0 when exposure is not positive."""
    if exposure_count <= 0:
        return 0.0
    rate = report_count / exposure_count * PER_UNITS
    return math.floor(rate * 10 + 0.5) / 10


def build_signal_item(drug_name: str, report_count: int, exposure_count: int) -> dict:
    return {
        "drugName": drug_name,
        "faersReports": report_count,
        "exposureCount": exposure_count,
        "ratePer100k": compute_rate(report_count, exposure_count),
    }
