"""
Mock replacement for medsafe/tools/cms_api.py.

Rows mimic the Part D Spending by Drug layout: brand and generic name
columns, a beneficiary total and a claim total, numbers sometimes sent as
strings with thousands separators.
"""

FAKE_ROWS = [
    {"Brnd_Name": "Lipitor", "Gnrc_Name": "Atorvastatin", "Tot_Clms": "9,500,000", "Tot_Benes": "1,000,000"},
    {"Brnd_Name": "Zestril", "Gnrc_Name": "Lisinopril", "Tot_Clms": 7100000, "Tot_Benes": 2400000.4},
    {"Brnd_Name": "Synthroid", "Gnrc_Name": "Levothyroxine", "Tot_Clms": "6,000,000", "Tot_Benes": None},
    {"Brnd_Name": "Glucophage", "Gnrc_Name": "Metformin", "Tot_Clms": "5,000,000", "Tot_Benes": "n/a"},
    {"Brnd_Name": "Norvasc", "Gnrc_Name": "Amlodipine", "Tot_Clms": "4,000,000", "Tot_Benes": "0"},
]


def fetch_rows(timeout_seconds: float, size: int = 1000, client=None) -> list:
    return [dict(row) for row in FAKE_ROWS]
