"""
Central configuration for the MedSafe data endpoints.

Every value can be overridden through an environment variable (a local .env
file is loaded by main.py before this module is imported). Upstream URLs,
timeouts and cache lifetimes all live here so that the pipelines and HTTP
clients never read the environment directly.
"""

import os

# ── Upstream sources ────────────────────────────────────────────────────────
OPENFDA_LABEL_URL = os.getenv("OPENFDA_LABEL_URL", "https://api.fda.gov/drug/label.json")
OPENFDA_EVENT_URL = os.getenv("OPENFDA_EVENT_URL", "https://api.fda.gov/drug/event.json")
OPENFDA_API_KEY = os.getenv("OPENFDA_API_KEY")

CMS_DATASET_ID = "7e0b4365-fd63-4a29-8f5e-e0ac9f66a81b"
CMS_DATASET_URL = os.getenv(
    "CMS_DATASET_URL",
    f"https://data.cms.gov/data-api/v1/dataset/{CMS_DATASET_ID}/data",
)
CMS_PAGE_SIZE = int(os.getenv("CMS_PAGE_SIZE", "1000"))

USER_AGENT = "MedSafe Project (https://medsafeproject.org)"

# ── Timeouts (seconds) ──────────────────────────────────────────────────────
LABEL_FETCH_TIMEOUT_SECONDS = float(os.getenv("LABEL_FETCH_TIMEOUT_SECONDS", "10"))
CLUSTER_FETCH_TIMEOUT_SECONDS = float(os.getenv("CLUSTER_FETCH_TIMEOUT_SECONDS", "15"))
SIGNALS_FETCH_TIMEOUT_SECONDS = float(os.getenv("SIGNALS_FETCH_TIMEOUT_SECONDS", "10"))

# ── Cache lifetimes (seconds) ───────────────────────────────────────────────
WORDCLOUD_CACHE_TTL_SECONDS = float(os.getenv("WORDCLOUD_CACHE_TTL_SECONDS", str(6 * 60 * 60)))
CLUSTERS_CACHE_TTL_SECONDS = float(os.getenv("CLUSTERS_CACHE_TTL_SECONDS", str(12 * 60 * 60)))
SIGNALS_CACHE_TTL_SECONDS = float(os.getenv("SIGNALS_CACHE_TTL_SECONDS", str(6 * 60 * 60)))

# Bumped on deploys that change a payload shape, so stale entries are ignored
CACHE_VERSION = "v1"

# ── Aggregation parameters ──────────────────────────────────────────────────
WORDCLOUD_LABEL_LIMIT = 200
WORDCLOUD_TOP_N = 80
CLUSTERS_LABEL_LIMIT = 300
CLUSTER_MAX_TERMS = 5
TOP_LIST_SIZE = 50
SIGNALS_TIME_WINDOW_DAYS = 365

# Upstream error bodies are cut to this many characters before being logged
# or embedded in an error message; client-facing details are capped separately.
SNIPPET_CHARS = 200
DETAILS_CHARS = 400

BROWSER_CACHE_CONTROL = "public, max-age=3600"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
