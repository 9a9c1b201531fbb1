"""
Error taxonomy for the data endpoints.

Every failure in a request is scoped to that request: the HTTP clients in
medsafe/tools raise one of the classes below, the pipelines let it propagate,
and main.py converts it into the JSON error shape

    {"error": "<endpoint> failed", "details": "<Name>: <message>", "generatedAt": ...}

Stack traces stay in the server log. None of these errors is process-fatal.
"""

import logging
from datetime import datetime, timezone

from medsafe.config import DETAILS_CHARS


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def log_step(logger: logging.Logger, step: str, level: int = logging.INFO, **context) -> None:
    """Log a pipeline step as a structured context dict (step, timestamp, identifiers)."""
    payload = {"step": step, **context, "timestamp": utc_now_iso()}
    logger.log(level, "%s", payload)


class MedsafeError(Exception):
    """Base class for request-scoped failures that map to a JSON error response."""

    status_code = 500

    def __init__(self, message: str, extra: dict | None = None):
        super().__init__(message)
        self.extra = extra or {}

    @property
    def details(self) -> str:
        return f"{type(self).__name__}: {self}"[:DETAILS_CHARS]


class UpstreamUnavailable(MedsafeError):
    """Non-2xx status or network failure from an external data source."""

    status_code = 502


class UpstreamTimeout(MedsafeError):
    """An upstream fetch exceeded its deadline."""

    status_code = 504


class UpstreamShapeInvalid(MedsafeError):
    """Upstream JSON lacks the expected top-level structure."""

    status_code = 502


class SchemaResolutionFailure(MedsafeError):
    """No column scored above zero for a required role in a tabular dataset."""

    status_code = 500


class NotFound(MedsafeError):
    """A requested drug is not present in the size-capped top list."""

    status_code = 404
