"""
Shared GET-and-parse helper for the upstream data sources.

This is the only place that handles httpx exceptions. Callers receive parsed
JSON or one of the medsafe.errors classes:

    timeout            -> UpstreamTimeout   ("<source> request timed out after Nms")
    network failure    -> UpstreamUnavailable
    non-2xx status     -> UpstreamUnavailable (body cut to SNIPPET_CHARS)
    body is not JSON   -> UpstreamShapeInvalid

No retries here; the adverse-event lookup does its own single fallback.
"""

import logging
from contextlib import nullcontext

import httpx

from medsafe.config import SNIPPET_CHARS, USER_AGENT
from medsafe.errors import UpstreamShapeInvalid, UpstreamTimeout, UpstreamUnavailable, log_step

logger = logging.getLogger(__name__)


def build_url(url: str, params: dict | None = None) -> str:
    return str(httpx.URL(url, params=params or {}))


def fetch_json(
    url: str,
    params: dict | None = None,
    *,
    source: str,
    timeout_seconds: float,
    client: httpx.Client | None = None,
):
    """
    GET url and return the decoded JSON body.

    A caller-supplied client is used as-is and left open; otherwise a client
    is created for this one request.
    """
    request_url = build_url(url, params)
    timeout_ms = int(timeout_seconds * 1000)
    log_step(logger, f"fetching {source}", url=request_url)

    session = nullcontext(client) if client is not None else httpx.Client(timeout=timeout_seconds)
    with session as http:
        try:
            response = http.get(
                url,
                params=params,
                headers={"User-Agent": USER_AGENT},
                timeout=timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            log_step(logger, f"{source} timeout", logging.ERROR, url=request_url, timeoutMs=timeout_ms)
            raise UpstreamTimeout(f"{source} request timed out after {timeout_ms}ms") from exc
        except httpx.RequestError as exc:
            log_step(logger, f"{source} request failed", logging.ERROR, url=request_url, error=str(exc))
            raise UpstreamUnavailable(f"{source} request failed: {exc}") from exc

        if not response.is_success:
            snippet = response.text[:SNIPPET_CHARS]
            log_step(
                logger,
                f"{source} error response",
                logging.ERROR,
                url=request_url,
                status=response.status_code,
                snippet=snippet,
            )
            raise UpstreamUnavailable(
                f"{source} API error: {response.status_code} {response.reason_phrase}. Response: {snippet}",
                extra={"upstreamStatus": response.status_code},
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamShapeInvalid(f"{source} returned a body that is not JSON") from exc
