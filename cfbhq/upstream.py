"""
Upstream HTTP helpers shared by every data source.

All upstream calls go through here so they carry the same User-Agent and an
explicit timeout, and so every failure mode surfaces as ``UpstreamError``.
"""

import logging
import time

import requests

from cfbhq import config

log = logging.getLogger("cfb-hq.upstream")

# No shared Session: requests.Session is not thread-safe and the roster and
# schedule fan-outs call from many ThreadPoolExecutor workers at once.
_HTTP_HEADERS = {
    "User-Agent": config.USER_AGENT,
    "Accept": "application/json",
}

_RSS_HEADERS = {
    "User-Agent": config.USER_AGENT,
    "Accept": "application/rss+xml, application/xml, text/xml, */*",
    "Referer": "https://www.profootballnetwork.com/",
}


class UpstreamError(Exception):
    """An upstream source was unreachable or returned something unusable."""


class UpstreamTimeout(UpstreamError):
    """An upstream call exceeded its time budget."""


def _get(url, params, headers, timeout):
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=timeout)
        resp.raise_for_status()
    except requests.Timeout as e:
        raise UpstreamTimeout(f"{url} timed out after {timeout}s") from e
    except requests.HTTPError as e:
        raise UpstreamError(f"{url} returned HTTP {e.response.status_code}") from e
    except requests.RequestException as e:
        raise UpstreamError(f"{url} request failed: {e}") from e
    return resp


def get_json(url, params=None, timeout=config.ESPN_TIMEOUT_SECONDS):
    """GET ``url`` and decode the JSON body."""
    resp = _get(url, params, _HTTP_HEADERS, timeout)
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamError(f"{url} returned malformed JSON") from e


def get_text(url, params=None, timeout=config.RSS_TIMEOUT_SECONDS):
    """GET ``url`` as UTF-8 text (RSS/XML feeds)."""
    resp = _get(url, params, _RSS_HEADERS, timeout)
    resp.encoding = "utf-8"
    return resp.text


def retry(operation, attempts=config.RETRY_ATTEMPTS, backoff=config.RETRY_BACKOFF_SECONDS):
    """Run ``operation()`` up to ``attempts`` times with a fixed sleep between tries.

    Only ``UpstreamError`` is retried; the last one is re-raised.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except UpstreamError as e:
            if attempt == attempts:
                raise
            log.debug(f"Attempt {attempt}/{attempts} failed ({e}), retrying in {backoff}s")
            time.sleep(backoff)
