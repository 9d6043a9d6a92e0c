"""Shared HTTP and batching utilities for enrichment lookups.

Provides fetch_json() for single-attempt JSON requests and
process_in_batches() for paced, sequential item processing with
per-item failure isolation.  There are no retries: a
failed lookup is logged and the batch moves on.
"""

import logging
import time
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)

USER_AGENT = "faculty-curation/0.1"


class LookupFailed(RuntimeError):
    """An external lookup returned an error status or could not connect."""


def fetch_json(
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: int = 30,
    session: Optional[requests.Session] = None,
) -> Any:
    """GET *url* once and decode the JSON body.

    Args:
        url: URL to fetch.
        params: Optional query parameters.
        headers: Optional request headers (merged over the defaults).
        timeout: Request timeout in seconds.
        session: Optional pre-configured session.

    Raises:
        LookupFailed: On connection errors, timeouts or any non-200 status.
    """
    merged = {"Accept": "application/json", "User-Agent": USER_AGENT}
    if headers:
        merged.update(headers)
    getter = session.get if session is not None else requests.get
    try:
        resp = getter(url, params=params, headers=merged, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise LookupFailed(f"Request to {url} failed: {e}") from e
    if resp.status_code != 200:
        raise LookupFailed(f"HTTP {resp.status_code} on {url}")
    try:
        return resp.json()
    except ValueError as e:
        raise LookupFailed(f"Invalid JSON from {url}: {e}") from e


def process_in_batches(
    items: list,
    fn: Callable,
    *,
    batch_size: int = 10,
    delay: float = 5.0,
    default: Any = None,
    on_batch_done: Optional[Callable[[int, int], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[dict, list]:
    """Call fn(item) for every item, batch by batch, returning results.

    Items are processed sequentially.  A failing call logs a warning,
    records the item as failed and stores *default* as its result; the
    batch continues.  Between batches the loop sleeps *delay* seconds to
    stay polite towards the remote service.

    Args:
        items: Hashable items to process.
        fn: Callable taking a single item.
        batch_size: Items per batch.
        delay: Seconds to pause between batches (not after the last one).
        default: Result stored for failed items.
        on_batch_done: Called as on_batch_done(batch_index, batch_count)
            after each batch, e.g. to save progress.
        sleep: Injected for tests.

    Returns:
        ({item: result}, [failed items])
    """
    results: dict = {}
    failed: list = []
    batches = [items[i:i + batch_size] for i in range(0, len(items), batch_size)]

    for b, batch in enumerate(batches):
        logger.info(f"Processing batch {b + 1}/{len(batches)} ({len(batch)} items)")
        for item in batch:
            try:
                results[item] = fn(item)
            except Exception as e:
                logger.warning(f"  Failed to process {item}: {e}")
                results[item] = default
                failed.append(item)
        if on_batch_done is not None:
            on_batch_done(b, len(batches))
        if b < len(batches) - 1 and delay > 0:
            logger.info(f"Pausing for {delay:g} seconds before next batch...")
            sleep(delay)

    return results, failed
