"""Harvest addresses from a social thread (X / Twitter API v2).

The harvester fetches the root post, then pages through replies using the
recent-search endpoint scoped to ``in_reply_to_tweet_id``. Pagination is
bounded by ``thread.max_pages``; threads larger than
``max_pages * page_size`` replies are only partially harvested.

A failure on the root post is a request failure. A failure on a reply
page ends pagination and the harvest returns what it already has.

Usage::

    from recon.social import ThreadHarvester

    harvester = ThreadHarvester()
    try:
        result = harvester.harvest("https://x.com/someone/status/1234567890")
    finally:
        harvester.close()
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

import httpx

from recon.address.models import ExtractionResult
from recon.address.patterns import AddressExtractor
from recon.exceptions import ConfigurationError, ThreadFetchError, ValidationFailedError

logger = logging.getLogger(__name__)

_POST_ID_RE = re.compile(r"status/(\d+)")


def parse_post_id(url: str) -> str:
    """Return the numeric post id from a ``.../status/<id>`` URL.

    Raises:
        ValidationFailedError: If the URL carries no post id.
    """
    match = _POST_ID_RE.search(url or "")
    if not match:
        raise ValidationFailedError("Invalid X (Twitter) URL format")
    return match.group(1)


@dataclass
class HarvestResult:
    """Addresses gathered from one thread.

    Attributes:
        post_id: Root post id.
        addresses: Unique lowercase addresses, first-seen order.
        root_text: Text of the root post.
        replies_processed: Replies scanned across all fetched pages.
        pages_fetched: Reply pages fetched successfully.
        truncated: True when pagination stopped on a failed page or the page cap.
    """

    post_id: str
    addresses: list[str] = field(default_factory=list)
    root_text: str = ""
    replies_processed: int = 0
    pages_fetched: int = 0
    truncated: bool = False

    @property
    def posts_processed(self) -> int:
        return 1 + self.replies_processed

    def to_result(self) -> ExtractionResult:
        return ExtractionResult(
            filename=f"Tweet {self.post_id} + {self.replies_processed} replies",
            total_found=len(self.addresses),
            addresses=self.addresses,
            files_processed=self.posts_processed,
            files_with_addresses=1 if self.addresses else 0,
            tweet_text=self.root_text,
        )


class ThreadHarvester:
    """Fetch a thread's root post and replies and extract their addresses.

    Args:
        bearer_token: API bearer token; defaults to ``settings.thread.bearer_token``.
        base_url: API base URL; defaults to ``settings.thread.api_base_url``.
        page_size: Replies per page; defaults to ``settings.thread.page_size``.
        max_pages: Hard cap on reply pages; defaults to ``settings.thread.max_pages``.
        timeout: HTTP timeout in seconds; defaults to ``settings.thread.timeout_sec``.
        transport: Optional ``httpx`` transport (tests use ``MockTransport``).
    """

    def __init__(
        self,
        *,
        bearer_token: str | None = None,
        base_url: str | None = None,
        page_size: int | None = None,
        max_pages: int | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        from recon.settings import get_settings

        thread = get_settings().thread
        self.bearer_token = thread.bearer_token if bearer_token is None else bearer_token
        self.base_url = (base_url or thread.api_base_url).rstrip("/")
        self.page_size = page_size or thread.page_size
        self.max_pages = max_pages or thread.max_pages
        self.timeout = timeout or thread.timeout_sec
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.bearer_token}"},
            transport=transport,
        )
        self._extractor = AddressExtractor()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def harvest(self, thread_url: str) -> HarvestResult:
        """Harvest addresses from the thread rooted at *thread_url*.

        Raises:
            ValidationFailedError: If the URL has no post id.
            ConfigurationError: If no bearer token is configured.
            ThreadFetchError: If the root post cannot be fetched.
        """
        post_id = parse_post_id(thread_url)
        if not self.bearer_token:
            raise ConfigurationError("X API credentials not configured", error="X API credentials not configured")

        result = HarvestResult(post_id=post_id)
        seen: set[str] = set()

        result.root_text = self._fetch_root_text(post_id)
        self._extractor.extract_into(result.root_text, seen, result.addresses)

        next_token: str | None = None
        for page in range(1, self.max_pages + 1):
            payload = self._fetch_reply_page(post_id, next_token, page)
            if payload is None:
                result.truncated = True
                break

            posts = [p for p in payload.get("data") or [] if isinstance(p, dict)]
            if not posts:
                break
            result.pages_fetched += 1
            for post in posts:
                self._extractor.extract_into(post.get("text") or "", seen, result.addresses)
                result.replies_processed += 1

            next_token = (payload.get("meta") or {}).get("next_token")
            if not next_token:
                break
        else:
            if next_token:
                result.truncated = True
                logger.info("Thread %s: stopped at the %d-page cap", post_id, self.max_pages)

        logger.info(
            "Thread %s: %d replies over %d page(s), %d unique address(es)",
            post_id,
            result.replies_processed,
            result.pages_fetched,
            len(result.addresses),
        )
        return result

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _fetch_root_text(self, post_id: str) -> str:
        try:
            resp = self._client.get(f"/tweets/{post_id}")
        except httpx.HTTPError as exc:
            raise ThreadFetchError(502, f"Could not reach the X API: {exc}") from exc

        if resp.is_error:
            raise ThreadFetchError(resp.status_code, _upstream_message(resp))
        try:
            body = resp.json()
        except ValueError as exc:
            raise ThreadFetchError(502, "The X API returned a non-JSON response") from exc
        if not isinstance(body, dict):
            raise ThreadFetchError(502, "The X API returned an unexpected response")
        return (body.get("data") or {}).get("text") or ""

    def _fetch_reply_page(self, post_id: str, next_token: str | None, page: int) -> dict[str, Any] | None:
        params: dict[str, Any] = {
            "query": f"in_reply_to_tweet_id:{post_id}",
            "max_results": self.page_size,
            "tweet.fields": "text",
        }
        if next_token:
            params["pagination_token"] = next_token

        try:
            resp = self._client.get("/tweets/search/recent", params=params)
        except httpx.HTTPError as exc:
            logger.warning("Thread %s: reply page %d failed: %s", post_id, page, exc)
            return None
        if resp.is_error:
            logger.warning("Thread %s: reply page %d returned HTTP %d", post_id, page, resp.status_code)
            return None
        try:
            payload = resp.json()
        except ValueError:
            logger.warning("Thread %s: reply page %d was not JSON", post_id, page)
            return None
        if not isinstance(payload, dict):
            logger.warning("Thread %s: reply page %d had an unexpected shape", post_id, page)
            return None
        return payload


def _upstream_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    errors = body.get("errors") if isinstance(body, dict) else None
    if errors and isinstance(errors[0], dict) and errors[0].get("message"):
        return errors[0]["message"]
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return "Unknown error"
