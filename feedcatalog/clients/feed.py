from __future__ import annotations

import logging
import time
from typing import Protocol

import httpx

from feedcatalog.core.config import Settings
from feedcatalog.core.errors import ConfigError, FetchError

RETRYABLE_HTTP_STATUSES = {408, 425, 429, 500, 502, 503, 504}

logger = logging.getLogger(__name__)


class FeedFetcher(Protocol):
    def fetch(self) -> str: ...


class HttpFeedFetcher:
    def __init__(
        self,
        url: str,
        timeout_seconds: float = 15.0,
        max_fetch_retries: int = 2,
        retry_backoff_seconds: float = 0.5,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self.max_fetch_retries = max(0, max_fetch_retries)
        self.retry_backoff_seconds = max(0.0, retry_backoff_seconds)
        self.client = client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpFeedFetcher:
        if not settings.sheet_csv_url:
            raise ConfigError(["FEEDCATALOG_SHEET_CSV_URL"])
        return cls(
            settings.sheet_csv_url,
            timeout_seconds=settings.fetch_timeout_seconds,
            max_fetch_retries=settings.max_fetch_retries,
            retry_backoff_seconds=settings.retry_backoff_seconds,
        )

    def fetch(self) -> str:
        try:
            response = self._request_with_retries()
        except httpx.HTTPError as exc:
            raise FetchError(f"Could not fetch feed from {self.url}: {exc}") from exc
        return response.text

    def close(self) -> None:
        self.client.close()

    def _request_with_retries(self) -> httpx.Response:
        attempts = self.max_fetch_retries + 1
        for attempt in range(attempts):
            try:
                response = self.client.get(self.url)
                if response.status_code in RETRYABLE_HTTP_STATUSES:
                    raise httpx.HTTPStatusError(
                        f"Retryable status {response.status_code} for {self.url}",
                        request=response.request,
                        response=response,
                    )
                response.raise_for_status()
                return response
            except (httpx.TimeoutException, httpx.NetworkError, httpx.HTTPStatusError) as exc:
                if isinstance(exc, httpx.HTTPStatusError):
                    if exc.response.status_code not in RETRYABLE_HTTP_STATUSES:
                        raise

                if attempt >= attempts - 1:
                    raise

                backoff = self.retry_backoff_seconds * (2**attempt)
                if backoff > 0:
                    time.sleep(backoff)
                logger.debug("Retrying feed %s after error (%s), attempt %s/%s", self.url, exc, attempt + 1, attempts)
        raise RuntimeError(f"Unreachable retry state for {self.url}")
