"""Visma eAccounting client used by the push-to-visma reconciliation pass.

A ``VismaClient`` is created per pass: the bearer token it obtains in
``authenticate`` lives only as long as the instance.
"""

from __future__ import annotations

import logging
from decimal import Decimal

import httpx

from feedcatalog.core.config import VismaSettings
from feedcatalog.core.errors import AuthError, ConfigError, RecordSyncError

logger = logging.getLogger(__name__)


class VismaClient:
    def __init__(self, settings: VismaSettings, client: httpx.Client | None = None) -> None:
        missing = settings.missing()
        if missing:
            raise ConfigError(missing)
        self.settings = settings
        self.base_url = str(settings.base_url).rstrip("/")
        self.client = client or httpx.Client(timeout=settings.timeout_seconds)
        self._token: str | None = None

    def __enter__(self) -> VismaClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def authenticate(self) -> None:
        try:
            response = self.client.post(
                self.settings.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.settings.client_id,
                    "client_secret": self.settings.client_secret,
                    "scope": self.settings.scope,
                },
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise AuthError(f"Token request failed: {exc}") from exc
        except ValueError as exc:
            raise AuthError("Token endpoint returned invalid JSON") from exc

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise AuthError("Token endpoint response did not include an access_token")
        self._token = token

    def create_record(self, name: str, sku: str, price: Decimal) -> None:
        if self._token is None:
            raise AuthError("authenticate() must be called before creating records")
        try:
            response = self.client.post(
                f"{self.base_url}/v2/articles",
                headers={"Authorization": f"Bearer {self._token}"},
                json={"Number": sku, "Name": name, "NetPrice": float(price), "IsActive": True},
            )
        except httpx.HTTPError as exc:
            raise RecordSyncError(sku, str(exc) or exc.__class__.__name__) from exc
        if not response.is_success:
            raise RecordSyncError(sku, f"HTTP {response.status_code}: {response.text[:200]}")
