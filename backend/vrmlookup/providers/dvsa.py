"""
DVSA MOT History provider.

Two authentication strategies, tried in order:
  1. Legacy API-key endpoint (GET ?registration=VRM, x-api-key header).
  2. OAuth 2.0 client credentials: exchange client id/secret for a bearer
     token, then GET the vehicle endpoint with the token and X-API-Key.

The OAuth strategy runs when the legacy endpoint is not configured, when it
answers 401/403, or when the legacy call never completes (network error or
timeout). The token is fetched per lookup and never cached.
"""
import logging
from typing import Any
from urllib.parse import quote

import httpx

from vrmlookup.config import settings
from vrmlookup.providers.base import BaseProvider, PartialVehicleRecord, ProviderResult
from vrmlookup.utils.http_client import HttpResult
from vrmlookup.utils.trace import AttemptTrace
from vrmlookup.utils.vehicle_normalizer import clean_variant, leading_year, text

logger = logging.getLogger(__name__)

# 0 is a transport failure or timeout: the legacy attempt never completed
_FALLTHROUGH_STATUSES = {0, 401, 403}


class DVSAProvider(BaseProvider):
    """DVSA MOT History API with legacy key and OAuth client-credentials auth."""

    def __init__(self):
        super().__init__("dvsa", timeout=settings.request_timeout_seconds)
        self.api_key = settings.dvsa_api_key
        self.legacy_url = settings.dvsa_legacy_url
        self.client_id = settings.dvsa_client_id
        self.client_secret = settings.dvsa_client_secret
        self.scope = settings.dvsa_scope
        self.token_url = settings.dvsa_token_url
        self.vehicle_url = settings.dvsa_vehicle_url

    @property
    def has_legacy_credentials(self) -> bool:
        return bool(self.api_key and self.legacy_url)

    @property
    def has_oauth_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret and self.token_url and self.vehicle_url)

    @property
    def is_configured(self) -> bool:
        return self.has_legacy_credentials or self.has_oauth_credentials

    async def lookup(self, vrm: str, client: httpx.AsyncClient, trace: AttemptTrace) -> ProviderResult:
        if not self.is_configured:
            return ProviderResult.failed(self.source_name, "not configured")

        if self.has_legacy_credentials:
            result, status = await self._lookup_legacy(vrm, client, trace)
            if result.ok:
                return result
            if not (status in _FALLTHROUGH_STATUSES and self.has_oauth_credentials):
                return result
            logger.info(f"DVSA legacy lookup for {vrm} gave status {status}, trying OAuth")

        return await self._lookup_oauth(vrm, client, trace)

    async def _lookup_legacy(
        self, vrm: str, client: httpx.AsyncClient, trace: AttemptTrace
    ) -> tuple[ProviderResult, int]:
        response = await self._request(
            client,
            trace,
            "legacy-key",
            "GET",
            self.legacy_url,
            params={"registration": vrm},
            headers={"x-api-key": self.api_key, "Accept": "application/json+v6"},
        )
        return self._to_result(vrm, response), response.status

    async def _get_oauth_token(self, client: httpx.AsyncClient, trace: AttemptTrace) -> str | None:
        """Client credentials grant. Returns None when no token comes back."""
        response = await self._request(
            client,
            trace,
            "oauth-token",
            "POST",
            self.token_url,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "scope": self.scope,
                "grant_type": "client_credentials",
            },
        )
        if not response.ok or not isinstance(response.json, dict):
            logger.warning(f"DVSA token request failed: status {response.status}")
            return None
        return text(response.json.get("access_token")) or None

    async def _lookup_oauth(self, vrm: str, client: httpx.AsyncClient, trace: AttemptTrace) -> ProviderResult:
        if not self.has_oauth_credentials:
            return ProviderResult.failed(self.source_name, "OAuth credentials not configured")

        token = await self._get_oauth_token(client, trace)
        if not token:
            return ProviderResult.failed(self.source_name, "no OAuth token")

        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key

        url = self.vehicle_url.format(vrm=quote(vrm, safe=""))
        response = await self._request(client, trace, "oauth-vehicle", "GET", url, headers=headers)
        return self._to_result(vrm, response)

    def _to_result(self, vrm: str, response: HttpResult) -> ProviderResult:
        if not response.ok:
            logger.warning(f"DVSA lookup failed for {vrm}: status {response.status}")
            return ProviderResult.failed(self.source_name, response.error or f"HTTP {response.status}")

        vehicle = self._unwrap(response.json)
        if vehicle is None:
            logger.warning(f"DVSA returned an unrecognized body for {vrm}")
            return ProviderResult.failed(self.source_name, "unrecognized response body")
        return ProviderResult(record=self._parse(vehicle))

    @staticmethod
    def _unwrap(body: Any) -> dict | None:
        """
        Find the vehicle object in the response.

        Legacy: [{"registration": ..., "make": ..., "motTests": [...]}, ...]
        OAuth:  {...} or {"vehicle": {...}} or {"data": {...}}
        """
        if isinstance(body, list):
            body = body[0] if body else None
        if not isinstance(body, dict):
            return None
        for wrapper in ("vehicle", "data"):
            inner = body.get(wrapper)
            if isinstance(inner, list):
                inner = inner[0] if inner else None
            if isinstance(inner, dict):
                return inner
        return body

    def _parse(self, vehicle: dict[str, Any]) -> PartialVehicleRecord:
        make = text(vehicle.get("make"))
        year = (
            text(vehicle.get("yearOfManufacture"))
            or text(vehicle.get("manufactureYear"))
            or leading_year(vehicle.get("manufactureDate"))
        )
        return PartialVehicleRecord(
            source=self.source_name,
            year=year,
            make=make,
            model=text(vehicle.get("model")),
            variant=clean_variant(vehicle.get("derivative") or vehicle.get("trim"), make),
            fuel_type=text(vehicle.get("fuelType")),
            colour=text(vehicle.get("colour") or vehicle.get("primaryColour")),
        )
