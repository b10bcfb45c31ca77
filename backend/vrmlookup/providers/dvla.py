"""
DVLA Vehicle Enquiry Service provider.

Registration-level data only: year of manufacture, make, fuel type and colour.
DVLA never returns a model or variant.
"""
import logging

import httpx

from vrmlookup.config import settings
from vrmlookup.providers.base import BaseProvider, PartialVehicleRecord, ProviderResult
from vrmlookup.utils.trace import AttemptTrace
from vrmlookup.utils.vehicle_normalizer import text

logger = logging.getLogger(__name__)


class DVLAProvider(BaseProvider):
    """POST {registrationNumber} with an x-api-key header."""

    def __init__(self):
        super().__init__("dvla", timeout=settings.request_timeout_seconds)
        self.api_key = settings.dvla_api_key
        self.url = settings.dvla_url

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.url)

    async def lookup(self, vrm: str, client: httpx.AsyncClient, trace: AttemptTrace) -> ProviderResult:
        if not self.is_configured:
            return ProviderResult.failed(self.source_name, "not configured")

        result = await self._request(
            client,
            trace,
            "vehicle-enquiry",
            "POST",
            self.url,
            headers={"x-api-key": self.api_key, "Accept": "application/json"},
            json_body={"registrationNumber": vrm},
        )

        if not result.ok:
            logger.warning(f"DVLA lookup failed for {vrm}: status {result.status}")
            return ProviderResult.failed(self.source_name, result.error or f"HTTP {result.status}")

        if not isinstance(result.json, dict):
            logger.warning(f"DVLA returned a non-JSON body for {vrm}")
            return ProviderResult.failed(self.source_name, "unparsable response body")

        return ProviderResult(record=self._parse(result.json))

    def _parse(self, data: dict) -> PartialVehicleRecord:
        return PartialVehicleRecord(
            source=self.source_name,
            year=text(data.get("yearOfManufacture")),
            make=text(data.get("make")),
            fuel_type=text(data.get("fuelType")),
            colour=text(data.get("colour")),
        )
