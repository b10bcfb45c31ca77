"""
Base provider interface for all upstream vehicle-data sources.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Any

import httpx

from vrmlookup.utils.http_client import HttpResult, call
from vrmlookup.utils.trace import AttemptTrace


@dataclass(frozen=True)
class PartialVehicleRecord:
    """One provider's contribution. Empty string means the provider did not supply it."""

    source: str
    year: str = ""
    make: str = ""
    model: str = ""
    variant: str = ""
    derived_variant: str = ""  # heuristic, see vehicle_normalizer.derive_variant
    fuel_type: str = ""
    colour: str = ""

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self) if f.name != "source")


@dataclass(frozen=True)
class ProviderResult:
    """Ok when error is None; a failed result always carries an empty record."""

    record: PartialVehicleRecord
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, source: str, reason: str) -> "ProviderResult":
        return cls(record=PartialVehicleRecord(source=source), error=reason)


class BaseProvider(ABC):
    """Base class for all upstream lookup adapters."""

    def __init__(self, source_name: str, timeout: float = 10.0):
        self.source_name = source_name
        self.timeout = timeout

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """False when credentials are missing; the provider then makes no calls."""

    @abstractmethod
    async def lookup(self, vrm: str, client: httpx.AsyncClient, trace: AttemptTrace) -> ProviderResult:
        """Look up one normalized VRM. Must not raise for upstream failures."""

    async def _request(
        self,
        client: httpx.AsyncClient,
        trace: AttemptTrace,
        shape: str,
        method: str,
        url: str,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> HttpResult:
        """Issue one call and append it to the trace."""
        result = await call(client, method, url, timeout=timeout or self.timeout, **kwargs)
        trace.record(self.source_name, method, shape, result)
        return result
