"""
Vehicle Data Global (VDG) r2/lookup provider.

VDG is the only reliable source of a trim/variant string. The request shape the
endpoint accepts has varied between integrations, so the provider walks an
ordered table of candidate shapes for each package name and stops at the first
success envelope that yields a usable variant.

Response payloads come in two known schemas:
- NESTED: {"responseInformation": {...}, "results": {"vehicleDetails": ..., "modelDetails": ...}}
- FLAT:   {"data": {"Make": ..., "Model": ..., "Variant": ...}} or the same keys at top level
Key lookups are case-insensitive; VDG has returned both PascalCase and camelCase.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
from urllib.parse import quote

import httpx

from vrmlookup.config import settings
from vrmlookup.providers.base import BaseProvider, PartialVehicleRecord, ProviderResult
from vrmlookup.utils.trace import AttemptTrace
from vrmlookup.utils.vehicle_normalizer import clean_variant, derive_variant, leading_year, text

logger = logging.getLogger(__name__)

LOOKUP_PATH = "/r2/lookup"

# Below this many seconds left on the probe deadline, stop issuing requests
_MIN_ATTEMPT_SECONDS = 0.5


class VdgSchema(Enum):
    NESTED = "nested"
    FLAT = "flat"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class VdgRequest:
    method: str
    url: str
    params: dict[str, str] | None = None
    json_body: dict[str, str] | None = None


@dataclass(frozen=True)
class VdgShape:
    name: str
    build: Callable[[str, str, str, str], VdgRequest]  # (base_url, vrm, api_key, package)


def _path_shape(segment: str) -> Callable[[str, str, str, str], VdgRequest]:
    def build(base_url: str, vrm: str, api_key: str, package: str) -> VdgRequest:
        return VdgRequest(
            method="GET",
            url=f"{base_url}{LOOKUP_PATH}/{segment}/{quote(vrm, safe='')}",
            params={"apiKey": api_key, "packageName": package},
        )
    return build


def _query_shape(search_type: str) -> Callable[[str, str, str, str], VdgRequest]:
    def build(base_url: str, vrm: str, api_key: str, package: str) -> VdgRequest:
        return VdgRequest(
            method="GET",
            url=f"{base_url}{LOOKUP_PATH}",
            params={
                "apiKey": api_key,
                "packageName": package,
                "SearchType": search_type,
                "SearchTerm": vrm,
            },
        )
    return build


def _post_shape(search_type_key: str, search_term_key: str) -> Callable[[str, str, str, str], VdgRequest]:
    def build(base_url: str, vrm: str, api_key: str, package: str) -> VdgRequest:
        return VdgRequest(
            method="POST",
            url=f"{base_url}{LOOKUP_PATH}",
            json_body={
                "apiKey": api_key,
                "packageName": package,
                search_type_key: "Registration",
                search_term_key: vrm,
            },
        )
    return build


# Tried in this order for every package name
SHAPES: list[VdgShape] = [
    VdgShape("path-registration", _path_shape("Registration")),
    VdgShape("path-registration-number", _path_shape("RegistrationNumber")),
    VdgShape("query-registration", _query_shape("Registration")),
    VdgShape("query-registration-number", _query_shape("RegistrationNumber")),
    VdgShape("post-pascal", _post_shape("SearchType", "SearchTerm")),
    VdgShape("post-camel", _post_shape("searchType", "searchTerm")),
]


def _get(obj: Any, *names: str) -> Any:
    """Case-insensitive member lookup; first name present wins."""
    if not isinstance(obj, dict):
        return None
    lowered = {k.lower(): v for k, v in obj.items() if isinstance(k, str)}
    for name in names:
        value = lowered.get(name.lower())
        if value is not None:
            return value
    return None


def _path(obj: Any, *path: str) -> Any:
    for name in path:
        obj = _get(obj, name)
        if obj is None:
            return None
    return obj


def classify_payload(body: Any) -> VdgSchema:
    if not isinstance(body, dict):
        return VdgSchema.UNRECOGNIZED
    if isinstance(_get(body, "results"), dict) or isinstance(_get(body, "responseInformation"), dict):
        return VdgSchema.NESTED
    data = _get(body, "data")
    flat = data if isinstance(data, dict) else body
    if any(_get(flat, k) is not None for k in ("make", "model", "variant", "derivative", "trim")):
        return VdgSchema.FLAT
    return VdgSchema.UNRECOGNIZED


def is_success_envelope(body: Any) -> bool:
    """responseInformation.isSuccessStatusCode is true and results is a non-empty object."""
    results = _get(body, "results")
    return _path(body, "responseInformation", "isSuccessStatusCode") is True and isinstance(results, dict) and bool(results)


def parse_nested(body: dict, source: str = "vdg") -> PartialVehicleRecord:
    """Map results.vehicleDetails / results.modelDetails onto a partial record."""
    results = _get(body, "results") or {}
    vehicle_details = _get(results, "vehicleDetails")
    identification = _get(vehicle_details, "vehicleIdentification")
    model_identification = _path(results, "modelDetails", "modelIdentification")

    colour = text(
        _path(vehicle_details, "vehicleHistory", "colourDetails", "currentColour")
        or _path(results, "vehicleHistory", "colourDetails", "currentColour")
    )

    dvla_model = text(_get(identification, "dvlaModel"))
    model_range = text(_get(model_identification, "range"))
    manufacturer_model = text(_get(model_identification, "model"))

    # Manufacturer data over DVLA data; range over model over the compound DVLA string
    make = text(_get(model_identification, "make")) or text(_get(identification, "dvlaMake"))
    model = model_range or manufacturer_model or dvla_model

    year = text(_get(identification, "yearOfManufacture")) or leading_year(
        _get(identification, "dateOfManufacture", "manufactureDate")
    )

    variant = clean_variant(_get(model_identification, "modelVariant"), make)
    if not variant:
        variant = clean_variant(_get(model_identification, "series"), make)

    derived = ""
    if not variant and dvla_model:
        for base in (model_range, manufacturer_model):
            derived = clean_variant(derive_variant(dvla_model, base), make)
            if derived:
                break

    return PartialVehicleRecord(
        source=source,
        year=year,
        make=make,
        model=model,
        variant=variant,
        derived_variant=derived,
        fuel_type=text(_get(identification, "dvlaFuelType", "fuelType")),
        colour=colour,
    )


def parse_flat(body: dict, source: str = "vdg") -> PartialVehicleRecord:
    data = _get(body, "data")
    if not isinstance(data, dict):
        data = body
    make = text(_get(data, "make"))
    return PartialVehicleRecord(
        source=source,
        year=text(_get(data, "yearOfManufacture")),
        make=make,
        model=text(_get(data, "model")),
        variant=clean_variant(_get(data, "variant", "derivative", "trim"), make),
        fuel_type=text(_get(data, "fuelType")),
        colour=text(_get(data, "colour")),
    )


class VDGProvider(BaseProvider):
    """Shape-probing client for the VDG r2/lookup endpoint."""

    def __init__(self):
        super().__init__("vdg", timeout=settings.request_timeout_seconds)
        self.base_url = settings.vdg_base_url.rstrip("/")
        self.api_key = settings.vdg_api_key
        self.package = settings.vdg_package
        self.fallback_packages = list(settings.vdg_fallback_packages)
        self.require_variant = settings.vdg_require_variant
        self.deadline_seconds = settings.vdg_deadline_seconds
        self.shapes = list(SHAPES)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.base_url)

    @property
    def packages(self) -> list[str]:
        ordered = []
        for name in [self.package, *self.fallback_packages]:
            if name and name not in ordered:
                ordered.append(name)
        return ordered

    async def lookup(self, vrm: str, client: httpx.AsyncClient, trace: AttemptTrace) -> ProviderResult:
        if not self.is_configured:
            return ProviderResult.failed(self.source_name, "not configured")

        deadline = time.monotonic() + self.deadline_seconds
        attempts = 0

        for package in self.packages:
            for shape in self.shapes:
                remaining = deadline - time.monotonic()
                if remaining < _MIN_ATTEMPT_SECONDS:
                    logger.warning(f"VDG probe deadline reached for {vrm} after {attempts} attempts")
                    return ProviderResult.failed(self.source_name, "probe deadline exceeded")

                record = await self._attempt(vrm, client, trace, package, shape, min(self.timeout, remaining))
                attempts += 1
                if record is not None:
                    logger.info(f"VDG matched {vrm} with shape {shape.name} / {package}")
                    return ProviderResult(record=record)

        logger.warning(f"VDG found no usable variant for {vrm} after {attempts} attempts")
        return ProviderResult.failed(self.source_name, "no shape returned a usable variant")

    async def _attempt(
        self,
        vrm: str,
        client: httpx.AsyncClient,
        trace: AttemptTrace,
        package: str,
        shape: VdgShape,
        timeout: float,
    ) -> PartialVehicleRecord | None:
        """One request. Returns a record only when the response qualifies."""
        request = shape.build(self.base_url, vrm, self.api_key, package)
        response = await self._request(
            client,
            trace,
            f"{shape.name}:{package}",
            request.method,
            request.url,
            timeout=timeout,
            params=request.params,
            json_body=request.json_body,
            headers={"Accept": "application/json"},
        )
        if not response.ok:
            return None

        schema = classify_payload(response.json)
        if schema is VdgSchema.NESTED:
            if not is_success_envelope(response.json):
                return None
            record = parse_nested(response.json, self.source_name)
        elif schema is VdgSchema.FLAT:
            record = parse_flat(response.json, self.source_name)
        else:
            return None

        if self.require_variant and not (record.variant or record.derived_variant):
            return None
        if record.is_empty:
            return None
        return record
