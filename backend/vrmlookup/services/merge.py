"""
Merge engine: folds provider partial records into one VehicleRecord.

Each output field has a precedence list of references, either a provider name
("dvla") or a provider field ("vdg.derived_variant"). The first non-empty value
wins. The merge is pure; completion order of the providers does not matter.
"""

from typing import Iterable, Mapping

from vrmlookup.providers.base import PartialVehicleRecord
from vrmlookup.schemas.vehicle import VehicleRecord

MERGED_FIELDS = ("year", "make", "model", "variant", "fuel_type", "colour")

KNOWN_SOURCES = ("dvla", "dvsa", "vdg")

# Record attributes a "provider.field" reference may name
_REFERENCEABLE = (*MERGED_FIELDS, "derived_variant")

DEFAULT_PRECEDENCE: dict[str, list[str]] = {
    "year": ["dvla", "dvsa", "vdg"],
    "make": ["dvla", "dvsa", "vdg"],
    "fuel_type": ["dvla", "dvsa", "vdg"],
    "colour": ["dvla", "dvsa", "vdg"],
    "model": ["dvsa", "vdg", "dvla"],
    # Variant is never composed from other fields; DVSA derivative is the last resort
    "variant": ["vdg.variant", "vdg.derived_variant", "dvsa.variant"],
}


def _check_reference(ref: str) -> None:
    source, _, attr = ref.partition(".")
    if source not in KNOWN_SOURCES:
        raise ValueError(f"Unknown provider in merge reference: {ref}")
    if attr and attr not in _REFERENCEABLE:
        raise ValueError(f"Unknown field in merge reference: {ref}")


def resolve_precedence(overrides: Mapping[str, list[str]] | None = None) -> dict[str, list[str]]:
    """Default precedence with per-field overrides. Accepts 'fuelType' as well as 'fuel_type'."""
    precedence = {k: list(v) for k, v in DEFAULT_PRECEDENCE.items()}
    for name, refs in (overrides or {}).items():
        key = "fuel_type" if name == "fuelType" else name
        if key not in MERGED_FIELDS:
            raise ValueError(f"Unknown merge field: {name}")
        for ref in refs:
            _check_reference(ref)
        precedence[key] = list(refs)
    return precedence


def build_description(year: str, make: str, model: str, variant: str, fuel_type: str) -> str:
    """Space-joined non-empty parts, in display order."""
    return " ".join(part for part in (year, make, model, variant, fuel_type) if part)


def _pick(field: str, refs: list[str], by_source: dict[str, PartialVehicleRecord]) -> str:
    for ref in refs:
        source, _, attr = ref.partition(".")
        record = by_source.get(source)
        if record is None:
            continue
        value = getattr(record, attr or field, "")
        if value:
            return value
    return ""


def merge(
    vrm: str,
    records: Iterable[PartialVehicleRecord],
    precedence: Mapping[str, list[str]] | None = None,
) -> VehicleRecord:
    """First non-empty value per field, scanned in precedence order."""
    by_source = {r.source: r for r in records}
    order = resolve_precedence(precedence)

    values = {field: _pick(field, order[field], by_source) for field in MERGED_FIELDS}

    return VehicleRecord(
        vrm=vrm,
        **values,
        description=build_description(
            values["year"], values["make"], values["model"], values["variant"], values["fuel_type"]
        ),
    )
