"""
Vehicle lookup API route.

GET /lookup?vrm=AB12CDE[&debug=1] -> merged DVLA / DVSA / VDG vehicle record.
Served at /api/vrm as well. Only a missing VRM is an error status; everything
else answers 200 with whatever the providers could supply.
"""

import logging

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse

from vrmlookup.schemas.vehicle import VehicleRecord
from vrmlookup.services.vehicle_lookup import lookup_vehicle
from vrmlookup.utils.vehicle_normalizer import normalize_vrm

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lookup"])

_TRUTHY = {"1", "true", "yes", "on"}


def _is_debug(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


@router.get("/lookup")
@router.get("/api/vrm", include_in_schema=False)
async def lookup_endpoint(
    vrm: str | None = Query(None, description="UK vehicle registration mark, e.g. AB12CDE"),
    debug: str | None = Query(None, description="1 to include every upstream attempt"),
):
    """Look up a registration across DVLA, DVSA and VDG and merge the results."""
    normalized = normalize_vrm(vrm)
    if not normalized:
        return JSONResponse(status_code=400, content={"error": "Missing vrm param"})

    try:
        outcome = await lookup_vehicle(normalized)
    except Exception as e:
        logger.exception(f"Lookup failed for {normalized}: {e}")
        body = VehicleRecord(vrm=normalized).model_dump(by_alias=True)
        body["note"] = "Lookup temporarily unavailable; no vehicle data returned"
        return JSONResponse(status_code=200, content=body)

    body = outcome.record.model_dump(by_alias=True)
    if _is_debug(debug):
        body["_debug"] = {
            "attempts": [a.model_dump(by_alias=True) for a in outcome.attempts],
            "providers": [p.model_dump() for p in outcome.providers],
        }
    return JSONResponse(status_code=200, content=body)


@router.options("/lookup")
@router.options("/api/vrm", include_in_schema=False)
async def lookup_options():
    """Bare OPTIONS (no CORS preflight headers) gets an empty 204."""
    return Response(status_code=204)
