"""
Pydantic schemas for the lookup API response.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class VehicleRecord(BaseModel):
    """Merged vehicle description. Empty string means unknown."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    vrm: str
    year: str = ""
    make: str = ""
    model: str = ""
    variant: str = ""
    fuel_type: str = ""
    colour: str = ""
    description: str = ""


class AttemptEntry(BaseModel):
    """One upstream HTTP call, as reported in debug mode."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: str
    method: str
    shape: str
    url: str
    status: int
    body_sample: str = ""
    error: str | None = None


class ProviderStatus(BaseModel):
    """Outcome of one provider adapter."""

    source: str
    status: Literal["ok", "error"]
    error: str | None = None
