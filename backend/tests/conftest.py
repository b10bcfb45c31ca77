"""
Shared fixtures for VRM lookup backend tests.
"""
import pytest
import sys
import os

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Blank out credentials so a developer's .env / shell never reaches real upstreams
for _name in (
    "DVLA_API_KEY",
    "DVSA_API_KEY",
    "DVSA_CLIENT_ID",
    "DVSA_CLIENT_SECRET",
    "DVSA_TOKEN_URL",
    "VDG_API_KEY",
):
    os.environ[_name] = ""
os.environ.setdefault("DEBUG", "false")

DVLA_URL = "https://dvla.test/vehicle-enquiry/v1/vehicles"
DVSA_LEGACY_URL = "https://dvsa-legacy.test/trade/vehicles/mot-tests"
DVSA_TOKEN_URL = "https://login.dvsa.test/oauth2/v2.0/token"
DVSA_VEHICLE_URL = "https://history.dvsa.test/v1/trade/vehicles/registration/{vrm}"
VDG_BASE_URL = "https://vdg.test"

DVLA_KEY = "dvla-secret-key-111"
DVSA_KEY = "dvsa-secret-key-222"
DVSA_CLIENT_SECRET = "dvsa-client-secret-333"
VDG_KEY = "vdg-secret-key-444"


@pytest.fixture
def trace():
    from vrmlookup.utils.trace import AttemptTrace

    return AttemptTrace(secrets=[DVLA_KEY, DVSA_KEY, DVSA_CLIENT_SECRET, VDG_KEY])


@pytest.fixture
def dvla_provider():
    from vrmlookup.providers.dvla import DVLAProvider

    provider = DVLAProvider()
    provider.api_key = DVLA_KEY
    provider.url = DVLA_URL
    return provider


@pytest.fixture
def dvsa_provider():
    """DVSA with both legacy and OAuth credentials."""
    from vrmlookup.providers.dvsa import DVSAProvider

    provider = DVSAProvider()
    provider.api_key = DVSA_KEY
    provider.legacy_url = DVSA_LEGACY_URL
    provider.client_id = "dvsa-client-id"
    provider.client_secret = DVSA_CLIENT_SECRET
    provider.scope = "https://tapi.dvsa.test/.default"
    provider.token_url = DVSA_TOKEN_URL
    provider.vehicle_url = DVSA_VEHICLE_URL
    return provider


@pytest.fixture
def vdg_provider():
    from vrmlookup.providers.vdg import VDGProvider

    provider = VDGProvider()
    provider.api_key = VDG_KEY
    provider.base_url = VDG_BASE_URL
    provider.package = "VehicleDetails"
    provider.fallback_packages = ["SpecAndOptionsDetails", "VehicleDetailsWithImage"]
    provider.require_variant = True
    provider.deadline_seconds = 25.0
    return provider


@pytest.fixture
def sample_dvla_vehicle():
    """DVLA Vehicle Enquiry Service response."""
    return {
        "registrationNumber": "AB12CDE",
        "make": "FORD",
        "colour": "BLUE",
        "yearOfManufacture": 2017,
        "fuelType": "PETROL",
        "engineCapacity": 998,
        "taxStatus": "Taxed",
        "motStatus": "Valid",
    }


@pytest.fixture
def sample_dvsa_legacy():
    """Legacy MOT history response: a list of vehicles with their tests."""
    return [
        {
            "registration": "AB12CDE",
            "make": "FORD",
            "model": "FIESTA",
            "primaryColour": "Blue",
            "fuelType": "Petrol",
            "manufactureDate": "2017.03.01",
            "motTests": [{"testResult": "PASSED", "odometerValue": "41210"}],
        }
    ]


@pytest.fixture
def sample_dvsa_oauth():
    """MOT history API (OAuth) response."""
    return {
        "registration": "AB12CDE",
        "make": "FORD",
        "model": "FIESTA",
        "primaryColour": "Blue",
        "fuelType": "Petrol",
        "manufactureDate": "2017-03-01",
        "motTests": [],
    }


@pytest.fixture
def sample_vdg_nested():
    """VDG success envelope with DVLA identification and manufacturer model data."""
    return {
        "requestInformation": {"packageName": "VehicleDetails", "searchTerm": "AB12CDE"},
        "responseInformation": {
            "statusCode": 0,
            "statusMessage": "Success",
            "isSuccessStatusCode": True,
        },
        "results": {
            "vehicleDetails": {
                "vehicleIdentification": {
                    "vrm": "AB12CDE",
                    "dvlaMake": "FORD",
                    "dvlaModel": "FIESTA ZETEC TURBO",
                    "dvlaFuelType": "PETROL",
                    "yearOfManufacture": 2017,
                    "dateOfManufacture": "2017-03-01T00:00:00",
                },
                "vehicleHistory": {
                    "colourDetails": {"currentColour": "BLUE"},
                },
            },
            "modelDetails": {
                "modelIdentification": {
                    "make": "Ford",
                    "range": "Fiesta",
                    "model": "Fiesta",
                    "modelVariant": "Zetec",
                },
            },
        },
    }


@pytest.fixture
def sample_vdg_failure():
    """VDG envelope for a rejected request shape."""
    return {
        "responseInformation": {
            "statusCode": 4,
            "statusMessage": "Invalid search type",
            "isSuccessStatusCode": False,
        },
        "results": None,
    }
