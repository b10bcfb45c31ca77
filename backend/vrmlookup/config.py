"""
Configuration management for the VRM lookup backend.
Uses pydantic-settings for environment variable handling.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # API Configuration
    api_title: str = "VRM Lookup API"
    api_version: str = "1.0.0"
    debug: bool = False

    # Timeouts
    request_timeout_seconds: float = 10.0  # per upstream HTTP call
    provider_timeout_seconds: float = 30.0  # whole adapter, including token exchange / shape probing
    vdg_deadline_seconds: float = 25.0  # aggregate cap on VDG shape probing
    debug_body_preview_chars: int = 900

    # DVLA Vehicle Enquiry Service
    dvla_api_key: str | None = None
    dvla_url: str = "https://driver-vehicle-licensing.api.gov.uk/vehicle-enquiry/v1/vehicles"

    # DVSA MOT History (legacy key-based endpoint and OAuth client credentials)
    dvsa_api_key: str | None = None
    dvsa_legacy_url: str | None = None  # legacy key-based endpoint, only tried when set
    dvsa_client_id: str | None = None
    dvsa_client_secret: str | None = None
    dvsa_scope: str = "https://tapi.dvsa.gov.uk/.default"
    dvsa_token_url: str | None = None
    dvsa_vehicle_url: str = "https://history.mot.api.gov.uk/v1/trade/vehicles/registration/{vrm}"

    # Vehicle Data Global
    vdg_base_url: str = "https://uk.api.vehicledataglobal.com"
    vdg_api_key: str | None = None
    vdg_package: str = "VehicleDetails"
    vdg_fallback_packages: list[str] = ["SpecAndOptionsDetails", "VehicleDetailsWithImage"]
    vdg_require_variant: bool = True

    # Per-field provider precedence overrides, e.g. {"model": ["vdg", "dvsa"]}
    merge_precedence: dict[str, list[str]] = {}

    def credential_values(self) -> list[str]:
        """Every configured secret, for scrubbing diagnostic output."""
        values = [
            self.dvla_api_key,
            self.dvsa_api_key,
            self.dvsa_client_id,
            self.dvsa_client_secret,
            self.vdg_api_key,
        ]
        return [v for v in values if v]


# Global settings instance
settings = Settings()
