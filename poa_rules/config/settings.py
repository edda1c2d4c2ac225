"""
Configuration Management for POA Rules

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Legal rules themselves live in the seed tables, not in settings. Settings
only cover where the tables come from and the few policy knobs the
tables do not carry (which states follow the UPOAA, which power
categories count as real estate).
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# States that have adopted the Uniform Power of Attorney Act.
DEFAULT_UPOAA_STATES = (
    "AL,AR,CO,CT,DC,GA,HI,ID,IA,KY,ME,MD,MI,MT,NE,NV,NM,NC,OH,PA,TX,UT,"
    "VA,WA,WV,WI,WY"
)


class CatalogSettings(BaseSettings):
    """Rule catalog configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POA_CATALOG_",
        extra="ignore"
    )

    data_dir: Optional[str] = Field(
        default=None,
        description="Directory holding the seed JSON files (bundled data if unset)"
    )
    upoaa_states: str = Field(
        default=DEFAULT_UPOAA_STATES,
        description="Comma-separated list of states that adopted the UPOAA"
    )
    real_estate_category_letters: str = Field(
        default="A",
        description="Comma-separated category letters that involve real estate"
    )
    alternative_witness_count: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Witnesses needed when a state allows witnesses instead of a notary but seeds no count"
    )

    @field_validator('data_dir')
    @classmethod
    def validate_data_dir(cls, v: Optional[str]) -> Optional[str]:
        """Fail early if a configured data directory is missing."""
        if v is not None and not Path(v).is_dir():
            raise ValueError(f"Catalog data directory not found: {v}")
        return v

    @property
    def upoaa_states_list(self) -> list[str]:
        """Get UPOAA states as a list of upper-case codes."""
        return [s.strip().upper() for s in self.upoaa_states.split(",") if s.strip()]

    @property
    def real_estate_letters_list(self) -> list[str]:
        """Get real-estate category letters as a list."""
        return [
            letter.strip().upper()
            for letter in self.real_estate_category_letters.split(",")
            if letter.strip()
        ]


class AuditSettings(BaseSettings):
    """Audit logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POA_AUDIT_",
        extra="ignore"
    )

    enabled: bool = Field(
        default=True,
        description="Emit audit events for resolutions and validations"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured log output"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def catalog(self) -> CatalogSettings:
        return CatalogSettings()

    @property
    def audit(self) -> AuditSettings:
        return AuditSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("catalog", "audit"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
