from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_env: str = "development"
    log_level: str = "INFO"

    # Assembly defaults, substituted when a listing omits the value
    default_price_yen: int = 37_800_000  # 3,780万円
    default_area_sqm: float = 40.0
    default_bedrooms: int = 2
    default_bathrooms: int = 1

    # Geocoding (Nominatim / OpenStreetMap)
    geocoder_user_agent: str = "propmap/0.1"
    geocoder_timeout: float = 10.0
    geocode_delay_seconds: float = 1.1  # Nominatim allows 1 request per second
    geocode_max_retries: int = 3
    geocode_ward_fallback: bool = True

    def validate_production(self) -> list[str]:
        """Check settings that should differ in production. Returns list of warnings."""
        warnings = []
        if self.app_env == "production":
            if self.geocoder_user_agent.startswith("propmap/"):
                warnings.append("GEOCODER_USER_AGENT should identify the deployment in production")
            if self.geocode_delay_seconds < 1.0:
                warnings.append("GEOCODE_DELAY_SECONDS below 1.0 violates the Nominatim usage policy")
        return warnings


settings = Settings()
