"""
Configuration management for the CURRENTMAP API.
Loads environment variables and provides typed configuration.
"""
from typing import List, Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from currentmap.data.netcdf_loader import VariableNames


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ========================================================================
    # Dataset Configuration
    # ========================================================================
    dataset_path: str = "data/currents.nc"

    # Variable names inside the NetCDF file
    var_u: str = "u"
    var_v: str = "v"
    var_time: str = "time"
    var_lat: str = "latc"
    var_lon: str = "lonc"

    # Vertical layer selection for layered u/v (0 = surface)
    layer_dim: Optional[str] = "siglay"
    layer_index: int = 0

    @property
    def variable_names(self) -> VariableNames:
        return VariableNames(
            u=self.var_u,
            v=self.var_v,
            time=self.var_time,
            lat=self.var_lat,
            lon=self.var_lon,
        )

    # ========================================================================
    # API Configuration
    # ========================================================================
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ========================================================================
    # CORS Configuration
    # ========================================================================
    cors_origins: str = "http://localhost:3000,http://localhost:4000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ========================================================================
    # Application Configuration
    # ========================================================================
    environment: str = "development"
    log_level: str = "info"
    metrics_enabled: bool = True

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    # ========================================================================
    # Pydantic Settings Configuration
    # ========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CURRENTMAP_",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


# Convenience exports
settings = get_settings()

# Validate critical settings in production
if settings.is_production and "localhost" in settings.cors_origins.lower():
    raise ValueError(
        "CURRENTMAP_CORS_ORIGINS must not include localhost in production!"
    )
