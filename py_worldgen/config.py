"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings pulled from ``WORLDGEN_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WORLDGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format (json or console)")

    # World defaults
    default_width: int = Field(default=200, gt=0, description="Default world width in cells")
    default_height: int = Field(default=100, gt=0, description="Default world height in cells")
    max_elevation: float = Field(default=100.0, gt=0, description="Maximum elevation")
    sea_level: float = Field(default=50.0, ge=0, description="Sea level elevation")

    # Climate
    ocean_bias_block_size: int = Field(
        default=25, ge=1, description="Edge length of ocean bias blocks, in cells"
    )
    point_ocean_size: int = Field(
        default=50, ge=1, description="Edge length of point ocean blocks, in cells"
    )

    # Rivers
    spring_chance_modifier: float = Field(
        default=0.004, ge=0, description="Spring chance per unit of rainfall"
    )
    river_min_length: int = Field(
        default=3, ge=1, description="Minimum segments for a river to be kept"
    )


settings = Settings()
