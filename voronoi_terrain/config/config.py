from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Terrain generation settings pulled from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    # Builder defaults
    default_water_level: int = Field(default=50, ge=0, description="Default water level")
    default_height_scale: int = Field(default=100, ge=0, description="Default height scale")

    # Tessellation frame
    bounds_center_x: float = Field(default=0.0, description="Frame centre x")
    bounds_center_y: float = Field(default=0.0, description="Frame centre y")
    bounds_radius: float = Field(default=9999.0, gt=0, description="Frame half width")

    # Fractal noise
    noise_octaves: int = Field(default=6, ge=1, description="Number of noise octaves")
    noise_frequency: float = Field(default=1.0, gt=0, description="Base noise frequency")
    noise_lacunarity: float = Field(default=2.0, gt=0, description="Frequency multiplier per octave")
    noise_persistence: float = Field(default=0.5, gt=0, description="Amplitude multiplier per octave")

    model_config = SettingsConfigDict(
        env_prefix="VORONOI_TERRAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
