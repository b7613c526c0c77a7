"""Configuration management for the MoleCo swatch generator."""
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Notation
    strict_version_check: bool = Field(
        default=True,
        description="Reject InChI/MInChI versions other than the supported ones"
    )
    supported_inchi_versions: List[str] = ["1S"]
    supported_minchi_versions: List[str] = ["0.00.1S"]

    # Color assignment (OkLCh sub-ranges)
    lightness_min: float = 0.62
    lightness_max: float = 0.82
    chroma_min: float = 0.10
    chroma_max: float = 0.16

    # Weight normalization
    sum_tolerance: float = 1e-9

    # Caching (entries per process, 0 disables)
    swatch_cache_size: int = Field(default=1024)
    color_cache_size: int = Field(default=4096)

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_reload: bool = Field(default=True)
    max_batch_size: int = Field(default=100)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: str = Field(default="")

    class Config:
        env_prefix = "MOLECO_"
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
