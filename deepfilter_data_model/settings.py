from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Process wide knobs for the filter engine caches, read from ``DEEPFILTER_*`` env vars."""

    predicate_cache_size: int = Field(default=500, ge=1)
    predicate_cache_ttl_seconds: float = Field(default=300.0, gt=0)
    regex_cache_size: int = Field(default=1000, ge=1)
    result_cache_collections: int = Field(default=64, ge=1)
    result_cache_entries_per_collection: int = Field(default=32, ge=1)

    model_config = SettingsConfigDict(env_prefix="DEEPFILTER_")


settings = EngineSettings()
