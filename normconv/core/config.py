import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NORMCONV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="normconv API")
    environment: Literal["dev", "test", "staging", "prod"] = Field(default="dev")
    debug: bool = Field(default=False)

    norm_table_files: Annotated[List[Path], NoDecode] = Field(
        default_factory=list,
        description="Ordered list of band table files (JSON or YAML) loaded at startup",
    )
    overall_convention: Literal["all", "core"] = Field(
        default="all",
        description="Which subtest total keys the overall composite table: all ten or the seven core subtests",
    )

    instrumentation_enabled: bool = Field(default=True)

    @field_validator("norm_table_files", mode="before")
    @classmethod
    def _split_paths(cls, value: object) -> object:
        if value in (None, "", b""):
            return []
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return [part.strip() for part in stripped.split(",") if part.strip()]
        return value

    @property
    def is_production(self) -> bool:
        return self.environment == "prod"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
