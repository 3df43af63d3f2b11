"""
Process-wide configuration for BrandGuardian.
Read once from the environment at startup and passed to the app explicitly.
"""

from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        frozen=True,
        populate_by_name=True,
        env_ignore_empty=True,
        extra="ignore",
    )

    port: int = Field(default=3000, validation_alias="PORT", description="Listen port")
    api_key: Optional[str] = Field(
        default=None,
        validation_alias="API_KEY",
        description="Bearer secret; when unset no auth check occurs",
    )
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        validation_alias="BRANDGUARDIAN_CORS_ORIGINS",
        description="Comma separated allowed origins",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    nav_timeout_ms: int = Field(
        default=60000,
        validation_alias="BRANDGUARDIAN_NAV_TIMEOUT_MS",
        description="Timeout for each navigation tier",
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, v):
        if isinstance(v, str):
            origins = [o.strip() for o in v.split(",") if o.strip()]
            return origins or ["*"]
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"
