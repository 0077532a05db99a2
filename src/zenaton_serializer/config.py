"""Configuration for the serializer.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SerializerSettings(BaseSettings):
    """Settings for the serializer.

    Environment variables:
    - LOG_LEVEL                            (optional)
    - ZENATON_SERIALIZER_MAX_DEPTH         (optional)
    - ZENATON_SERIALIZER_ALLOW_TYPE_IMPORT (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `SerializerSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    max_depth: int = Field(
        default=512,
        gt=0,
        validation_alias="ZENATON_SERIALIZER_MAX_DEPTH",
        description="Maximum nesting depth accepted when parsing a payload",
    )

    allow_type_import: bool = Field(
        default=True,
        validation_alias="ZENATON_SERIALIZER_ALLOW_TYPE_IMPORT",
        description=(
            "Resolve unregistered record type names by importing their module. "
            "Disable to only decode types registered explicitly."
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )
