# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application configuration loaded from the environment."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``CRM_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CRM_",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = "sqlite:///./crm.db"
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Header carrying the user id established by the upstream auth provider
    identity_header: str = "X-User-Id"

    # User attribute shared by members of a team
    team_attribute: str = "country_id"


settings = Settings()
