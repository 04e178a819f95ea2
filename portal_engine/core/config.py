"""Runtime settings sourced from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed configuration for the request engine."""

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "dev"
    log_level: str = "INFO"
    log_json: bool = False

    # Hosted platform (managed Postgres REST + serverless functions)
    platform_url: str = "http://localhost:54321"
    platform_api_key: str = ""
    rest_path: str = "/rest/v1"
    functions_path: str = "/functions/v1"
    policy_function: str = "rbac-check-permission"

    store_backend: Literal["memory", "rest"] = "memory"

    # Where a denied permission gate sends the caller
    default_redirect: str = Field(default="/home")

    @property
    def rest_url(self) -> str:
        return self.platform_url.rstrip("/") + self.rest_path

    @property
    def functions_url(self) -> str:
        return self.platform_url.rstrip("/") + self.functions_path


@lru_cache
def get_settings() -> Settings:
    return Settings()
