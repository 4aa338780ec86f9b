from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GROPHER_", extra="ignore")

    # Indentation for written JSON files; None writes a single line.
    json_indent: int | None = 2
    encoding: str = "utf-8"

    # Reject documents whose edges reference ids missing from the node list.
    strict_load: bool = True


settings = Settings()
