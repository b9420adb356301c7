from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WIKIREVIEW_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Script variant used for every user-visible message.
    variant: Literal["zh-hant", "zh-hans"] = "zh-hant"
    # Reviewer identity; falls back to "import" on normalized annotations.
    user_name: str | None = None
    data_dir: Path = Path("data")


settings = Settings()
