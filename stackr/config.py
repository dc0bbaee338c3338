# stackr/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_QUOTES_ROOT = Path(__file__).resolve().parent / "quotes"


class Settings(BaseSettings):
    # === Tables & rules ===
    tables_dir: Path = Field(
        _QUOTES_ROOT / "data" / "tables",
        description="Directory with the static pricing tables (YAML)",
    )
    ruleset_path: Path = Field(
        _QUOTES_ROOT / "rules" / "rule_sets" / "v1.yaml",
        description="Recommendation rule set (YAML)",
    )

    # === Parameter overrides ===
    overrides_path: Optional[Path] = Field(
        None, description="JSON store with per-user industry parameter overrides"
    )
    override_fetch_timeout_seconds: float = 2.0

    # === Quote ===
    currency: str = "USD"
    quote_validity_days: int = 30

    # === Logging ===
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
