from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from debtor.bitset import WIDTH


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # largest input that auto mode still solves exactly
    exact_auto_threshold: int = Field(14, alias="DEBTOR_EXACT_AUTO_THRESHOLD", ge=0, le=WIDTH - 1)
    exact_max_balances: int = Field(24, alias="DEBTOR_EXACT_MAX_BALANCES", ge=0, le=WIDTH - 1)
    flow_edge_capacity: int = Field(1_000_000_000, alias="DEBTOR_FLOW_EDGE_CAPACITY", gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
