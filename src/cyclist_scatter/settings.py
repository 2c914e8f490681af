"""Application settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .loader import DEFAULT_DATA_URL, DEFAULT_TIMEOUT
from .scales import ChartLayout


class Settings(BaseSettings):
    """Define runtime configuration for the data source and chart layout."""

    model_config = SettingsConfigDict(
        env_prefix="CYCLIST_SCATTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_url: str = DEFAULT_DATA_URL
    request_timeout: Optional[float] = DEFAULT_TIMEOUT
    chart_width: int = Field(default=1024, gt=0)
    chart_height: int = Field(default=600, gt=0)
    chart_padding: int = Field(default=55, ge=0)

    def layout(self) -> ChartLayout:
        return ChartLayout(
            width=self.chart_width,
            height=self.chart_height,
            padding=self.chart_padding,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
