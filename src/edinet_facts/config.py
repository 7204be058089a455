"""Configuration management via environment variables.

Reads from .env file (via pydantic-settings) with sensible defaults.
All values can be overridden via environment variables.

Required:
    EDINET_API_KEY  — Subscription key for the EDINET API v2

Optional:
    EDINET_BASE_URL      — API root (defaults to the public v2 endpoint)
    REQUESTS_PER_SECOND  — Outbound request ceiling (EDINET asks for ~1/s)
    DOCUMENT_TYPES       — Download variants to try, in order (e.g. "[1, 2, 5]")
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # EDINET API credentials and endpoint
    edinet_api_key: str = ""
    edinet_base_url: str = "https://api.edinet-fsa.go.jp/api/v2"
    user_agent: str = "edinet-facts/0.1"

    # Network limits
    requests_per_second: float = 1.0
    request_timeout: float = 30.0
    max_payload_bytes: int = 64 * 1024 * 1024

    # Company discovery
    recent_window_days: int = 90
    discovery_date_budget: int = 20
    min_company_count: int = 1

    # Per-year filing search
    fiscal_date_budget: int = 30
    sweep_date_budget: int = 60
    sweep_band_years: int = 2
    fiscal_year_end_month: int = 3

    # Download variants, most preferred first:
    #   1 = submission package (XBRL), 2 = alternate rendition, 5 = CSV
    document_types: list[int] = [1, 2, 5]

    # .env values often carry trailing spaces or quotes
    @field_validator("edinet_api_key", "edinet_base_url", "user_agent", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().strip('"').strip("'").strip()
        return v

    @field_validator("edinet_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_config: Settings | None = None


def get_config() -> Settings:
    """Get or create the shared Settings singleton."""
    global _config
    if _config is None:
        _config = Settings()
    return _config
