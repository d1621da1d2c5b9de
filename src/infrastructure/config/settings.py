"""
Application settings loaded from environment variables (and an optional .env file).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    finnhub_api_key: Optional[str]
    finnhub_base_url: str
    finnhub_secret_arn: Optional[str]
    market_data_timeout_seconds: float
    enable_yfinance_fallback: bool
    log_level: str
    aws_region: str

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """Load settings from the process environment.

        Args:
            env_file: Path to a .env file. Defaults to python-dotenv's lookup
                      of a .env in the working directory tree. Values already
                      present in the environment are never overridden.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            finnhub_api_key=os.getenv("FINNHUB_API_KEY") or None,
            finnhub_base_url=os.getenv("FINNHUB_BASE_URL", "https://finnhub.io/api/v1"),
            finnhub_secret_arn=os.getenv("FINNHUB_SECRET_ARN") or None,
            market_data_timeout_seconds=float(
                os.getenv("MARKET_DATA_TIMEOUT_SECONDS", "10")
            ),
            enable_yfinance_fallback=_env_bool("ENABLE_YFINANCE_FALLBACK", True),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            aws_region=os.getenv("AWS_DEFAULT_REGION", "us-east-1"),
        )
