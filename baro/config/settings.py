# baro/config/settings.py

"""Central configuration for the baro price lookup engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the baro price lookup engine."""

    # --- Remote price API ---
    PRICE_API_BASE_URL: str = os.getenv(
        "BARO_PRICE_API_URL", "https://api.baro.example.com"
    ).rstrip("/")
    API_TIMEOUT: float = float(
        os.getenv("BARO_API_TIMEOUT", "0.8")
    )                                   # Hard deadline per fetch (secs)

    # --- Cache ---
    CACHE_KEY_PREFIX: str = "price_cache_"
    CACHE_TTL_MS: int = 5 * 60 * 1000   # 5 minutes

    # Seed identifiers warmed by preload_popular()
    POPULAR_BARCODES: tuple[str, ...] = (
        "8801062633357",
        "8801062636822",
        "8801062637331",
    )

    # --- Connectivity ---
    CONNECTIVITY_PROBE_URL: str = os.getenv(
        "BARO_CONNECTIVITY_URL", "https://clients3.google.com/generate_204"
    )
    CONNECTIVITY_TIMEOUT: float = 0.5   # Probe deadline (secs)
    CONNECTIVITY_RECHECK_SECONDS: float = 5.0

    # --- Fallback data ---
    DEFAULT_CURRENCY: str = "KRW"

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    CACHE_DB_PATH: Path = Path(
        os.getenv("BARO_CACHE_DB", str(BASE_DIR / "data" / "price_cache.db"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
