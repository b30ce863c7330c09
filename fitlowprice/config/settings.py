# fitlowprice/config/settings.py

"""Central configuration for the fitlowprice engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the fitlowprice engine."""

    # --- Deployment ---
    APP_ENV: str = os.getenv("FITLOWPRICE_ENV", "development")

    # --- Credentials (absence => fallback mode, never a hard failure) ---
    NAVER_CLIENT_ID: str = os.getenv("NAVER_CLIENT_ID", "")
    NAVER_CLIENT_SECRET: str = os.getenv("NAVER_CLIENT_SECRET", "")

    # --- Scraping ---
    REQUEST_TIMEOUT: int = 15           # Default / detail lookups
    SOURCE_TIMEOUTS: dict[str, int] = {
        "coupang": 10,
        "naver": 5,
        "elevenst": 10,
    }
    MAX_LISTINGS_PER_SOURCE: int = 5    # Candidate cap per search
    MIN_KEYWORD_LENGTH: int = 2

    # --- Pricing ---
    SHIPPING_WAIVER_MARKER: str = "와우"

    # --- Resilience ---
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
        "자동입력 방지",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DISCOUNT_RULES_PATH: Path = (
        BASE_DIR / "fitlowprice" / "config" / "discount_rules.json"
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
    CONSOLE_LOG_LEVEL: str = os.getenv("FITLOWPRICE_LOG_LEVEL", "WARNING")

    # --- Sources (order = dispatch order = merge tiebreak order) ---
    AVAILABLE_SOURCES: list[dict[str, str]] = [
        {
            "id": "coupang",
            "label": "쿠팡",
            "scraper": "fitlowprice.scrapers.coupang_scraper.CoupangScraper",
        },
        {
            "id": "naver",
            "label": "네이버",
            "scraper": "fitlowprice.scrapers.naver_scraper.NaverScraper",
        },
        {
            "id": "elevenst",
            "label": "11번가",
            "scraper": "fitlowprice.scrapers.elevenst_scraper.ElevenstScraper",
        },
    ]

    @classmethod
    def is_production(cls) -> bool:
        """Return True when synthetic fallback data must never be served."""
        return cls.APP_ENV.strip().lower() == "production"

    @classmethod
    def timeout_for(cls, source_id: str) -> int:
        """Return the bounded request timeout for *source_id*."""
        return cls.SOURCE_TIMEOUTS.get(source_id, cls.REQUEST_TIMEOUT)
