"""
birdie/settings.py
Birdie test bot settings

Purpose:
- Page id and webhook verify token, from environment variables.
- The page token is read by fbmessenger.outbound.settings (shared client).

Notes:
- Required:
  - FACEBOOK_PAGE_TOKEN (via load_graph_settings)
  - FACEBOOK_PAGE_ID
  - FACEBOOK_VERIFY_TOKEN
- Optional:
  - BIRDIE_MEDIA_BASE_URL (public base URL serving video.mp4 / audio.mp3)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def _require_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise RuntimeError(
            f"Facebook bot config missing: {name}. Please set FACEBOOK_PAGE_TOKEN, "
            f"FACEBOOK_PAGE_ID, and FACEBOOK_VERIFY_TOKEN to run this test bot."
        )
    return value


@dataclass(frozen=True)
class BirdieSettings:
    page_id: str
    verify_token: str
    media_base_url: str | None = None
    fixtures_dir: Path = FIXTURES_DIR


_settings: BirdieSettings | None = None


def get_birdie_settings() -> BirdieSettings:
    global _settings
    if _settings is None:
        _settings = BirdieSettings(
            page_id=_require_env("FACEBOOK_PAGE_ID"),
            verify_token=_require_env("FACEBOOK_VERIFY_TOKEN"),
            media_base_url=os.getenv("BIRDIE_MEDIA_BASE_URL", "").strip().rstrip("/") or None,
        )
    return _settings
