"""
fbmessenger/outbound/settings.py
fbmessenger - Facebook Messenger Platform client
Graph API Settings

Purpose:
- Centralised Graph API (Messenger Platform) configuration.
- Keep secrets out of code via environment variables.

Notes:
- Required for every call:
  - FACEBOOK_PAGE_TOKEN
- Optional:
  - FACEBOOK_API_VERSION (defaults to v2.11 if not provided)
  - FACEBOOK_GRAPH_URL (defaults to https://graph.facebook.com)
  - FACEBOOK_HTTP_TIMEOUT (seconds, defaults to 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_VERSION = "v2.11"
DEFAULT_GRAPH_URL = "https://graph.facebook.com"


def _require_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise RuntimeError(
            f"Missing required environment variable: {name}. "
            f"Set it in your .env / shell before running."
        )
    return value


@dataclass(frozen=True)
class GraphApiSettings:
    access_token: str
    api_version: str = DEFAULT_API_VERSION
    graph_url: str = DEFAULT_GRAPH_URL
    timeout: float = 30.0

    @property
    def base_url(self) -> str:
        return f"{self.graph_url.rstrip('/')}/{self.api_version}"

    @property
    def batch_url(self) -> str:
        return f"{self.graph_url.rstrip('/')}/"

    def endpoint_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"


def load_graph_settings() -> GraphApiSettings:
    return GraphApiSettings(
        access_token=_require_env("FACEBOOK_PAGE_TOKEN"),
        api_version=os.getenv("FACEBOOK_API_VERSION", DEFAULT_API_VERSION).strip(),
        graph_url=os.getenv("FACEBOOK_GRAPH_URL", DEFAULT_GRAPH_URL).strip(),
        timeout=float(os.getenv("FACEBOOK_HTTP_TIMEOUT", "30")),
    )
