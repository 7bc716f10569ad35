"""
File: fbmessenger/outbound/factory.py

Project: fbmessenger - Facebook Messenger Platform client

Purpose:
- Provide a single place to construct the Graph API client for an application
- Reuse a single client instance (singleton-style)

Design rules:
- No business logic here
- Only construction / wiring
- Batch-mode clients are never shared: build them directly with GraphApiClient
"""

from __future__ import annotations

from fbmessenger.outbound.graph import GraphApiClient
from fbmessenger.outbound.settings import load_graph_settings


# -------------------------------------------------
# Graph API client singleton
# -------------------------------------------------
_graph_client: GraphApiClient | None = None


def get_graph_client() -> GraphApiClient:
    global _graph_client
    if _graph_client is None:
        settings = load_graph_settings()
        _graph_client = GraphApiClient(settings=settings)
    return _graph_client


def reset_graph_client() -> None:
    """Drop the cached client, e.g. after the environment changed."""
    global _graph_client
    _graph_client = None
