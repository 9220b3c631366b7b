"""Route configuration for MetaProtocol proxies."""

from __future__ import annotations

from typing import Any

Node = dict[str, Any]


def default_route(cluster_name: str) -> Node:
    """A route that sends every request to the given cluster."""
    return {"route": {"cluster": cluster_name}}


def build_inbound_route_config(cluster_name: str) -> Node:
    """Inbound route configuration with a single catch-all route to the cluster."""
    return {"name": cluster_name, "routes": [default_route(cluster_name)]}