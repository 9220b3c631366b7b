"""Helpers for building Redis upstream cluster configurations as dictionaries."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

Node = dict[str, Any]

ISTIO_METADATA_KEY = "istio"
MAX_UINT32 = 2**32 - 1
FRACTIONAL_PERCENT_DENOMINATOR = "MILLION"


@dataclass(frozen=True)
class HostPort:
    """An address made of a host and a port."""

    host: str
    port: int


@dataclass(frozen=True)
class Port:
    """A named service port."""

    number: int
    name: str = ""


@dataclass(frozen=True)
class TcpKeepalive:
    """TCP keepalive settings of a connection pool."""

    probes: int = 0
    time: timedelta | None = None
    interval: timedelta | None = None


def get_or_create_istio_metadata(cluster: Node) -> Node:
    """Return the cluster's istio filter metadata fields, creating them if missing."""
    metadata = cluster.get("metadata")
    if metadata is None:
        metadata = cluster["metadata"] = {"filter_metadata": {}}
    filter_metadata = metadata.setdefault("filter_metadata", {})
    return filter_metadata.setdefault(ISTIO_METADATA_KEY, {})


def build_service_metadata(host: str, name: str, namespace: str) -> Node:
    """Build the service metadata added to a cluster's istio metadata."""
    return {
        # service fqdn
        "host": host,
        # short name of the service
        "name": name,
        # namespace of the service
        "namespace": namespace,
    }


def find_service_port(
    ports: Sequence[Port] | None, listen_port: int, listen_port_name: str
) -> int:
    """Find the service port matching the listener's port number or name."""
    if ports is None:
        return listen_port
    if len(ports) == 1:
        return ports[0].number
    for port in ports:
        if port.number == listen_port:
            return listen_port
        if port.name == listen_port_name:
            return port.number
    return listen_port


def translate_percent_to_fractional_percent(value: float) -> Node:
    """Translate a percentage into a fractional percent per million."""
    return {
        "numerator": int(value * 10000),
        "denominator": FRACTIONAL_PERCENT_DENOMINATOR,
    }


def inline_string(s: str) -> Node | None:
    """Build an inline string data source, or None for an empty string."""
    if not s:
        return None
    return {"inline_string": s}


def to_lb_endpoints(*args: HostPort) -> list[Node]:
    """Build load-balancer endpoints for the given addresses."""
    return [
        {
            "endpoint": {
                "address": {
                    "socket_address": {"address": addr.host, "port_value": addr.port}
                }
            }
        }
        for addr in args
    ]


def default_circuit_breaker_thresholds() -> Node:
    """Return a fresh copy of the default circuit breaker thresholds."""
    # Envoy's default max_retries of 3 is too low during pod churn, so every
    # limit is raised to the maximum.
    return {
        "max_retries": MAX_UINT32,
        "max_requests": MAX_UINT32,
        "max_connections": MAX_UINT32,
        "max_pending_requests": MAX_UINT32,
    }


def set_keep_alive_settings(cluster: Node, keepalive: TcpKeepalive) -> None:
    """Apply TCP keepalive settings to the cluster's upstream connection options."""
    options = cluster.get("upstream_connection_options")
    if options is None:
        options = cluster["upstream_connection_options"] = {}
    tcp = options.get("tcp_keepalive")
    if tcp is None:
        tcp = options["tcp_keepalive"] = {}
    if keepalive.probes > 0:
        tcp["keepalive_probes"] = keepalive.probes
    if keepalive.time is not None:
        tcp["keepalive_time"] = int(keepalive.time.total_seconds())
    if keepalive.interval is not None:
        tcp["keepalive_interval"] = int(keepalive.interval.total_seconds())