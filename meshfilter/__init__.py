"""Envoy matcher, RBAC, route and Redis cluster configuration builders for service-mesh protocols."""

__version__ = "0.1.0"

__all__ = [
    "matcher",
    "rbac",
    "policy",
    "authz",
    "builder",
    "redis_cluster",
    "metaprotocol_route",
    "dubbo_route",
    "thrift_route",
]