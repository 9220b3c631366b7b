"""Route configuration pieces for Thrift proxies."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

Node = dict[str, Any]


def _match_any_method() -> Node:
    # An empty method name matches any request method name.
    return {"method_name": ""}


def default_route(cluster_name: str) -> Node:
    """A route that sends calls to any method to the given cluster."""
    return {"match": _match_any_method(), "route": build_single_cluster(cluster_name)}


def build_single_cluster(cluster_name: str) -> Node:
    """A route action that targets a single cluster."""
    return {"cluster": cluster_name}


def build_weighted_cluster(clusters: Iterable[tuple[str, int]]) -> Node:
    """A route action that splits traffic across clusters by weight."""
    cluster_weights = []
    for name, weight in clusters:
        if weight < 0:
            raise ValueError(f"negative weight for cluster {name}: {weight}")
        cluster_weights.append({"name": name, "weight": weight})
    return {"weighted_clusters": {"clusters": cluster_weights}}


def build_route_config(cluster_name: str, routes: Iterable[Node] | None) -> Node:
    """Build a route configuration named after the cluster.

    Without route actions, a single catch-all route to the cluster is used;
    otherwise each route action gets a route matching any method.
    """
    if routes is None:
        route_list = [default_route(cluster_name)]
    else:
        route_list = [{"match": _match_any_method(), "route": action} for action in routes]
    return {"name": cluster_name, "routes": route_list}