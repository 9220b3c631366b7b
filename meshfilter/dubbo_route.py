"""Route configuration pieces for Dubbo proxies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from meshfilter.matcher import string_matcher_regex

Node = dict[str, Any]

_MATCH_ALL_REGEX = ".*"


@dataclass(frozen=True)
class StringMatch:
    """A string pattern that is an exact value, a prefix or a regex, at most one of them."""

    exact: str | None = None
    prefix: str | None = None
    regex: str | None = None

    def __post_init__(self) -> None:
        chosen = [v for v in (self.exact, self.prefix, self.regex) if v is not None]
        if len(chosen) > 1:
            raise ValueError("only one of exact, prefix or regex may be set")


@dataclass(frozen=True)
class HTTPMatchRequest:
    """Conditions on a request's method name and headers."""

    method: StringMatch | None = None
    headers: Mapping[str, StringMatch] = field(default_factory=dict)


def _match_all() -> Node:
    return string_matcher_regex(_MATCH_ALL_REGEX)


def default_route(cluster_name: str) -> Node:
    """A route that sends calls to any method to the given cluster."""
    return {
        "match": {"method": {"name": _match_all()}},
        "route": build_single_cluster(cluster_name),
    }


def _method_name_matcher(method: StringMatch) -> Node | None:
    if method.exact is not None:
        return {"exact": method.exact}
    if method.prefix is not None:
        return {"prefix": method.prefix}
    if method.regex is not None:
        return string_matcher_regex(method.regex)
    return None


def build_method_match(matches: Sequence[HTTPMatchRequest]) -> Node:
    """Build a method match from the first match request, matching all methods by default."""
    name = None
    if matches and matches[0].method is not None:
        name = _method_name_matcher(matches[0].method)
    # The proxy requires a method matcher, so fall back to one matching everything.
    return {"name": name if name is not None else _match_all()}


def build_header_match(matches: Sequence[HTTPMatchRequest]) -> list[Node]:
    """Build header matchers from the first match request's header conditions."""
    if not matches:
        return []
    header_matchers = []
    for name, value in matches[0].headers.items():
        if value.exact is not None:
            header_matchers.append({"name": name, "exact_match": value.exact})
        elif value.prefix is not None:
            header_matchers.append({"name": name, "prefix_match": value.prefix})
        elif value.regex is not None:
            regex = string_matcher_regex(value.regex)["safe_regex"]
            header_matchers.append({"name": name, "safe_regex_match": regex})
    return header_matchers


def build_single_cluster(cluster_name: str) -> Node:
    """A route action that targets a single cluster."""
    return {"cluster": cluster_name}


def build_weighted_cluster(clusters: Iterable[tuple[str, int]]) -> Node:
    """A route action that splits traffic across clusters by weight."""
    cluster_weights = []
    total_weight = 0
    for name, weight in clusters:
        if weight < 0:
            raise ValueError(f"negative weight for cluster {name}: {weight}")
        cluster_weights.append({"name": name, "weight": weight})
        total_weight += weight
    return {
        "weighted_clusters": {
            "clusters": cluster_weights,
            "total_weight": total_weight,
        }
    }