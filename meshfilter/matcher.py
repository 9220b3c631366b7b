"""Builders for Envoy matcher configurations, expressed as plain dictionaries."""

from __future__ import annotations

import ipaddress
from typing import Any

Matcher = dict[str, Any]


def cidr_range(v: str) -> Matcher:
    """Convert a CIDR or a single IP address into a CIDR range.

    A single IPv4 address gets a prefix length of 32 and a single IPv6 address
    a prefix length of 128. Raises ValueError for malformed input.
    """
    if "/" in v:
        address, _, mask = v.partition("/")
        try:
            ip = _parse_ip(address)
        except ValueError as exc:
            raise ValueError(f"invalid cidr range: invalid CIDR address: {v}") from exc
        bits = 128 if ":" in address else 32
        if not mask.isascii() or not mask.isdigit() or int(mask) > bits:
            raise ValueError(f"invalid cidr range: invalid CIDR address: {v}")
        return {"address_prefix": _format_ip(ip), "prefix_len": int(mask)}

    try:
        ip = _parse_ip(v)
    except ValueError as exc:
        raise ValueError(f"invalid ip address: {v}") from exc
    if "." in v:
        prefix_len = 32
    elif ":" in v:
        prefix_len = 128
    else:
        raise ValueError(f"invalid ip address: {v}")
    return {"address_prefix": _format_ip(ip), "prefix_len": prefix_len}


def _parse_ip(text: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    if "%" in text or not text:
        raise ValueError(f"invalid ip address: {text}")
    return ipaddress.ip_address(text)


def _format_ip(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> str:
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        return str(ip.ipv4_mapped)
    return str(ip)


def header_matcher(k: str, v: str) -> Matcher:
    """Convert a header name and a value pattern into a header matcher."""
    # "*" is checked first so that a prefix/suffix matcher is never empty.
    if v == "*":
        return {"name": k, "present_match": True}
    if v.startswith("*"):
        return {"name": k, "suffix_match": v[1:]}
    if v.endswith("*"):
        return {"name": k, "prefix_match": v[:-1]}
    return {"name": k, "exact_match": v}


def path_matcher(path: str) -> Matcher:
    """Create a path matcher for a path pattern."""
    return {"path": string_matcher(path)}


def metadata_string_matcher(filter: str, key: str, m: Matcher) -> Matcher:
    """Create a metadata matcher on a single key using a string matcher."""
    return {
        "filter": filter,
        "path": [{"key": key}],
        "value": {"string_match": m},
    }


def metadata_list_matcher(filter: str, keys: list[str], value: str) -> Matcher:
    """Create a metadata matcher that matches one element of a list at the given path."""
    return {
        "filter": filter,
        "path": [{"key": k} for k in keys],
        "value": {
            "list_match": {
                "one_of": {"string_match": string_matcher(value)},
            },
        },
    }


def string_matcher(v: str) -> Matcher:
    """Create a string matcher for a value pattern."""
    return string_matcher_with_prefix(v, "")


def string_matcher_regex(regex: str) -> Matcher:
    """Create a RE2 regex string matcher."""
    return {"safe_regex": {"google_re2": {}, "regex": regex}}


def string_matcher_with_prefix(v: str, prefix: str) -> Matcher:
    """Create a string matcher for a pattern with an extra prefix prepended.

    The prefix is ignored for the wildcard "*", which becomes the regex ".+".
    """
    if v == "*":
        return string_matcher_regex(".+")
    if v.startswith("*"):
        if not prefix:
            return {"suffix": v[1:]}
        return string_matcher_regex(prefix + ".*" + v[1:])
    if v.endswith("*"):
        return {"prefix": prefix + v[:-1]}
    return {"exact": prefix + v}