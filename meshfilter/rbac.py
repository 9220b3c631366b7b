"""Builders for Envoy RBAC permissions and principals, expressed as dictionaries."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from typing import Any

Node = dict[str, Any]


class Action(enum.IntEnum):
    """Action taken by an RBAC filter when a policy matches."""

    ALLOW = 0
    DENY = 1
    LOG = 2


def permission_any() -> Node:
    """A permission that matches any request."""
    return {"any": True}


def permission_and(permissions: Iterable[Node]) -> Node:
    """A permission that matches when all given permissions match."""
    return {"and_rules": {"rules": list(permissions)}}


def permission_or(permissions: Iterable[Node]) -> Node:
    """A permission that matches when any given permission matches."""
    return {"or_rules": {"rules": list(permissions)}}


def permission_not(permission: Node) -> Node:
    """A permission that negates another."""
    return {"not_rule": permission}


def permission_metadata(metadata: Node) -> Node:
    """A permission that matches on dynamic metadata."""
    return {"metadata": metadata}


def principal_any() -> Node:
    """A principal that matches any downstream."""
    return {"any": True}


def principal_and(principals: Iterable[Node]) -> Node:
    """A principal that matches when all given principals match."""
    return {"and_ids": {"ids": list(principals)}}


def principal_or(principals: Iterable[Node]) -> Node:
    """A principal that matches when any given principal matches."""
    return {"or_ids": {"ids": list(principals)}}


def principal_not(principal: Node) -> Node:
    """A principal that negates another."""
    return {"not_id": principal}


def principal_authenticated(name: Node) -> Node:
    """A principal that matches the authenticated peer name with a string matcher."""
    return {"authenticated": {"principal_name": name}}