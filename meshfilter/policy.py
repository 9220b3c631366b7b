"""Dubbo authorization policy resources."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class PolicyAction(enum.IntEnum):
    """Action of a Dubbo authorization policy."""

    ALLOW = 0
    DENY = 1


@dataclass(frozen=True)
class Source:
    """Identities of request sources."""

    namespaces: tuple[str, ...] = ()
    not_namespaces: tuple[str, ...] = ()
    principals: tuple[str, ...] = ()
    not_principals: tuple[str, ...] = ()


@dataclass(frozen=True)
class Operation:
    """Dubbo interfaces and methods a request targets."""

    interfaces: tuple[str, ...] = ()
    not_interfaces: tuple[str, ...] = ()
    methods: tuple[str, ...] = ()
    not_methods: tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleFrom:
    """A source condition of a rule."""

    source: Source | None = None


@dataclass(frozen=True)
class RuleTo:
    """An operation condition of a rule."""

    operation: Operation | None = None


@dataclass(frozen=True)
class Rule:
    """A single authorization rule: who may perform which operation."""

    from_: tuple[RuleFrom, ...] = ()
    to: tuple[RuleTo, ...] = ()


@dataclass(frozen=True)
class DubboAuthorizationPolicy:
    """A named authorization policy in a namespace."""

    name: str
    namespace: str
    action: PolicyAction = PolicyAction.ALLOW
    rules: tuple[Rule | None, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DubboAuthorizationPolicy:
        """Build a policy from a resource document with metadata and spec sections."""
        if not isinstance(data, Mapping):
            raise ValueError("policy must be a mapping")
        metadata = _mapping(data.get("metadata"), "metadata")
        spec = _mapping(data.get("spec"), "spec")
        rules_data = spec.get("rules") or []
        if not isinstance(rules_data, list):
            raise ValueError("spec.rules must be a list")
        return cls(
            name=_string(metadata.get("name", ""), "metadata.name"),
            namespace=_string(metadata.get("namespace", ""), "metadata.namespace"),
            action=_action(spec.get("action", PolicyAction.ALLOW)),
            rules=tuple(None if r is None else _rule(r) for r in rules_data),
        )


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be a mapping")
    return value


def _string(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string")
    return value


def _strings(data: Mapping[str, Any], key: str) -> tuple[str, ...]:
    values = data.get(key) or []
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ValueError(f"{key} must be a list of strings")
    return tuple(values)


def _action(value: Any) -> PolicyAction:
    if isinstance(value, PolicyAction):
        return value
    if isinstance(value, str):
        try:
            return PolicyAction[value.upper()]
        except KeyError:
            raise ValueError(f"unsupported action: {value}") from None
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return PolicyAction(value)
        except ValueError:
            raise ValueError(f"unsupported action: {value}") from None
    raise ValueError(f"unsupported action: {value!r}")


def _rule(data: Any) -> Rule:
    data = _mapping(data, "rule")
    froms = data.get("from") or []
    tos = data.get("to") or []
    if not isinstance(froms, list) or not isinstance(tos, list):
        raise ValueError("rule.from and rule.to must be lists")
    return Rule(
        from_=tuple(_rule_from(f) for f in froms),
        to=tuple(_rule_to(t) for t in tos),
    )


def _rule_from(data: Any) -> RuleFrom:
    data = _mapping(data, "from")
    source = data.get("source")
    if source is None:
        return RuleFrom()
    source = _mapping(source, "source")
    return RuleFrom(
        Source(
            namespaces=_strings(source, "namespaces"),
            not_namespaces=_strings(source, "notNamespaces"),
            principals=_strings(source, "principals"),
            not_principals=_strings(source, "notPrincipals"),
        )
    )


def _rule_to(data: Any) -> RuleTo:
    data = _mapping(data, "to")
    operation = data.get("operation")
    if operation is None:
        return RuleTo()
    operation = _mapping(operation, "operation")
    return RuleTo(
        Operation(
            interfaces=_strings(operation, "interfaces"),
            not_interfaces=_strings(operation, "notInterfaces"),
            methods=_strings(operation, "methods"),
            not_methods=_strings(operation, "notMethods"),
        )
    )