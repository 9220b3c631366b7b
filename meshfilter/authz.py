"""Translate Dubbo authorization rules into Envoy RBAC policies."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from meshfilter.matcher import (
    metadata_string_matcher,
    string_matcher,
    string_matcher_regex,
    string_matcher_with_prefix,
)
from meshfilter.policy import Rule
from meshfilter.rbac import (
    Action,
    permission_and,
    permission_any,
    permission_metadata,
    permission_not,
    permission_or,
    principal_and,
    principal_any,
    principal_authenticated,
    principal_not,
    principal_or,
)

Node = dict[str, Any]

RBAC_DUBBO_FILTER_NAME = "envoy.filters.dubbo.rbac"
RBAC_DUBBO_FILTER_STAT_PREFIX = "dubbo."
SPIFFE_URI_PREFIX = "spiffe://"

_ATTR_SRC_NAMESPACE = "source.namespace"
_ATTR_SRC_PRINCIPAL = "source.principal"
_DUBBO_INTERFACE = "dubboInterface"
_DUBBO_METHOD = "dubboMethod"


class _TrustDomainBundle(Protocol):
    def replace_trust_domain_aliases(self, values: Sequence[str]) -> list[str]: ...


class _Generator:
    def permission(self, key: str, value: str) -> Node:
        raise ValueError("unimplemented")

    def principal(self, key: str, value: str) -> Node:
        raise ValueError("unimplemented")


class _InterfaceGenerator(_Generator):
    def permission(self, key: str, value: str) -> Node:
        m = metadata_string_matcher(RBAC_DUBBO_FILTER_NAME, "service", string_matcher(value))
        return permission_metadata(m)


class _MethodGenerator(_Generator):
    def permission(self, key: str, value: str) -> Node:
        m = metadata_string_matcher(RBAC_DUBBO_FILTER_NAME, "method", string_matcher(value))
        return permission_metadata(m)


class _SrcNamespaceGenerator(_Generator):
    def principal(self, key: str, value: str) -> Node:
        v = value.replace("*", ".*")
        return principal_authenticated(string_matcher_regex(f".*/ns/{v}/.*"))


class _SrcPrincipalGenerator(_Generator):
    def principal(self, key: str, value: str) -> Node:
        return principal_authenticated(string_matcher_with_prefix(value, SPIFFE_URI_PREFIX))


@dataclass
class _RuleEntry:
    key: str
    values: list[str]
    not_values: list[str]
    generator: _Generator

    def _collect(self, build, values: Iterable[str], action: Action) -> list[Node]:
        nodes = []
        for value in values:
            try:
                nodes.append(build(self.key, value))
            except ValueError:
                # An allow policy fails as a whole; deny and log policies skip the value.
                if action == Action.ALLOW:
                    raise
        return nodes

    def permissions(self, action: Action) -> list[Node]:
        result = []
        if matched := self._collect(self.generator.permission, self.values, action):
            result.append(permission_or(matched))
        if excluded := self._collect(self.generator.permission, self.not_values, action):
            result.append(permission_not(permission_or(excluded)))
        return result

    def principals(self, action: Action) -> list[Node]:
        result = []
        if matched := self._collect(self.generator.principal, self.values, action):
            result.append(principal_or(matched))
        if excluded := self._collect(self.generator.principal, self.not_values, action):
            result.append(principal_not(principal_or(excluded)))
        return result


@dataclass
class _RuleList:
    rules: list[_RuleEntry] = field(default_factory=list)

    def insert_front(
        self, generator: _Generator, key: str, values: Sequence[str], not_values: Sequence[str]
    ) -> None:
        if not values and not not_values:
            return
        self.rules.insert(0, _RuleEntry(key, list(values), list(not_values), generator))


@dataclass
class Model:
    """A single authorization rule, split into permission and principal conditions."""

    permissions: list[_RuleList] = field(default_factory=list)
    principals: list[_RuleList] = field(default_factory=list)

    @classmethod
    def from_rule(cls, rule: Rule) -> Model:
        """Build a model from a policy rule."""
        model = cls()
        for rule_from in rule.from_:
            merged = _RuleList()
            if (s := rule_from.source) is not None:
                merged.insert_front(
                    _SrcNamespaceGenerator(), _ATTR_SRC_NAMESPACE, s.namespaces, s.not_namespaces
                )
                merged.insert_front(
                    _SrcPrincipalGenerator(), _ATTR_SRC_PRINCIPAL, s.principals, s.not_principals
                )
            model.principals.append(merged)
        if not rule.from_:
            model.principals.append(_RuleList())

        for rule_to in rule.to:
            merged = _RuleList()
            if (o := rule_to.operation) is not None:
                merged.insert_front(
                    _InterfaceGenerator(), _DUBBO_INTERFACE, o.interfaces, o.not_interfaces
                )
                merged.insert_front(_MethodGenerator(), _DUBBO_METHOD, o.methods, o.not_methods)
            model.permissions.append(merged)
        if not rule.to:
            model.permissions.append(_RuleList())
        return model

    def migrate_trust_domain(self, bundle: _TrustDomainBundle) -> None:
        """Replace trust domains in source principals using the bundle's aliases."""
        for rule_list in self.principals:
            for entry in rule_list.rules:
                if entry.key != _ATTR_SRC_PRINCIPAL:
                    continue
                if entry.values:
                    entry.values = list(bundle.replace_trust_domain_aliases(entry.values))
                if entry.not_values:
                    entry.not_values = list(bundle.replace_trust_domain_aliases(entry.not_values))

    def generate(self, action: Action) -> Node:
        """Generate an Envoy RBAC policy; raises ValueError if it cannot be built."""
        permissions = [_generate_permission(rl, action) for rl in self.permissions]
        if not permissions:
            raise ValueError("must have at least 1 permission")
        principals = [_generate_principal(rl, action) for rl in self.principals]
        if not principals:
            raise ValueError("must have at least 1 principal")
        return {"permissions": permissions, "principals": principals}


def _generate_permission(rule_list: _RuleList, action: Action) -> Node:
    conditions = [p for entry in rule_list.rules for p in entry.permissions(action)]
    return permission_and(conditions or [permission_any()])


def _generate_principal(rule_list: _RuleList, action: Action) -> Node:
    conditions = [p for entry in rule_list.rules for p in entry.principals(action)]
    return principal_and(conditions or [principal_any()])