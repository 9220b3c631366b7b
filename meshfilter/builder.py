"""Build Dubbo RBAC filters from authorization policies."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from meshfilter.authz import (
    RBAC_DUBBO_FILTER_NAME,
    RBAC_DUBBO_FILTER_STAT_PREFIX,
    Model,
    _TrustDomainBundle,
)
from meshfilter.policy import DubboAuthorizationPolicy, PolicyAction
from meshfilter.rbac import Action

log = logging.getLogger(__name__)

Node = dict[str, Any]

_RBAC_TYPE_URL = "type.googleapis.com/envoy.extensions.filters.network.rbac.v3.RBAC"


class Builder:
    """Builds Dubbo RBAC filters from allow and deny authorization policies."""

    def __init__(
        self,
        trust_domain_bundle: _TrustDomainBundle,
        policies: Iterable[DubboAuthorizationPolicy],
    ) -> None:
        self.trust_domain_bundle = trust_domain_bundle
        self.allow_policies: list[DubboAuthorizationPolicy] = []
        self.deny_policies: list[DubboAuthorizationPolicy] = []
        for policy in policies:
            if policy.action == PolicyAction.ALLOW:
                self.allow_policies.append(policy)
            elif policy.action == PolicyAction.DENY:
                self.deny_policies.append(policy)
            else:
                log.error(
                    "ignored authorization policy %s.%s with unsupported action: %s",
                    policy.namespace,
                    policy.name,
                    policy.action,
                )

    def build_dubbo_filter(self) -> list[Node]:
        """Return the RBAC filters, deny before allow."""
        filters = []
        deny = build_rbac(self.deny_policies, self.trust_domain_bundle, Action.DENY)
        if deny is not None:
            filters.append(create_dubbo_rbac_filter(deny))
        allow = build_rbac(self.allow_policies, self.trust_domain_bundle, Action.ALLOW)
        if allow is not None:
            filters.append(create_dubbo_rbac_filter(allow))
        return filters


def build_rbac(
    policies: Sequence[DubboAuthorizationPolicy],
    trust_domain_bundle: _TrustDomainBundle,
    action: Action,
) -> Node | None:
    """Build an RBAC configuration from policies, or None when there are none."""
    if not policies:
        return None
    generated_policies: dict[str, Node] = {}
    for policy in policies:
        for i, rule in enumerate(policy.rules):
            name = f"ns[{policy.namespace}]-policy[{policy.name}]-rule[{i}]"
            if rule is None:
                log.error("skipped nil rule %s", name)
                continue
            model = Model.from_rule(rule)
            model.migrate_trust_domain(trust_domain_bundle)
            try:
                generated = model.generate(action)
            except ValueError as exc:
                log.error("skipped rule %s: %s", name, exc)
                continue
            generated_policies[name] = generated
            log.debug("rule %s generated policy: %s", name, generated)
    return {"action": action, "policies": generated_policies}


def create_dubbo_rbac_filter(config: Node | None) -> Node | None:
    """Wrap an RBAC configuration in a Dubbo filter entry."""
    if config is None:
        return None
    return {
        "name": RBAC_DUBBO_FILTER_NAME,
        "config": {
            "@type": _RBAC_TYPE_URL,
            "rules": config,
            "stat_prefix": RBAC_DUBBO_FILTER_STAT_PREFIX,
        },
    }