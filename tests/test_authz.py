from meshfilter.authz import RBAC_DUBBO_FILTER_NAME, Model
from meshfilter.matcher import (
    metadata_string_matcher,
    string_matcher,
    string_matcher_regex,
)
from meshfilter.policy import Operation, Rule, RuleFrom, RuleTo, Source
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


class _AliasBundle:
    def __init__(self, mapping):
        self.mapping = mapping

    def replace_trust_domain_aliases(self, values):
        return [self.mapping.get(v, v) for v in values]


def _interface(value):
    return permission_metadata(
        metadata_string_matcher(RBAC_DUBBO_FILTER_NAME, "service", string_matcher(value))
    )


def _method(value):
    return permission_metadata(
        metadata_string_matcher(RBAC_DUBBO_FILTER_NAME, "method", string_matcher(value))
    )


def test_empty_rule_matches_anything():
    policy = Model.from_rule(Rule()).generate(Action.ALLOW)
    assert policy == {
        "permissions": [permission_and([permission_any()])],
        "principals": [principal_and([principal_any()])],
    }


def test_operation_orders_method_before_interface():
    rule = Rule(to=(RuleTo(Operation(interfaces=("org.Demo",), methods=("sayHello",))),))
    policy = Model.from_rule(rule).generate(Action.ALLOW)
    assert policy["permissions"] == [
        permission_and(
            [
                permission_or([_method("sayHello")]),
                permission_or([_interface("org.Demo")]),
            ]
        )
    ]


def test_not_values_are_negated():
    rule = Rule(to=(RuleTo(Operation(not_methods=("a", "b"))),))
    policy = Model.from_rule(rule).generate(Action.DENY)
    assert policy["permissions"] == [
        permission_and([permission_not(permission_or([_method("a"), _method("b")]))])
    ]


def test_source_namespace_uses_regex():
    rule = Rule(from_=(RuleFrom(Source(namespaces=("foo",))),))
    policy = Model.from_rule(rule).generate(Action.ALLOW)
    assert policy["principals"] == [
        principal_and(
            [principal_or([principal_authenticated(string_matcher_regex(".*/ns/foo/.*"))])]
        )
    ]


def test_source_principal_gets_spiffe_prefix():
    rule = Rule(from_=(RuleFrom(Source(not_principals=("cluster.local/ns/default/sa/x",))),))
    policy = Model.from_rule(rule).generate(Action.ALLOW)
    inner = policy["principals"][0]["and_ids"]["ids"][0]
    assert inner == principal_not(
        principal_or(
            [principal_authenticated({"exact": "spiffe://cluster.local/ns/default/sa/x"})]
        )
    )


def test_each_from_and_to_yields_one_entry():
    rule = Rule(
        from_=(RuleFrom(), RuleFrom(Source(namespaces=("a",)))),
        to=(RuleTo(), RuleTo(), RuleTo(Operation(methods=("m",)))),
    )
    policy = Model.from_rule(rule).generate(Action.ALLOW)
    assert len(policy["principals"]) == 2
    assert len(policy["permissions"]) == 3
    assert policy["permissions"][0] == permission_and([permission_any()])


def test_migrate_trust_domain_replaces_principals_only():
    rule = Rule(
        from_=(
            RuleFrom(
                Source(
                    namespaces=("old.domain",),
                    principals=("old.domain",),
                    not_principals=("old.domain",),
                )
            ),
        )
    )
    model = Model.from_rule(rule)
    model.migrate_trust_domain(_AliasBundle({"old.domain": "new.domain"}))
    ids = model.generate(Action.ALLOW)["principals"][0]["and_ids"]["ids"]
    assert ids[0] == principal_or([principal_authenticated({"exact": "spiffe://new.domain"})])
    assert ids[1] == principal_not(
        principal_or([principal_authenticated({"exact": "spiffe://new.domain"})])
    )
    assert ids[2] == principal_or(
        [principal_authenticated(string_matcher_regex(".*/ns/old.domain/.*"))]
    )