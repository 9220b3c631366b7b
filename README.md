# meshfilter

Build pieces of Envoy proxy configuration for non-HTTP protocols in a service
mesh. Every builder returns plain Python dictionaries shaped like the Envoy v3
API, ready to place into a larger configuration or to serialise with `json`.
The package has no dependencies outside the standard library.

## Modules

- `meshfilter.matcher`: string, regex, header, path, metadata and CIDR
  matchers (`string_matcher`, `string_matcher_regex`,
  `string_matcher_with_prefix`, `header_matcher`, `path_matcher`,
  `metadata_string_matcher`, `metadata_list_matcher`, `cidr_range`).
- `meshfilter.rbac`: the `Action` enum (`ALLOW`, `DENY`, `LOG`) and RBAC
  permission and principal combinators (`permission_any`, `permission_and`,
  `permission_or`, `permission_not`, `permission_metadata`, `principal_any`,
  `principal_and`, `principal_or`, `principal_not`,
  `principal_authenticated`).
- `meshfilter.policy`: Dubbo authorization policy types (`PolicyAction`,
  `Source`, `Operation`, `RuleFrom`, `RuleTo`, `Rule`,
  `DubboAuthorizationPolicy`), loaded from a resource document with
  `DubboAuthorizationPolicy.from_dict`.
- `meshfilter.authz`: `Model`, which turns one policy rule into an Envoy RBAC
  policy with `Model.from_rule`, `migrate_trust_domain` and `generate`.
- `meshfilter.builder`: `Builder`, which sorts policies into allow and deny
  and builds the Dubbo RBAC filters (deny first, then allow);
  `build_rbac` and `create_dubbo_rbac_filter` are also available on their own.
- `meshfilter.redis_cluster`: helpers for Redis cluster configuration:
  `HostPort`, `Port`, `TcpKeepalive`, `to_lb_endpoints`,
  `default_circuit_breaker_thresholds`, `set_keep_alive_settings`,
  `get_or_create_istio_metadata`, `build_service_metadata`,
  `find_service_port`, `inline_string`,
  `translate_percent_to_fractional_percent`.
- `meshfilter.dubbo_route`: `StringMatch`, `HTTPMatchRequest`,
  `default_route`, `build_method_match`, `build_header_match`,
  `build_single_cluster`, `build_weighted_cluster`.
- `meshfilter.thrift_route`: `default_route`, `build_single_cluster`,
  `build_weighted_cluster`, `build_route_config`.
- `meshfilter.metaprotocol_route`: `default_route`,
  `build_inbound_route_config`.

## Installing

```
pip install meshfilter
```

## Examples

Matchers:

```python
from meshfilter.matcher import string_matcher, header_matcher, cidr_range

string_matcher("/api/*")
# {'prefix': '/api/'}

string_matcher("*")
# {'safe_regex': {'google_re2': {}, 'regex': '.+'}}

header_matcher("x-user", "*")
# {'name': 'x-user', 'present_match': True}

cidr_range("192.168.0.0/16")
# {'address_prefix': '192.168.0.0', 'prefix_len': 16}

cidr_range("2001:db8::1")
# {'address_prefix': '2001:db8::1', 'prefix_len': 128}
```

`cidr_range` raises `ValueError` for a malformed address or range.

Authorization filters for Dubbo:

```python
from meshfilter.policy import DubboAuthorizationPolicy
from meshfilter.builder import Builder


class Bundle:
    def replace_trust_domain_aliases(self, values):
        return list(values)


policy = DubboAuthorizationPolicy.from_dict({
    "metadata": {"name": "allow-reads", "namespace": "shop"},
    "spec": {
        "action": "ALLOW",
        "rules": [{
            "from": [{"source": {"namespaces": ["frontend"]}}],
            "to": [{"operation": {"methods": ["get*"]}}],
        }],
    },
})

filters = Builder(Bundle(), [policy]).build_dubbo_filter()
# One filter named 'envoy.filters.dubbo.rbac' whose RBAC rules hold the
# policy 'ns[shop]-policy[allow-reads]-rule[0]'.
```

The trust-domain bundle is any object with a
`replace_trust_domain_aliases(values)` method that returns the list of
principals rewritten for the trust domain's aliases. Rules that cannot be
turned into a policy are logged through the `logging` module and skipped.

Routes:

```python
from meshfilter import dubbo_route, thrift_route
from meshfilter.dubbo_route import HTTPMatchRequest, StringMatch

thrift_route.default_route("outbound|9090||thrift-sample.default.svc.cluster.local")
# {'match': {'method_name': ''},
#  'route': {'cluster': 'outbound|9090||thrift-sample.default.svc.cluster.local'}}

dubbo_route.build_method_match([HTTPMatchRequest(method=StringMatch(exact="sayHello"))])
# {'name': {'exact': 'sayHello'}}

dubbo_route.build_weighted_cluster([("v1", 80), ("v2", 20)])
# {'weighted_clusters': {'clusters': [{'name': 'v1', 'weight': 80},
#                                     {'name': 'v2', 'weight': 20}],
#                        'total_weight': 100}}
```

`StringMatch` raises `ValueError` when more than one of `exact`, `prefix` and
`regex` is set, and the weighted-cluster builders raise `ValueError` for a
negative weight.

Redis clusters:

```python
from meshfilter.redis_cluster import HostPort, to_lb_endpoints

to_lb_endpoints(HostPort("redis.default.svc.cluster.local", 6379))
# [{'endpoint': {'address': {'socket_address':
#     {'address': 'redis.default.svc.cluster.local', 'port_value': 6379}}}}]
```

## What it does not do

This is a library of configuration builders only. It does not watch or read
Kubernetes or Istio resources, does not assemble or apply complete
`EnvoyFilter` resources, does not serve xDS, and has no command-line program.
Policies, service ports and cluster names are passed in by the caller.

## Running the tests

```
pip install -e ".[test]"
pytest
```