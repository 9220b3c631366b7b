from datetime import timedelta

import pytest

from meshfilter.redis_cluster import (
    FRACTIONAL_PERCENT_DENOMINATOR,
    ISTIO_METADATA_KEY,
    MAX_UINT32,
    HostPort,
    Port,
    TcpKeepalive,
    build_service_metadata,
    default_circuit_breaker_thresholds,
    find_service_port,
    get_or_create_istio_metadata,
    inline_string,
    set_keep_alive_settings,
    to_lb_endpoints,
    translate_percent_to_fractional_percent,
)


def test_istio_metadata_created_on_empty_cluster():
    cluster = {"name": "c"}
    fields = get_or_create_istio_metadata(cluster)
    assert fields == {}
    assert cluster["metadata"]["filter_metadata"][ISTIO_METADATA_KEY] is fields


def test_istio_metadata_reused():
    cluster = {}
    first = get_or_create_istio_metadata(cluster)
    first["default_original_port"] = 6379
    second = get_or_create_istio_metadata(cluster)
    assert second is first
    assert second["default_original_port"] == 6379


def test_istio_metadata_keeps_other_filters():
    cluster = {"metadata": {"filter_metadata": {"other": {"a": 1}}}}
    get_or_create_istio_metadata(cluster)
    assert cluster["metadata"]["filter_metadata"]["other"] == {"a": 1}
    assert ISTIO_METADATA_KEY in cluster["metadata"]["filter_metadata"]


def test_build_service_metadata():
    meta = build_service_metadata("redis.default.svc.cluster.local", "redis", "default")
    assert meta == {
        "host": "redis.default.svc.cluster.local",
        "name": "redis",
        "namespace": "default",
    }


def test_find_service_port_without_service():
    assert find_service_port(None, 6379, "tcp-redis") == 6379


def test_find_service_port_single_port():
    assert find_service_port([Port(7000, "tcp-redis")], 6379, "other") == 7000


@pytest.mark.parametrize(
    "listen_port, name, expected",
    [
        (6380, "x", 6380),
        (9999, "tcp-redis-b", 6380),
        (9999, "nothing", 9999),
    ],
)
def test_find_service_port_multiple(listen_port, name, expected):
    ports = [Port(6379, "tcp-redis-a"), Port(6380, "tcp-redis-b")]
    assert find_service_port(ports, listen_port, name) == expected


def test_fractional_percent_full():
    result = translate_percent_to_fractional_percent(100.0)
    assert result == {"numerator": 1_000_000, "denominator": FRACTIONAL_PERCENT_DENOMINATOR}


def test_fractional_percent_is_monotonic():
    low = translate_percent_to_fractional_percent(10.0)["numerator"]
    high = translate_percent_to_fractional_percent(20.0)["numerator"]
    assert high == 2 * low
    assert translate_percent_to_fractional_percent(0.0)["numerator"] == 0


def test_inline_string():
    assert inline_string("secret") == {"inline_string": "secret"}
    assert inline_string("") is None


def test_to_lb_endpoints():
    endpoints = to_lb_endpoints(HostPort("10.0.0.1", 6379), HostPort("redis-1", 7000))
    assert len(endpoints) == 2
    assert endpoints[0]["endpoint"]["address"]["socket_address"] == {
        "address": "10.0.0.1",
        "port_value": 6379,
    }
    assert endpoints[1]["endpoint"]["address"]["socket_address"]["address"] == "redis-1"
    assert to_lb_endpoints() == []


def test_default_thresholds():
    thresholds = default_circuit_breaker_thresholds()
    assert set(thresholds) == {
        "max_retries",
        "max_requests",
        "max_connections",
        "max_pending_requests",
    }
    assert all(v == MAX_UINT32 for v in thresholds.values())
    assert MAX_UINT32 == 4294967295


def test_default_thresholds_are_copies():
    first = default_circuit_breaker_thresholds()
    first["max_connections"] = 10
    assert default_circuit_breaker_thresholds()["max_connections"] == MAX_UINT32


def test_set_keep_alive_all_fields():
    cluster = {}
    keepalive = TcpKeepalive(
        probes=3, time=timedelta(seconds=7200), interval=timedelta(seconds=75)
    )
    set_keep_alive_settings(cluster, keepalive)
    assert cluster["upstream_connection_options"]["tcp_keepalive"] == {
        "keepalive_probes": 3,
        "keepalive_time": 7200,
        "keepalive_interval": 75,
    }


def test_set_keep_alive_skips_unset_fields():
    cluster = {"upstream_connection_options": {"tcp_keepalive": {"keepalive_probes": 9}}}
    set_keep_alive_settings(cluster, TcpKeepalive(time=timedelta(seconds=30)))
    assert cluster["upstream_connection_options"]["tcp_keepalive"] == {
        "keepalive_probes": 9,
        "keepalive_time": 30,
    }