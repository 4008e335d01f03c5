from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry, Counter

from infrastructure.metrics.prometheus_runtime import PrometheusMetricsRegistry
from infrastructure.metrics.registry import MetricsRegistrationError


def test_metric_names_carry_namespace_and_subsystem() -> None:
    registry = CollectorRegistry()
    metrics_registry = PrometheusMetricsRegistry(registry=registry, namespace="edge", subsystem="resolver")

    counter = metrics_registry.counter("dns_request_count", "requests", labels=("system",))
    counter.inc(labels={"system": "auth"})

    assert metrics_registry.full_name("dns_request_count") == "edge_resolver_dns_request_count"
    assert registry.get_sample_value("edge_resolver_dns_request_count_total", labels={"system": "auth"}) == 1.0


def test_empty_namespace_is_omitted() -> None:
    metrics_registry = PrometheusMetricsRegistry(registry=CollectorRegistry())

    assert metrics_registry.full_name("dns_response_size") == "skydns_dns_response_size"


def test_duplicate_registration_through_same_registry_fails() -> None:
    metrics_registry = PrometheusMetricsRegistry(registry=CollectorRegistry())
    metrics_registry.counter("dns_cache_miss_count", "misses", labels=("cache",))

    with pytest.raises(MetricsRegistrationError):
        metrics_registry.counter("dns_cache_miss_count", "misses", labels=("cache",))


def test_conflict_with_existing_collector_is_reported() -> None:
    registry = CollectorRegistry()
    Counter("dns_error_count", "preexisting", namespace="", subsystem="skydns", registry=registry)
    metrics_registry = PrometheusMetricsRegistry(registry=registry)

    with pytest.raises(MetricsRegistrationError):
        metrics_registry.counter("dns_error_count", "errors", labels=("system", "cause"))


def test_histogram_bucket_override_takes_precedence() -> None:
    registry = CollectorRegistry()
    metrics_registry = PrometheusMetricsRegistry(
        registry=registry,
        histogram_buckets={"dns_request_duration": [0.5, 1.0]},
    )

    histogram = metrics_registry.histogram(
        "dns_request_duration",
        "duration",
        labels=("system",),
        buckets=(0.001, 0.003),
    )
    histogram.observe(0.7, labels={"system": "stub"})

    bucket = registry.get_sample_value(
        "skydns_dns_request_duration_bucket",
        labels={"system": "stub", "le": "1.0"},
    )
    assert bucket == 1.0
    assert (
        registry.get_sample_value(
            "skydns_dns_request_duration_bucket",
            labels={"system": "stub", "le": "0.003"},
        )
        is None
    )
