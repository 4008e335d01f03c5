"""
メトリクス関連の公開API。
"""

from .exposition import DEFAULT_PATH, ExpositionServer, start_metrics_http_server
from .prometheus_runtime import DEFAULT_SUBSYSTEM, PrometheusMetricsRegistry
from .recorder import (
    REQUEST_DURATION_BUCKETS,
    RESPONSE_SIZE_BUCKETS,
    DnsMetricsRecorder,
)
from .registry import Counter, Histogram, MetricsRegistrationError, MetricsRegistry

__all__ = [
    "Counter",
    "DEFAULT_PATH",
    "DEFAULT_SUBSYSTEM",
    "DnsMetricsRecorder",
    "ExpositionServer",
    "Histogram",
    "MetricsRegistrationError",
    "MetricsRegistry",
    "PrometheusMetricsRegistry",
    "REQUEST_DURATION_BUCKETS",
    "RESPONSE_SIZE_BUCKETS",
    "start_metrics_http_server",
]
