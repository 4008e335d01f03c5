"""
インフラ層のパッケージ初期化。
"""

from .metrics import (
    DnsMetricsRecorder,
    ExpositionServer,
    MetricsRegistrationError,
    PrometheusMetricsRegistry,
    start_metrics_http_server,
)

__all__ = [
    "DnsMetricsRecorder",
    "ExpositionServer",
    "MetricsRegistrationError",
    "PrometheusMetricsRegistry",
    "start_metrics_http_server",
]
