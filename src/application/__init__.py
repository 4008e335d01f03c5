"""
アプリケーション層パッケージ初期化。
"""

from .observability import (
    DnsMetricsRecorderProtocol,
    NoopDnsMetricsRecorder,
    RequestObservation,
    track_request,
)

__all__ = [
    "DnsMetricsRecorderProtocol",
    "NoopDnsMetricsRecorder",
    "RequestObservation",
    "track_request",
]
