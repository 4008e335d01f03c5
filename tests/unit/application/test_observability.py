from __future__ import annotations

import dns.message
import dns.rcode
import pytest
from prometheus_client import CollectorRegistry

from application.observability import NoopDnsMetricsRecorder, track_request
from domain import System
from infrastructure.metrics import DnsMetricsRecorder, PrometheusMetricsRegistry


class RecordingRecorder(NoopDnsMetricsRecorder):
    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def now(self) -> float:
        return 42.0

    def record_request_start(self, system):  # type: ignore[override]
        self.calls.append(("start", system))

    def record_completion(self, response, start_time, system):  # type: ignore[override]
        self.calls.append(("completion", (response, start_time, system)))

    def record_error(self, response, system):  # type: ignore[override]
        self.calls.append(("error", (response, system)))


def _servfail() -> dns.message.Message:
    response = dns.message.make_response(dns.message.make_query("example.org.", "AAAA"))
    response.set_rcode(dns.rcode.SERVFAIL)
    return response


def test_track_request_records_each_phase_once() -> None:
    recorder = RecordingRecorder()
    response = _servfail()

    with track_request(recorder, System.RECURSIVE) as observation:
        observation.response = response

    assert recorder.calls == [
        ("start", System.RECURSIVE),
        ("completion", (response, 42.0, System.RECURSIVE)),
        ("error", (response, System.RECURSIVE)),
    ]


def test_track_request_records_completion_when_body_raises() -> None:
    recorder = RecordingRecorder()

    with pytest.raises(TimeoutError):
        with track_request(recorder, System.STUB):
            raise TimeoutError("upstream timed out")

    assert [name for name, _ in recorder.calls] == ["start", "completion", "error"]
    assert recorder.calls[1][1] == (None, 42.0, System.STUB)


def test_track_request_without_recorder_is_noop() -> None:
    with track_request(None, System.AUTH) as observation:
        observation.response = _servfail()

    assert observation.start_time == 0.0


def test_track_request_updates_prometheus_series() -> None:
    registry = CollectorRegistry()
    recorder = DnsMetricsRecorder.initialize(PrometheusMetricsRegistry(registry=registry))

    with track_request(recorder, System.REVERSE) as observation:
        observation.response = _servfail()

    assert registry.get_sample_value("skydns_dns_request_count_total", labels={"system": "reverse"}) == 1.0
    assert registry.get_sample_value("skydns_dns_request_duration_count", labels={"system": "reverse"}) == 1.0
    assert (
        registry.get_sample_value(
            "skydns_dns_error_count_total",
            labels={"system": "reverse", "cause": "servfail"},
        )
        == 1.0
    )
