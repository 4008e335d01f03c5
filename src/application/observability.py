"""
解決エンジンから利用する観測性ユーティリティ。

解決エンジンは DnsMetricsRecorderProtocol にのみ依存し、
実際の記録実装はブートストラップ時に注入される。
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol

from domain import CacheType, DnsResponse, System


class DnsMetricsRecorderProtocol(Protocol):
    def now(self) -> float: ...

    def record_request_start(self, system: System | str) -> None: ...

    def record_completion(self, response: DnsResponse | None, start_time: float, system: System | str) -> None: ...

    def record_error(self, response: DnsResponse | None, system: System | str) -> None: ...

    def record_cache_miss(self, cache_type: CacheType | str) -> None: ...


class NoopDnsMetricsRecorder(DnsMetricsRecorderProtocol):
    def now(self) -> float:  # noqa: D401
        return 0.0

    def record_request_start(self, system: System | str) -> None:
        pass

    def record_completion(self, response: DnsResponse | None, start_time: float, system: System | str) -> None:
        pass

    def record_error(self, response: DnsResponse | None, system: System | str) -> None:
        pass

    def record_cache_miss(self, cache_type: CacheType | str) -> None:
        pass


@dataclass
class RequestObservation:
    """track_request 内で呼び出し側が応答を設定するためのハンドル。"""

    system: System | str
    start_time: float
    response: DnsResponse | None = None


@contextmanager
def track_request(
    recorder: DnsMetricsRecorderProtocol | None,
    system: System | str,
) -> Iterator[RequestObservation]:
    """
    リクエスト開始時に件数を記録し、終了時に所要時間・応答サイズ・エラーを 1 回だけ記録する。

    ブロック内で例外が送出された場合も、その時点で設定されている応答で記録したうえで再送出する。
    recorder が None の場合は何も記録しない。
    """

    active = recorder if recorder is not None else NoopDnsMetricsRecorder()
    active.record_request_start(system)
    observation = RequestObservation(system=system, start_time=active.now())
    try:
        yield observation
    finally:
        active.record_completion(observation.response, observation.start_time, system)
        active.record_error(observation.response, system)
