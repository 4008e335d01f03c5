"""
DNS リクエスト処理のメトリクス記録ユーティリティ。
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from prometheus_client import Histogram as PrometheusHistogram

from domain import CacheType, Cause, DnsResponse, System, cause_from_rcode, label_value

from .registry import Counter, Histogram, MetricsRegistry

LOGGER = logging.getLogger("skydns_metrics.recorder")

REQUEST_DURATION_BUCKETS: tuple[float, ...] = (0.001, 0.003) + tuple(PrometheusHistogram.DEFAULT_BUCKETS)

# 4096 以降は 4KiB 刻み。TCP / EDNS の大きな応答まで含める。
RESPONSE_SIZE_BUCKETS: tuple[float, ...] = (
    0,
    512,
    1024,
    1500,
    2048,
    4096,
    8192,
    12288,
    16384,
    20480,
    24576,
    28672,
    32768,
    36864,
    40960,
    45056,
    49152,
    53248,
    57344,
    61440,
    65536,
)


@dataclass
class _MetricHandles:
    request_count: Counter
    request_duration: Histogram
    response_size: Histogram
    error_count: Counter
    cache_miss_count: Counter


class DnsMetricsRecorder:
    """
    解決エンジンから呼び出されるメトリクス記録 API。

    全ての操作はスレッドセーフで、リクエスト処理中の複数スレッドから
    外部ロックなしに呼び出せる。ラベル単位の更新の原子性は
    prometheus-client 側の内部ロックで保証される。
    語彙外のラベル文字列も例外にせずそのまま記録する。
    """

    def __init__(self, handles: _MetricHandles, *, clock: Callable[[], float] | None = None) -> None:
        self._handles = handles
        self._clock = clock or time.time

    @classmethod
    def initialize(
        cls,
        registry: MetricsRegistry,
        *,
        clock: Callable[[], float] | None = None,
    ) -> "DnsMetricsRecorder":
        """
        5 種類のメトリクスを登録し、記録用インスタンスを返す。

        同一レジストリに対して 2 回呼び出すと重複登録となるため、
        プロセスにつき 1 回だけ呼び出すこと。

        Raises:
            MetricsRegistrationError: 同名メトリクスが既に登録されている場合。
        """

        handles = _MetricHandles(
            request_count=registry.counter(
                "dns_request_count",
                "Counter of DNS requests made.",
                labels=("system",),
            ),
            request_duration=registry.histogram(
                "dns_request_duration",
                "Histogram of the time (in seconds) each request took to resolve.",
                labels=("system",),
                buckets=REQUEST_DURATION_BUCKETS,
            ),
            response_size=registry.histogram(
                "dns_response_size",
                "Size of the returned response in bytes.",
                labels=("system",),
                buckets=RESPONSE_SIZE_BUCKETS,
            ),
            error_count=registry.counter(
                "dns_error_count",
                "Counter of DNS requests resulting in an error.",
                labels=("system", "cause"),
            ),
            cache_miss_count=registry.counter(
                "dns_cache_miss_count",
                "Counter of DNS requests that result in a cache miss.",
                labels=("cache",),
            ),
        )
        return cls(handles, clock=clock)

    def now(self) -> float:
        """record_completion に渡す開始時刻（既定では UNIX 時刻の秒）を返す。"""

        return self._clock()

    def record_request_start(self, system: System | str) -> None:
        labels = {"system": label_value(System, system)}
        self._handles.request_count.inc(1.0, labels=labels)

    def record_completion(self, response: DnsResponse | None, start_time: float, system: System | str) -> None:
        """
        start_time からの経過時間と応答サイズを観測する。応答が無い場合のサイズは 0。

        start_time は recorder の clock と同じ基準の値であること（既定の clock は
        ``time.time`` のため、通常の UNIX 時刻をそのまま渡せる）。経過時間が負になる場合は
        基準の異なる値が渡されたとみなし、WARNING を記録したうえで 0 として観測する。
        """

        labels = {"system": label_value(System, system)}
        elapsed = self._clock() - start_time
        if elapsed < 0:
            LOGGER.warning(
                "Negative request duration %.6fs for system '%s'; start_time is ahead of the recorder clock",
                elapsed,
                labels["system"],
            )
            elapsed = 0.0
        size = len(response.to_wire()) if response is not None else 0
        self._handles.request_duration.observe(elapsed, labels=labels)
        self._handles.response_size.observe(float(size), labels=labels)

    def record_error(self, response: DnsResponse | None, system: System | str) -> None:
        """
        応答コードから Cause を判定し error_count を加算する。
        応答が無い場合、または分類対象外の rcode の場合は何もしない。
        """

        if response is None:
            return
        cause = cause_from_rcode(response.rcode())
        if cause is None:
            return
        self._increment_error(label_value(System, system), cause)

    def record_cache_miss(self, cache_type: CacheType | str) -> None:
        labels = {"cache": label_value(CacheType, cache_type)}
        self._handles.cache_miss_count.inc(1.0, labels=labels)

    def _increment_error(self, system: str, cause: Cause) -> None:
        labels = {"system": system, "cause": cause.value}
        self._handles.error_count.inc(1.0, labels=labels)
