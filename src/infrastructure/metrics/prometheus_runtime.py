"""
Prometheus 実装に依存した MetricsRegistry。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence, cast

from prometheus_client import (
    CollectorRegistry,
    Counter as PrometheusCounter,
    Histogram as PrometheusHistogram,
)

from .registry import Counter, Histogram, MetricsRegistrationError, MetricsRegistry

DEFAULT_SUBSYSTEM = "skydns"


class _CounterAdapter(Counter):
    def __init__(self, metric: PrometheusCounter) -> None:
        self._metric = metric

    def inc(self, value: float = 1.0, labels: Mapping[str, str] | None = None) -> None:
        if labels:
            self._metric.labels(**labels).inc(value)
        else:
            self._metric.inc(value)


class _HistogramAdapter(Histogram):
    def __init__(self, metric: PrometheusHistogram) -> None:
        self._metric = metric

    def observe(self, value: float, labels: Mapping[str, str] | None = None) -> None:
        if labels:
            self._metric.labels(**labels).observe(value)
        else:
            self._metric.observe(value)


def _normalize_label_names(labels: Sequence[str] | None) -> tuple[str, ...]:
    if not labels:
        return ()
    return tuple(sorted(labels))


@dataclass
class PrometheusMetricsRegistry(MetricsRegistry):
    """
    prometheus-client を利用する MetricsRegistry 実装。

    namespace / subsystem は登録する全メトリクス名の接頭辞として付与される。
    同名メトリクスの二重登録は MetricsRegistrationError となる。
    """

    registry: CollectorRegistry
    namespace: str = ""
    subsystem: str = DEFAULT_SUBSYSTEM
    histogram_buckets: Mapping[str, Sequence[float]] | None = None

    _counters: dict[str, PrometheusCounter] = field(default_factory=dict, init=False)
    _histograms: dict[str, PrometheusHistogram] = field(default_factory=dict, init=False)

    def counter(self, name: str, documentation: str, labels: tuple[str, ...] | None = None) -> Counter:
        self._ensure_unregistered(name)
        label_names = _normalize_label_names(labels)
        try:
            metric = PrometheusCounter(
                name,
                documentation,
                labelnames=label_names,
                namespace=self.namespace,
                subsystem=self.subsystem,
                registry=self.registry,
            )
        except ValueError as exc:
            raise MetricsRegistrationError(f"メトリクス '{name}' の登録に失敗しました: {exc}") from exc
        self._counters[name] = metric
        return _CounterAdapter(metric)

    def histogram(
        self,
        name: str,
        documentation: str,
        labels: tuple[str, ...] | None = None,
        buckets: Sequence[float] | None = None,
    ) -> Histogram:
        self._ensure_unregistered(name)
        label_names = _normalize_label_names(labels)
        bucket_values = self._resolve_buckets(name, buckets)
        try:
            if bucket_values is not None:
                metric = PrometheusHistogram(
                    name,
                    documentation,
                    labelnames=label_names,
                    namespace=self.namespace,
                    subsystem=self.subsystem,
                    buckets=cast("Sequence[float | str]", bucket_values),
                    registry=self.registry,
                )
            else:
                metric = PrometheusHistogram(
                    name,
                    documentation,
                    labelnames=label_names,
                    namespace=self.namespace,
                    subsystem=self.subsystem,
                    registry=self.registry,
                )
        except ValueError as exc:
            raise MetricsRegistrationError(f"メトリクス '{name}' の登録に失敗しました: {exc}") from exc
        self._histograms[name] = metric
        return _HistogramAdapter(metric)

    def full_name(self, name: str) -> str:
        """namespace / subsystem を付与した公開名を返す。"""

        return "_".join(part for part in (self.namespace, self.subsystem, name) if part)

    def _ensure_unregistered(self, name: str) -> None:
        if name in self._counters or name in self._histograms:
            raise MetricsRegistrationError(f"メトリクス '{self.full_name(name)}' は既に登録されています。")

    def _resolve_buckets(self, name: str, buckets: Sequence[float] | None) -> tuple[float, ...] | None:
        if self.histogram_buckets:
            raw = self.histogram_buckets.get(name)
            if raw:
                return tuple(float(boundary) for boundary in raw)
        if buckets:
            return tuple(float(boundary) for boundary in buckets)
        return None
