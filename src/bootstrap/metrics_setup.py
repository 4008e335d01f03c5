"""
メトリクス初期化ロジック。
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping

from prometheus_client import REGISTRY, CollectorRegistry

from infrastructure.metrics import (
    DnsMetricsRecorder,
    ExpositionServer,
    PrometheusMetricsRegistry,
    start_metrics_http_server,
)

from .config_loader import EnvironmentConfigLoader, MetricsSettings
from .container import BootstrapContainer, LoggingConfigurator, MetricsConfigurator
from .logging_setup import DictConfigLoggingConfigurator


@dataclass
class MetricsRuntime:
    """初期化済みのメトリクス一式。"""

    settings: MetricsSettings
    registry: CollectorRegistry
    metrics_registry: PrometheusMetricsRegistry
    recorder: DnsMetricsRecorder
    exposition: ExpositionServer | None = None

    def shutdown(self, timeout: float | None = 5.0) -> None:
        if self.exposition is not None:
            self.exposition.shutdown(timeout)


class PrometheusMetricsConfigurator(MetricsConfigurator):
    """
    メトリクスを CollectorRegistry に登録し、port 設定時のみ公開サーバを起動する。

    registry を省略した場合は prometheus-client のグローバルレジストリを利用する。
    同一レジストリに対して configure を 2 回呼び出すと MetricsRegistrationError となる。
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._registry = registry if registry is not None else REGISTRY
        self._clock = clock

    def configure(self, settings: MetricsSettings) -> MetricsRuntime:
        metrics_registry = PrometheusMetricsRegistry(
            registry=self._registry,
            namespace=settings.namespace,
            subsystem=settings.subsystem,
        )
        recorder = DnsMetricsRecorder.initialize(metrics_registry, clock=self._clock)
        exposition = start_metrics_http_server(
            self._registry,
            host=settings.host,
            port=settings.port,
            path=settings.path,
        )
        return MetricsRuntime(
            settings=settings,
            registry=self._registry,
            metrics_registry=metrics_registry,
            recorder=recorder,
            exposition=exposition,
        )


def create_bootstrap_container(
    environ: Mapping[str, str] | None = None,
    *,
    registry: CollectorRegistry | None = None,
    logging_configurator: LoggingConfigurator | None = None,
) -> BootstrapContainer:
    """
    環境変数ベースの標準構成で BootstrapContainer を生成する。
    """

    return BootstrapContainer(
        environ=environ if environ is not None else os.environ,
        config_loader_factory=EnvironmentConfigLoader,
        logging_configurator=logging_configurator or DictConfigLoggingConfigurator(),
        metrics_configurator=PrometheusMetricsConfigurator(registry),
    )
