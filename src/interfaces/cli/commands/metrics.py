"""
メトリクス公開用 CLI コマンド。
"""

from __future__ import annotations

import json
import time

import typer
from prometheus_client import CollectorRegistry, generate_latest

from bootstrap import BootstrapError, EnvironmentConfigLoader, create_bootstrap_container
from infrastructure.metrics import DnsMetricsRecorder, MetricsRegistrationError, PrometheusMetricsRegistry

app = typer.Typer(help="メトリクス公開コマンド")


@app.command("serve")
def serve(
    ready_timeout: float = typer.Option(5.0, help="待ち受け開始を待つ秒数"),
    poll_interval: float = typer.Option(1.0, help="停止確認の間隔（秒）"),
) -> None:
    """
    環境変数から設定を読み込み、公開サーバを起動して停止まで待機する。
    """

    try:
        context = create_bootstrap_container().initialize()
    except BootstrapError as exc:
        typer.echo(f"設定エラー: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except MetricsRegistrationError as exc:
        typer.echo(f"メトリクス登録エラー: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    exposition = context.metrics.exposition
    if exposition is None:
        typer.echo("PROMETHEUS_PORT が未設定のため公開サーバは起動しません。", err=True)
        raise typer.Exit(code=1)

    if not exposition.wait_until_ready(ready_timeout):
        typer.echo(f"公開サーバの起動に失敗しました: {exposition.error}", err=True)
        context.shutdown()
        raise typer.Exit(code=1)

    typer.echo(f"Serving metrics on port {exposition.server_port} at {exposition.path}")
    try:
        while exposition.running:
            time.sleep(poll_interval)
    except KeyboardInterrupt:
        typer.echo("Interrupted.")
    finally:
        context.shutdown()


@app.command("dump")
def dump() -> None:
    """
    専用レジストリにメトリクスを登録し、公開形式のテキストを出力する。
    """

    try:
        settings = EnvironmentConfigLoader().load_metrics()
    except BootstrapError as exc:
        typer.echo(f"設定エラー: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    registry = CollectorRegistry()
    DnsMetricsRecorder.initialize(
        PrometheusMetricsRegistry(
            registry=registry,
            namespace=settings.namespace,
            subsystem=settings.subsystem,
        )
    )
    typer.echo(generate_latest(registry).decode("utf-8"), nl=False)


@app.command("config")
def show_config() -> None:
    """解決済みの設定を JSON で出力する。"""

    try:
        bundle = EnvironmentConfigLoader().load()
    except BootstrapError as exc:
        typer.echo(f"設定エラー: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    typer.echo(json.dumps(bundle.to_dict(), ensure_ascii=False, indent=2))
