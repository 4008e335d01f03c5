from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from infrastructure.metrics import MetricsRegistrationError
from interfaces.cli.app import create_cli
from interfaces.cli.commands import metrics as metrics_commands

runner = CliRunner()


def test_dump_prints_prefixed_metric_families() -> None:
    app = create_cli()

    result = runner.invoke(app, ["metrics", "dump"], env={"PROMETHEUS_NAMESPACE": "edge"})

    assert result.exit_code == 0, result.output
    assert "# TYPE edge_skydns_dns_request_count_total counter" in result.output
    assert "# TYPE edge_skydns_dns_request_duration histogram" in result.output
    assert "# TYPE edge_skydns_dns_response_size histogram" in result.output
    assert "edge_skydns_dns_error_count" in result.output
    assert "edge_skydns_dns_cache_miss_count" in result.output


def test_config_prints_resolved_settings() -> None:
    app = create_cli()

    result = runner.invoke(
        app,
        ["metrics", "config"],
        env={"PROMETHEUS_PORT": "9153", "PROMETHEUS_PATH": "/scrape", "PROMETHEUS_SUBSYSTEM": ""},
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["metrics"]["port"] == 9153
    assert payload["metrics"]["path"] == "/scrape"
    assert payload["metrics"]["subsystem"] == "skydns"
    assert payload["logging"] == {}


def test_invalid_port_exits_with_configuration_error() -> None:
    app = create_cli()

    for command in ("serve", "dump", "config"):
        result = runner.invoke(app, ["metrics", command], env={"PROMETHEUS_PORT": "not-a-port"})
        assert result.exit_code == 2


class _ConflictingContainer:
    def initialize(self) -> None:
        raise MetricsRegistrationError("metric 'skydns_dns_request_count' is already registered")


def test_serve_reports_registration_conflict(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(metrics_commands, "create_bootstrap_container", lambda: _ConflictingContainer())
    app = create_cli()

    result = runner.invoke(app, ["metrics", "serve"], env={"PROMETHEUS_PORT": "0"})

    assert result.exit_code == 1
    assert not isinstance(result.exception, MetricsRegistrationError)
    assert "skydns_dns_request_count" in result.output
