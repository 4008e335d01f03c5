"""
Typer ベースの CLI。
"""

from __future__ import annotations

import typer

from .commands import metrics


def create_cli() -> typer.Typer:
    app = typer.Typer(help="skydns-metrics CLI")
    app.add_typer(metrics.app, name="metrics")
    return app


def main() -> None:
    create_cli()()
