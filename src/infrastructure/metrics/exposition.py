"""
メトリクスをスクレイプ用に公開するバックグラウンド HTTP サーバ。
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Any, Callable, Iterable
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

DEFAULT_PATH = "/metrics"

LOGGER = logging.getLogger("skydns_metrics.exposition")

_WsgiApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


class _LoggingRequestHandler(WSGIRequestHandler):
    """アクセスログを stderr ではなく logging へ流すハンドラ。"""

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        LOGGER.debug("%s - %s", self.address_string(), format % args)


def _server_class_for(host: str, port: int) -> type[ThreadingWSGIServer]:
    infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    family = infos[0][0]

    class _Server(ThreadingWSGIServer):
        address_family = family

    return _Server


def _path_filtered_app(registry: CollectorRegistry, path: str) -> _WsgiApp:
    metrics_app = make_wsgi_app(registry)

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("PATH_INFO", "") != path:
            start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
            return [b"Not Found\n"]
        return metrics_app(environ, start_response)

    return app


class ExpositionServer:
    """
    レジストリの現在値を Prometheus テキスト形式で返す HTTP リスナ。

    待ち受けは専用のデーモンスレッドで行い、DNS のリクエスト処理経路を
    ブロックしない。bind 失敗などのリスナ障害は例外として送出せず、
    ログに記録したうえで ``error`` に保持する。
    """

    def __init__(
        self,
        registry: CollectorRegistry,
        *,
        port: int,
        host: str = "0.0.0.0",
        path: str = DEFAULT_PATH,
    ) -> None:
        self._registry = registry
        self._host = host
        self._port = port
        self._path = path
        self._ready = threading.Event()
        self._server: ThreadingWSGIServer | None = None
        self._thread: threading.Thread | None = None
        self.error: OSError | UnicodeError | None = None

    @property
    def path(self) -> str:
        return self._path

    @property
    def server_port(self) -> int | None:
        """実際に bind したポート番号。待ち受け前または失敗時は None。"""

        if self._server is None:
            return None
        return int(self._server.server_address[1])

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and self._server is not None

    def start(self) -> None:
        """
        バックグラウンドスレッドで待ち受けを開始する。
        """

        if self._thread is not None:
            raise RuntimeError("ExpositionServer は既に起動されています。")
        self._thread = threading.Thread(
            target=self._serve,
            name="skydns-metrics-exposition",
            daemon=True,
        )
        self._thread.start()

    def wait_until_ready(self, timeout: float | None = None) -> bool:
        """
        待ち受け開始まで待機する。

        Returns:
            bool: 待ち受け中であれば True。bind 失敗またはタイムアウト時は False。
        """

        if not self._ready.wait(timeout):
            return False
        return self.error is None

    def shutdown(self, timeout: float | None = 5.0) -> None:
        """
        待ち受けを停止し、スレッドの終了を待つ。処理中のリクエストの drain は行わない。
        """

        if self._thread is None:
            return
        self._ready.wait(timeout)
        server = self._server
        if server is not None:
            server.shutdown()
        self._thread.join(timeout)
        LOGGER.info("Metrics exposition stopped")

    def _serve(self) -> None:
        try:
            server = make_server(
                self._host,
                self._port,
                _path_filtered_app(self._registry, self._path),
                server_class=_server_class_for(self._host, self._port),
                handler_class=_LoggingRequestHandler,
            )
        except (OSError, UnicodeError) as exc:
            self.error = exc
            LOGGER.error(
                "Failed to start metrics exposition on %s:%s: %s",
                self._host,
                self._port,
                exc,
            )
            self._ready.set()
            return

        self._server = server
        LOGGER.info(
            "Serving metrics on http://%s:%s%s",
            self._host,
            server.server_address[1],
            self._path,
        )
        self._ready.set()
        try:
            server.serve_forever()
        finally:
            server.server_close()


def start_metrics_http_server(
    registry: CollectorRegistry,
    *,
    host: str,
    port: int | None,
    path: str = DEFAULT_PATH,
) -> ExpositionServer | None:
    """
    `/metrics` エンドポイントを公開する HTTP サーバを起動する。
    port が None の場合はサーバを起動しない。
    """

    if port is None:
        LOGGER.info("Metrics exposition disabled (no port configured)")
        return None
    server = ExpositionServer(registry, port=port, host=host, path=path)
    server.start()
    return server
