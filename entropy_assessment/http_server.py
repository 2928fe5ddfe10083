"""HTTP assessment service.

Endpoints:

    POST /api/v1/assess?mode=iid|non-iid&bits=N&conditioned=0|1   (raw sample as body)
    GET  /health
    GET  /metrics                                                 (Prometheus text format)

Every response carries an ``X-Request-ID`` header.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlparse

from entropy_assessment import __version__
from entropy_assessment.assess import assess
from entropy_assessment.errors import ERROR_KINDS
from entropy_assessment.metrics import CONTENT_TYPE, METRICS, AssessmentMetrics
from entropy_assessment.result import AssessmentMode

if TYPE_CHECKING:
    from entropy_assessment.config import Settings

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR_CODE = {1: 400, 2: 422, 3: 500, 4: 500, 5: 503}

_TRUE = {"1", "true", "yes", "on"}

_CHUNK = 64 * 1024


def _make_handler(settings: Settings, backend, metrics: AssessmentMetrics):
    """Create request handler bound to *settings* and *backend*."""

    class AssessmentHandler(BaseHTTPRequestHandler):
        _settings = settings
        _backend = backend
        _metrics = metrics
        timeout = settings.timeout

        def setup(self) -> None:
            super().setup()
            self.request_id = str(uuid.uuid4())

        def do_GET(self) -> None:
            path = urlparse(self.path).path.rstrip("/")
            if path == "/health":
                self._json_response(200, {"status": "healthy", "version": __version__})
            elif path == "/metrics" and self._settings.metrics_enabled:
                self._send(200, self._metrics.exposition(), CONTENT_TYPE)
            else:
                self._json_response(404, {"error": "not found"})

        def do_POST(self) -> None:
            parsed = urlparse(self.path)
            if parsed.path.rstrip("/") != "/api/v1/assess":
                self._json_response(404, {"error": "not found"})
                return
            self._handle_assess(parse_qs(parsed.query))

        def _discard_body(self, length: int) -> None:
            while length > 0:
                chunk = self.rfile.read(min(length, _CHUNK))
                if not chunk:
                    break
                length -= len(chunk)

        def _handle_assess(self, params: dict) -> None:
            try:
                length = int(self.headers.get("Content-Length", 0))
            except ValueError:
                self.close_connection = True
                self._json_response(400, {"error": "invalid Content-Length"})
                return

            # the body is always consumed before replying
            try:
                mode = AssessmentMode.parse(params.get("mode", ["non-iid"])[0])
                bits = int(params.get("bits", [0])[0])
            except ValueError as e:
                self._discard_body(length)
                self._json_response(400, {"error": str(e)})
                return
            initial_entropy = params.get("conditioned", ["0"])[0].lower() not in _TRUE

            if length > self._settings.max_upload_size:
                self._discard_body(length)
                self._metrics.record_error(mode, "oversize")
                self._json_response(400, {
                    "error": f"request body exceeds {self._settings.max_upload_size} bytes",
                })
                return
            data = self.rfile.read(length) if length > 0 else b""

            t0 = time.monotonic()
            self._metrics.record_request(mode, len(data))
            result = assess(
                data,
                word_size=bits,
                mode=mode,
                initial_entropy=initial_entropy,
                backend=self._backend,
                parallel=self._settings.parallel,
            )
            self._metrics.record_duration(mode, time.monotonic() - t0)

            body = result.to_dict()
            body["request_id"] = self.request_id
            if result.ok:
                self._metrics.record_min_entropy(mode, result.min_entropy)
                self._json_response(200, body)
            else:
                self._metrics.record_error(mode, ERROR_KINDS.get(result.error_code, "unknown"))
                self._json_response(_STATUS_BY_ERROR_CODE.get(result.error_code, 500), body)

        def _json_response(self, code: int, data: dict) -> None:
            self._send(code, json.dumps(data).encode(), "application/json")

        def _send(self, code: int, body: bytes, content_type: str) -> None:
            self.send_response(code)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.send_header("X-Request-ID", self.request_id)
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            logger.info("%s [%s] %s", self.address_string(), self.request_id, format % args)

    return AssessmentHandler


def make_server(settings: Settings, backend, metrics: AssessmentMetrics = METRICS) -> ThreadingHTTPServer:
    handler = _make_handler(settings, backend, metrics)
    return ThreadingHTTPServer((settings.server_host, settings.server_port), handler)


def run_server(settings: Settings, backend) -> None:
    """Run the assessment HTTP server until interrupted."""
    server = make_server(settings, backend)
    logger.info(
        "starting SP 800-90B assessment server version=%s addr=%s:%d max_upload_bytes=%d",
        __version__, settings.server_host, settings.server_port, settings.max_upload_size,
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutdown requested")
    finally:
        server.server_close()
        logger.info("server stopped")
