"""HTTP sidecar server for pii-watcher.

A small stdlib HTTP server on localhost, for callers that would rather
POST a document than embed the package.

Endpoints:
    GET  /health          — Health check
    GET  /categories      — Categories with labels
    POST /detect          — Matches per category (optional "category")
    POST /summary         — Counts per category
    POST /unique          — Distinct values per category
    POST /anonymize       — Redacted text

All endpoints expect/return JSON.
Body format: {"text": "...", "category": "phone"}
"""

from __future__ import annotations
import json
import logging
import os
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any

from .config import create_detector, load_from_yaml
from .redactor import Detector
from .types import PIIWatcherError

logger = logging.getLogger(__name__)

DEFAULT_PORT = int(os.environ.get("PII_WATCHER_PORT", "18792"))

# Shared state
_detector: Detector | None = None


def _get_detector() -> Detector:
    global _detector
    if _detector is None:
        _detector = create_detector()
    return _detector


def set_detector(detector: Detector | None) -> None:
    """Replace the detector used by request handlers (None = rebuild default)."""
    global _detector
    _detector = detector


def handle_post(path: str, body: dict[str, Any]) -> tuple[int, Any]:
    """Dispatch a POST body to the detector.  Returns (status, payload)."""
    detector = _get_detector()
    text = body.get("text", "")
    if not isinstance(text, str):
        return 400, {"error": "'text' must be a string"}

    try:
        if path == "/detect":
            category = body.get("category")
            if category:
                results = {detector.catalog.spec_for(category).category:
                           detector.detect(text, category)}
            else:
                results = detector.detect_all(text)
            return 200, {
                cat.value: [m.to_dict() for m in matches]
                for cat, matches in results.items()
            }

        elif path == "/summary":
            counts = detector.summarize(text)
            return 200, {
                "counts": {cat.value: n for cat, n in counts.items()},
                "total": sum(counts.values()),
            }

        elif path == "/unique":
            unique = detector.unique_values(text)
            return 200, {cat.value: values for cat, values in unique.items()}

        elif path == "/anonymize":
            result = detector.redact(text)
            return 200, {
                "text": result.text,
                "redacted": len(result.matches),
                "dropped": [m.to_dict() for m in result.dropped],
            }

        else:
            return 404, {"error": "not found"}

    except PIIWatcherError as e:
        return 400, {"error": str(e)}


class PIIHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the pii-watcher sidecar."""

    def _read_json(self) -> dict[str, Any]:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length).decode("utf-8")
        return json.loads(body) if body else {}

    def _respond(self, status: int, data: Any) -> None:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self) -> None:
        if self.path == "/health":
            self._respond(200, {"status": "ok"})
        elif self.path == "/categories":
            detector = _get_detector()
            self._respond(200, {
                "categories": [
                    {"category": cat.value, "label": detector.label_for(cat)}
                    for cat in detector.catalog.all_categories()
                ],
            })
        else:
            self._respond(404, {"error": "not found"})

    def do_POST(self) -> None:
        try:
            body = self._read_json()
        except (ValueError, UnicodeDecodeError) as e:
            self._respond(400, {"error": f"invalid JSON body: {e}"})
            return
        if not isinstance(body, dict):
            self._respond(400, {"error": "body must be a JSON object"})
            return

        try:
            status, payload = handle_post(self.path, body)
        except Exception as e:
            logger.exception("request to %s failed", self.path)
            status, payload = 500, {"error": str(e)}
        self._respond(status, payload)


def serve(port: int = DEFAULT_PORT, config_path: str = "") -> None:
    """Start the pii-watcher HTTP sidecar."""
    if config_path:
        set_detector(create_detector(load_from_yaml(config_path)))

    server = HTTPServer(("127.0.0.1", port), PIIHandler)
    logger.info("pii-watcher sidecar listening on http://127.0.0.1:%d", port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutting down")
        server.server_close()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="pii-watcher HTTP sidecar")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--config", default=os.environ.get("PII_WATCHER_CONFIG", ""))
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    serve(port=args.port, config_path=args.config)
