"""Tests for config loading, the CLI and the HTTP sidecar handlers."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import http.client
import json
import threading
from http.server import HTTPServer

import pytest

from pii_watcher import Category, Detector, UnknownCategory
from pii_watcher.cli import main
from pii_watcher.config import create_detector, load_config, load_from_yaml
from pii_watcher import server


DOC = "Contact: alice.j@example.com or 555-123-4567. SSN: 123-45-6789."


# ── Config ───────────────────────────────────────────────────────────

def test_load_config_defaults():
    cfg = load_config({})
    assert cfg == {
        "skip_categories": set(),
        "allow_list": set(),
        "validate_card_checksum": False,
        "resolve_overlaps": False,
        "max_chars": None,
        "max_workers": 1,
    }


def test_load_config_nested():
    cfg = load_config({"pii_watcher": {
        "skip_categories": ["email", "name"],
        "allow_list": ["help@example.com"],
        "max_chars": "500",
    }})
    assert cfg["skip_categories"] == {Category.EMAIL, Category.NAME}
    assert cfg["allow_list"] == {"help@example.com"}
    assert cfg["max_chars"] == 500


def test_load_config_rejects_unknown_category():
    with pytest.raises(UnknownCategory):
        load_config({"skip_categories": ["passport"]})


def test_load_from_yaml(tmp_path):
    path = tmp_path / "watcher.yaml"
    path.write_text(
        "pii_watcher:\n"
        "  skip_categories:\n"
        "    - phone\n"
        "  validate_card_checksum: true\n"
    )
    cfg = load_from_yaml(path)
    assert cfg["skip_categories"] == {Category.PHONE}
    assert cfg["validate_card_checksum"] is True


def test_create_detector():
    detector = create_detector({"skip_categories": ["ssn"]})
    counts = detector.summarize(DOC)
    assert counts[Category.SSN] == 0
    assert counts[Category.EMAIL] == 1
    # Already-normalized configs are accepted too
    again = create_detector(load_config({"skip_categories": ["ssn"]}))
    assert again.config.skip_categories == {Category.SSN}


# ── CLI ──────────────────────────────────────────────────────────────

@pytest.fixture
def doc_file(tmp_path):
    path = tmp_path / "doc.txt"
    path.write_text(DOC, encoding="utf-8")
    return str(path)


def test_cli_summary(doc_file, capsys):
    assert main(["--file", doc_file, "summary"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["counts"]["email"] == 1
    assert out["counts"]["phone"] == 1
    assert out["counts"]["ssn"] == 1
    assert out["total"] == 3


def test_cli_detect_single_category(doc_file, capsys):
    assert main(["--file", doc_file, "detect", "--category", "email"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"email": [
        {"category": "email", "start": 9, "end": 28, "value": "alice.j@example.com"},
    ]}


def test_cli_anonymize(doc_file, capsys):
    assert main(["--file", doc_file, "--skip-categories", "phone", "anonymize"]) == 0
    assert capsys.readouterr().out == (
        "Contact: [EMAIL ADDRESSES] or 555-123-4567. SSN: [SOCIAL SECURITY NUMBERS]."
    )


def test_cli_reads_stdin(monkeypatch, capsys):
    import io
    monkeypatch.setattr(sys, "stdin", io.StringIO("a@example.com a@example.com"))
    assert main(["unique"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["email"] == ["a@example.com"]
    assert out["name"] == []


def test_cli_unknown_category(doc_file, capsys):
    assert main(["--file", doc_file, "detect", "--category", "passport"]) == 2
    assert "unknown PII category" in capsys.readouterr().err


def test_cli_max_chars(doc_file, capsys):
    assert main(["--file", doc_file, "--max-chars", "10", "summary"]) == 2
    assert "limit is 10" in capsys.readouterr().err


def test_cli_allow_list_values_are_stripped(tmp_path, capsys):
    path = tmp_path / "mail.txt"
    path.write_text("Mail a@example.com or b@example.com", encoding="utf-8")
    assert main(["--file", str(path), "--allow-list", "a@example.com, b@example.com",
                 "anonymize"]) == 0
    assert capsys.readouterr().out == "Mail a@example.com or b@example.com"


# ── Server ───────────────────────────────────────────────────────────

@pytest.fixture
def fresh_detector():
    server.set_detector(Detector())
    yield
    server.set_detector(None)


def test_server_summary(fresh_detector):
    status, payload = server.handle_post("/summary", {"text": DOC})
    assert status == 200
    assert payload["total"] == 3


def test_server_detect_category(fresh_detector):
    status, payload = server.handle_post("/detect", {"text": DOC, "category": "ssn"})
    assert status == 200
    assert [m["value"] for m in payload["ssn"]] == ["123-45-6789"]


def test_server_anonymize(fresh_detector):
    status, payload = server.handle_post("/anonymize", {"text": "Call 555-123-4567"})
    assert status == 200
    assert payload == {"text": "Call [PHONE NUMBERS]", "redacted": 1, "dropped": []}


def test_server_errors(fresh_detector):
    assert server.handle_post("/detect", {"text": DOC, "category": "passport"})[0] == 400
    assert server.handle_post("/detect", {"text": 42})[0] == 400
    assert server.handle_post("/nope", {"text": DOC})[0] == 404


# ── Server over HTTP ─────────────────────────────────────────────────

@pytest.fixture
def sidecar(fresh_detector):
    httpd = HTTPServer(("127.0.0.1", 0), server.PIIHandler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd.server_address[1]
    httpd.shutdown()
    httpd.server_close()
    thread.join(timeout=5)


def _request(port, method, path, body=None):
    conn = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
    try:
        headers = {"Content-Type": "application/json"} if body is not None else {}
        conn.request(method, path, body=body, headers=headers)
        resp = conn.getresponse()
        return resp.status, json.loads(resp.read().decode("utf-8"))
    finally:
        conn.close()


def test_http_health(sidecar):
    assert _request(sidecar, "GET", "/health") == (200, {"status": "ok"})


def test_http_categories(sidecar):
    status, payload = _request(sidecar, "GET", "/categories")
    assert status == 200
    assert [c["category"] for c in payload["categories"]] == [c.value for c in Category]
    assert payload["categories"][0]["label"] == "Email Addresses"


def test_http_get_unknown_path(sidecar):
    assert _request(sidecar, "GET", "/nope") == (404, {"error": "not found"})


def test_http_anonymize(sidecar):
    body = json.dumps({"text": "Call 555\u00a0123\u00a04567"}).encode("utf-8")
    status, payload = _request(sidecar, "POST", "/anonymize", body)
    assert status == 200
    assert payload["text"] == "Call [PHONE NUMBERS]"


def test_http_invalid_json(sidecar):
    status, payload = _request(sidecar, "POST", "/summary", b"{not json")
    assert status == 400
    assert payload["error"].startswith("invalid JSON body")


def test_http_non_object_body(sidecar):
    status, payload = _request(sidecar, "POST", "/summary", b"[1, 2]")
    assert status == 400
    assert payload == {"error": "body must be a JSON object"}


def test_http_unexpected_error(sidecar, monkeypatch):
    def boom(path, body):
        raise RuntimeError("scanner exploded")
    monkeypatch.setattr(server, "handle_post", boom)
    status, payload = _request(sidecar, "POST", "/summary", b'{"text": "x"}')
    assert status == 500
    assert payload == {"error": "scanner exploded"}
