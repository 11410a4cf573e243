import json
import logging
from uuid import UUID

from fastapi.testclient import TestClient

from projectworks.main import app
from projectworks.observability import JsonFormatter, sanitize_for_logging


def test_request_id_header_is_generated_when_missing() -> None:
    with TestClient(app) as client:
        response = client.get("/health")
    assert response.status_code == 200
    request_id = response.headers.get("X-Request-ID")
    assert request_id is not None
    UUID(request_id)


def test_request_id_header_is_preserved_when_provided() -> None:
    with TestClient(app) as client:
        response = client.get("/health", headers={"X-Request-ID": "plan-request-123"})
    assert response.status_code == 200
    assert response.headers.get("X-Request-ID") == "plan-request-123"


def test_request_started_log_redacts_sensitive_query_values(caplog) -> None:
    with TestClient(app) as client:
        with caplog.at_level(logging.INFO, logger="projectworks.api"):
            response = client.get("/health?token=supersecret&email=user@example.org&q=public")
    assert response.status_code == 200

    request_started_logs = [
        record for record in caplog.records if getattr(record, "event", None) == "request_started"
    ]
    assert request_started_logs
    query = request_started_logs[-1].query
    assert query["token"] == "[REDACTED]"
    assert query["email"] == "[REDACTED]"
    assert query["q"] == "public"


def test_sanitize_for_logging_hides_customer_content_and_credentials() -> None:
    payload = {
        "prompt": "Confidential tender for the harbour works",
        "plan": {"background": "secret project"},
        "notes": "Contact site.manager@example.org, Bearer abc123 and eyJhbGciOi.eyJzdWIiOi.c2lnbmF0dXJl",
        "client_secret": "plain-value",
        "attempts": 2,
    }

    sanitized = sanitize_for_logging(payload, max_string_length=2000)
    assert sanitized["prompt"] == "[41 chars]"
    assert sanitized["plan"].startswith("[")
    assert sanitized["client_secret"] == "[REDACTED]"
    assert sanitized["attempts"] == 2
    notes = sanitized["notes"]
    assert "site.manager@example.org" not in notes
    assert "abc123" not in notes
    assert "eyJhbGciOi" not in notes


def test_sanitize_for_logging_truncates_long_strings() -> None:
    assert sanitize_for_logging("x" * 50, max_string_length=10) == "xxxxxxxxxx...[truncated]"
    assert sanitize_for_logging(b"abc") == "[3 bytes]"


def test_json_formatter_emits_structured_record() -> None:
    record = logging.LogRecord("projectworks.parser", logging.WARNING, __file__, 1, "plan_parse_salvaged", None, None)
    record.event = "plan_parse_salvaged"
    record.input_chars = 120
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "plan_parse_salvaged"
    assert payload["level"] == "WARNING"
    assert payload["event"] == "plan_parse_salvaged"
    assert payload["input_chars"] == 120
    assert payload["request_id"] == "-"


def test_sanitize_for_logging_redacts_header_style_keys() -> None:
    headers = {"Set-Cookie": "session=abc", "X-Api-Key": "k", "Authorization": "Bearer t", "Accept": "*/*"}
    sanitized = sanitize_for_logging(headers)
    assert sanitized["Set-Cookie"] == "[REDACTED]"
    assert sanitized["X-Api-Key"] == "[REDACTED]"
    assert sanitized["Authorization"] == "[REDACTED]"
    assert sanitized["Accept"] == "*/*"
