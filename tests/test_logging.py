from __future__ import annotations

import json
import logging

from storefront.shared.logging import JsonLogFormatter


def test_json_formatter_includes_request_fields():
    record = logging.LogRecord(
        name="storefront.main",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="request_completed",
        args=(),
        exc_info=None,
    )
    record.path = "/auth/login"
    record.method = "POST"
    record.status_code = 200
    record.identity_id = None

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["message"] == "request_completed"
    assert payload["level"] == "INFO"
    assert payload["path"] == "/auth/login"
    assert payload["status_code"] == 200
    assert "identity_id" not in payload
