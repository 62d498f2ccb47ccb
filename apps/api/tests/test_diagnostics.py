import logging

from services.diagnostics import DiagnosticsBuffer, new_request_id, request_id_var


def _logger(buffer, name="services.test_diagnostics"):
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.addHandler(buffer)
    return logger


def test_buffer_keeps_only_most_recent_records():
    buffer = DiagnosticsBuffer(capacity=3)
    logger = _logger(buffer)
    try:
        for index in range(5):
            logger.info("message %s", index)
    finally:
        logger.removeHandler(buffer)

    entries = buffer.entries()
    assert buffer.capacity == 3
    assert [entry["message"] for entry in entries] == ["message 2", "message 3", "message 4"]
    assert entries[-1]["level"] == "INFO"


def test_entries_filter_by_request_id_and_limit():
    buffer = DiagnosticsBuffer(capacity=10)
    logger = _logger(buffer, "services.test_diagnostics_filter")
    try:
        token = request_id_var.set("req-a")
        logger.warning("first a")
        logger.warning("second a")
        request_id_var.reset(token)
        token = request_id_var.set("req-b")
        logger.warning("only b")
        request_id_var.reset(token)
    finally:
        logger.removeHandler(buffer)

    assert [e["message"] for e in buffer.entries(request_id="req-a")] == ["first a", "second a"]
    assert [e["message"] for e in buffer.entries(request_id="req-b")] == ["only b"]
    assert [e["message"] for e in buffer.entries(limit=1)] == ["only b"]


def test_new_request_id_respects_supplied_value():
    assert new_request_id("abc-123") == "abc-123"
    assert len(new_request_id(None)) == 32
