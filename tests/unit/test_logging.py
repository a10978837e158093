import io
import json
import logging

import pytest

from core.logging import configure_logging, log_event, set_run_id


@pytest.fixture
def log_stream():
    root_logger = logging.getLogger()
    saved_handlers, saved_level = list(root_logger.handlers), root_logger.level
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)
    yield stream
    root_logger.handlers[:] = saved_handlers
    root_logger.setLevel(saved_level)


def _lines(stream: io.StringIO):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_log_event_emits_structured_fields(log_stream):
    run_id = set_run_id("run-1")
    log_event(logging.getLogger("connectors.blocklist"), "sync.page", page=2, accepted=5, continuation=None)

    (entry,) = _lines(log_stream)
    assert entry["message"] == "sync.page"
    assert entry["page"] == 2
    assert entry["accepted"] == 5
    assert entry["continuation"] is None
    assert entry["run_id"] == run_id
    assert entry["service"] == "wpbl-sync"
    assert entry["level"] == "INFO"
    assert entry["name"] == "connectors.blocklist"


def test_debug_events_are_filtered_at_info(log_stream):
    log_event(logging.getLogger("connectors.blocklist"), "feed.response", level=logging.DEBUG, body="{}")
    assert log_stream.getvalue() == ""


def test_httpx_request_lines_are_quieted(log_stream):
    logging.getLogger("httpx").info("HTTP Request: GET https://en.wikipedia.org/w/api.php")
    assert log_stream.getvalue() == ""


def test_generated_run_ids_are_unique():
    assert set_run_id() != set_run_id()
