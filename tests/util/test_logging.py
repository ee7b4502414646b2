import logging

from greq.http.client.request import Request
from greq.http.client.response import Response
from greq.util.logging import UNSET, KeyValueFormatter, configure_logging, get_logger


def _record(msg="decoded", **extra):
    record = logging.LogRecord("greq.test", logging.INFO, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_formatter_appends_sorted_context():
    fmt = KeyValueFormatter("%(message)s")

    line = fmt.format(_record(url="http://example.com", charset="gbk"))

    assert line == "decoded | charset=gbk url=http://example.com"


def test_formatter_skips_unset_placeholders():
    fmt = KeyValueFormatter("%(message)s")

    assert fmt.format(_record(url=UNSET, status=UNSET)) == "decoded"
    assert fmt.format(_record(url="http://a", status=UNSET)) == "decoded | url=http://a"


def test_get_logger_defaults():
    log = get_logger("greq.test")

    _, kwargs = log.process("msg", {})

    assert kwargs["extra"] == {"url": UNSET, "status": UNSET}


def test_bind_merges_context_without_touching_parent():
    log = get_logger("greq.test")
    bound = log.bind(url="http://example.com", status=200)

    _, kwargs = bound.process("msg", {"extra": {"charset": "gbk"}})

    assert kwargs["extra"] == {"url": "http://example.com", "status": 200, "charset": "gbk"}
    assert log.extra == {"url": UNSET, "status": UNSET}
    assert bound.logger is log.logger


def test_for_exchange_binds_response_fields():
    resp = Response(Request("http://example.com/x"), 404, b"")

    bound = get_logger("greq.test").for_exchange(resp)

    assert bound.extra == {"url": "http://example.com/x", "status": 404}


def test_for_exchange_binds_request_url_only():
    bound = get_logger("greq.test").for_exchange(Request("http://example.com/y"))

    assert bound.extra == {"url": "http://example.com/y", "status": UNSET}


def test_for_exchange_without_request():
    bound = get_logger("greq.test").for_exchange(Response(None, 200, b""))

    assert bound.extra == {"url": UNSET, "status": 200}


def test_configure_logging_sets_level_and_quiets_detector():
    configure_logging("DEBUG")
    try:
        assert logging.getLogger("greq").level == logging.DEBUG
        assert logging.getLogger("charset_normalizer").level == logging.WARNING
    finally:
        configure_logging("INFO")


def test_configure_logging_does_not_mutate_defaults():
    from greq.util import logging as greq_logging

    configure_logging("DEBUG")
    try:
        assert greq_logging._DEFAULT_LOGGING_CONF["loggers"]["greq"]["level"] == "INFO"
    finally:
        configure_logging("INFO")
