import copy
import logging
from logging.config import dictConfig
from typing import Any, Mapping

# Placeholder for exchange fields that are not known yet
UNSET = "-"


class KeyValueFormatter(logging.Formatter):
    """
    Formatter that renders the exchange context (url, status, charset, ...)
    attached to a record as key=value pairs at the end of the log line.

    Context still holding the `UNSET` placeholder is left out.
    """
    # Keys that already exist on every LogRecord
    _RESERVED = {
        'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
        'funcName', 'levelname', 'levelno', 'lineno', 'message', 'module',
        'msecs', 'msg', 'name', 'pathname', 'process', 'processName',
        'relativeCreated', 'stack_info', 'thread', 'threadName', 'taskName'
    }

    def format(self, record: logging.LogRecord) -> str:
        s = super().format(record)

        ctx = {
            k: v for k, v in record.__dict__.items()
            if k not in self._RESERVED and v != UNSET
        }
        if ctx:
            # Sorted for deterministic logs
            s = f"{s} | " + " ".join(f"{k}={v}" for k, v in sorted(ctx.items()))
        return s


_DEFAULT_LOGGING_CONF = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "kv": {
            "()": KeyValueFormatter,
            "format": "%(asctime)s [%(levelname).1s] %(name)s | %(message)s"
        }
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "formatter": "kv",
        }
    },
    "loggers": {
        "greq": {"level": "INFO", "handlers": ["stderr"]},
        # charset_normalizer explains every guess at DEBUG
        "charset_normalizer": {"level": "WARNING"},
    },
}


def configure_logging(level: str | int = "INFO", **overrides) -> None:
    """
    Configure greq's logger.

    Call this once in an application entry-point **or** rely on defaults.
    The detector's own logger stays at WARNING whatever `level` is.

    Args:
        level (str | int): Logging level to configure. Defaults to "INFO".
        **overrides: Additional logging configuration overrides
    """
    conf = {**copy.deepcopy(_DEFAULT_LOGGING_CONF), **overrides}
    conf["loggers"]["greq"]["level"] = level
    dictConfig(conf)


class ExchangeAdapter(logging.LoggerAdapter):
    """
    Carry the context of one HTTP exchange (url, status) on every record,
    so the formatter never needs to know about requests or responses.
    """
    def process(self, msg: str, kwargs: Mapping[str, Any]):
        extra = self.extra.copy()
        extra.update(kwargs.pop("extra", {}))
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **ctx) -> "ExchangeAdapter":
        """Return an adapter on the same logger with `ctx` merged in."""
        return ExchangeAdapter(self.logger, {**self.extra, **ctx})

    def for_exchange(self, exchange) -> "ExchangeAdapter":
        """
        Bind the url of a `Request`, or the url and status of a `Response`.
        """
        request = getattr(exchange, "request", exchange)
        return self.bind(
            url=getattr(request, "url", None) or UNSET,
            status=getattr(exchange, "status", UNSET),
        )


def get_logger(name: str, **ctx) -> ExchangeAdapter:
    base = logging.getLogger(name)
    # default placeholders so formatter never blows up
    defaults = {"url": UNSET, "status": UNSET}
    defaults.update(ctx)
    return ExchangeAdapter(base, defaults)
