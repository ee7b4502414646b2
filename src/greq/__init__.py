from .errors import (
    BindError,
    DecodeError,
    DetectionError,
    GreqError,
    ParseError,
    TranscodeError,
    TransportError,
)
from .http.client.client import Client, do, do_all
from .http.client.request import Request
from .http.client.response import DecodeState, Response
from .json_value import JSONType, JSONValue
from .util.logging import configure_logging

__all__ = [
    'Client',
    'do',
    'do_all',
    'Request',
    'Response',
    'DecodeState',
    'JSONValue',
    'JSONType',
    'GreqError',
    'TransportError',
    'DecodeError',
    'DetectionError',
    'TranscodeError',
    'ParseError',
    'BindError',
    'configure_logging',
]
