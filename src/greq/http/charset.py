"""
Charset resolution and transcoding.

The policy for picking a response charset is fixed:

1. a ``charset`` parameter on the ``Content-Type`` header,
2. the ``resp_encoding`` declared on the originating request,
3. a heuristic guess from ``charset_normalizer``.

Whatever wins is transcoded to UTF-8 unless it already names UTF-8.
"""
import codecs

from charset_normalizer import from_bytes

from greq.errors import DetectionError, TranscodeError
from greq.http.content_type import charset_of
from greq.settings import RESPONSE_SETTINGS
from greq.util.logging import get_logger

log = get_logger(__name__)

SOURCE_HEADER = "header"
SOURCE_REQUEST = "request"
SOURCE_DETECTED = "detected"

# Labels that browsers decode with a superset codec (WHATWG Encoding Standard).
_SUPERSET_CODECS = {
    "gb2312": "gbk",
    "gb-2312": "gbk",
    "x-gbk": "gbk",
    "iso-8859-1": "cp1252",
    "latin1": "cp1252",
    "latin-1": "cp1252",
    "us-ascii": "cp1252",
    "ascii": "cp1252",
    "tis-620": "cp874",
    "iso-8859-11": "cp874",
    "x-sjis": "shift_jis",
}

# Codecs whose undefined bytes decode to the code point of the same value
# (WHATWG windows-1252 defines all 256 bytes, Python's cp1252 leaves five out).
_C1_PASSTHROUGH = {"cp1252"}


def _c1_passthrough(exc):
    if isinstance(exc, UnicodeDecodeError):
        return "".join(chr(b) for b in exc.object[exc.start:exc.end]), exc.end
    raise exc


codecs.register_error("greq.c1passthrough", _c1_passthrough)


def normalize_charset(name: str) -> str:
    return name.strip().strip("\"'").lower().replace("_", "-")


def is_utf8(name: str) -> bool:
    return normalize_charset(name) in RESPONSE_SETTINGS.utf8_aliases


def detect_charset(body: bytes) -> str:
    """
    Guess the charset of `body`.

    Args:
        body (bytes): Raw response body, must not be empty.

    Returns:
        The Python codec name of the best-scoring candidate.

    Raises:
        DetectionError: if no candidate code page survives detection.
    """
    opts = RESPONSE_SETTINGS.detector
    best = from_bytes(
        body,
        steps=opts.steps,
        threshold=opts.threshold,
        cp_isolation=opts.cp_isolation,
    ).best()
    if best is None:
        raise DetectionError(f"could not detect charset of {len(body)} byte body")
    log.debug("charset detected", extra={"charset": best.encoding, "chaos": best.chaos})
    return best.encoding


def resolve_charset(content_type: str, override: str | None, body: bytes) -> tuple[str, str]:
    """
    Pick the charset for a textual body and report where it came from.

    Returns:
        ``(charset, source)`` where source is one of ``"header"``,
        ``"request"`` or ``"detected"``.
    """
    declared = charset_of(content_type)
    if declared:
        return declared, SOURCE_HEADER
    if override:
        return override, SOURCE_REQUEST
    return detect_charset(body), SOURCE_DETECTED


def transcode(body: bytes, charset: str, errors: str | None = None) -> bytes:
    """
    Convert `body` from `charset` to UTF-8 bytes.

    Raises:
        TranscodeError: if the charset is unknown to Python or `body` is not
            a valid byte sequence for it (with the "strict" error handler).
    """
    errors = errors or RESPONSE_SETTINGS.transcode_errors
    label = normalize_charset(charset)
    label = _SUPERSET_CODECS.get(label, label)
    try:
        codec = codecs.lookup(label)
    except LookupError as exc:
        raise TranscodeError(f"unsupported charset {charset!r}", charset) from exc

    if errors == "strict" and codec.name in _C1_PASSTHROUGH:
        errors = "greq.c1passthrough"

    try:
        return body.decode(codec.name, errors=errors).encode("utf-8")
    except UnicodeError as exc:
        raise TranscodeError(f"body is not valid {charset}: {exc}", charset) from exc
