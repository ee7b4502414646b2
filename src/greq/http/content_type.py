"""
Content-Type header inspection.

All predicates work on the lower-cased header value and use plain substring
matching, so parameters such as ``; charset=gbk`` are tolerated without a
full media-type parser.
"""
from multidict import CIMultiDict

TEXT_MARKERS = ("text/", "/json")


def get_content_type(headers: CIMultiDict | None) -> str:
    """Return the first ``Content-Type`` value, lower-cased, or ``""``."""
    if not headers:
        return ""
    return headers.get("Content-Type", "").lower()


def is_textual(content_type: str) -> bool:
    return any(marker in content_type for marker in TEXT_MARKERS)


def charset_of(content_type: str) -> str | None:
    """
    Extract the ``charset`` parameter, stripped of quotes and whitespace.

    >>> charset_of('text/html; charset="GBK"')
    'GBK'
    >>> charset_of("application/json") is None
    True
    """
    for param in content_type.split(";")[1:]:
        key, sep, value = param.partition("=")
        if sep and key.strip().lower() == "charset":
            value = value.strip().strip("\"'").strip()
            return value or None
    return None


def is_html(content_type: str) -> bool:
    return "/html" in content_type


def is_json(content_type: str) -> bool:
    return "/json" in content_type


def is_xml(content_type: str) -> bool:
    return "/xml" in content_type or "+xml" in content_type
