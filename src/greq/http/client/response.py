# greq/http/client/response.py
"""
HTTP response wrapper.

A `Response` is built by the transport as soon as an exchange finishes. Its
body is normalized to UTF-8 lazily, the first time an accessor needs text,
and the structured views (HTML, XML, JSON, typed binding) are derived from
that canonical body on every call.
"""
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional

from lxml import etree, html
from multidict import CIMultiDict
from pydantic import TypeAdapter, ValidationError

from greq.errors import BindError, DecodeError, GreqError, ParseError
from greq.http import charset as charsets
from greq.http import content_type as ctypes
from greq.http.client.request import Request
from greq.json_value import JSONValue
from greq.patches import html_parser, xml_parser
from greq.util.logging import get_logger

log = get_logger(__name__)

# Rounds of list-wrapping attempted by bind_xml before giving up
_MAX_BIND_PASSES = 8


class DecodeState(Enum):
    NOT_DECODED = auto()
    DECODED = auto()
    FAILED = auto()


@dataclass
class Response:
    request: Optional[Request]
    status: int
    body: bytes
    headers: CIMultiDict | None = None
    error: Optional[Exception] = field(default=None, kw_only=True)

    decoded_body: bytes = field(default=b"", init=False, repr=False)
    charset: str | None = field(default=None, init=False)
    decode_error: GreqError | None = field(default=None, init=False, repr=False)
    decode_state: DecodeState = field(default=DecodeState.NOT_DECODED, init=False, repr=False)
    _text: str = field(default="", init=False, repr=False)

    def __post_init__(self):
        self.body = bytes(self.body or b"")
        self.headers = CIMultiDict(self.headers or ())
        self.decoded_body = self.body

    @property
    def url(self) -> str | None:
        return self.request.url if self.request is not None else None

    @property
    def content_type(self) -> str:
        return ctypes.get_content_type(self.headers)

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status < 400

    def decode(self) -> None:
        """
        Normalize the body to UTF-8, at most once.

        Detection and transcoding failures are recorded on `decode_error`
        rather than raised; text-dependent accessors raise them later.
        """
        if self.decode_state is not DecodeState.NOT_DECODED or self.error is not None:
            return
        if not self.body:
            self.decode_state = DecodeState.DECODED
            return

        ctype = self.content_type
        if not ctypes.is_textual(ctype):
            # Binary or markup-only payloads are left to their own parsers
            self.decode_state = DecodeState.DECODED
            return

        override = self.request.resp_encoding if self.request is not None else None
        xlog = log.for_exchange(self)
        try:
            name, source = charsets.resolve_charset(ctype, override, self.body)
            if charsets.is_utf8(name):
                decoded = self.body
            else:
                decoded = charsets.transcode(self.body, name)
        except DecodeError as exc:
            self.decode_error = exc
            self.decode_state = DecodeState.FAILED
            xlog.warning("decode failed", extra={"error": exc})
            return

        self.charset = name
        self.decoded_body = decoded
        self._text = decoded.decode("utf-8", errors="replace")
        self.decode_state = DecodeState.DECODED
        xlog.debug("decoded", extra={"charset": name, "source": source})

    def _raise_for_transport(self) -> None:
        if self.error is not None:
            raise self.error

    def _raise_for_decode(self) -> None:
        self.decode()
        if self.decode_error is not None:
            raise self.decode_error

    def _markup_source(self) -> tuple[bytes, str | None]:
        # Transcoded text is UTF-8 whatever the document claims in <meta>
        # or its XML declaration; otherwise let lxml sniff the raw bytes.
        self.decode()
        if self.decode_state is DecodeState.DECODED and self.charset is not None:
            return self.decoded_body, "utf-8"
        return self.body, None

    def text(self) -> str:
        self._raise_for_transport()
        self._raise_for_decode()
        return self._text

    def raw_response(self) -> "Response":
        self._raise_for_transport()
        self._raise_for_decode()
        return self

    def html(self) -> html.HtmlElement:
        """
        Parse the body as an HTML document.

        Decode errors do not prevent parsing; the raw bytes are used instead.

        Raises:
            ParseError: if lxml cannot build a document (e.g. empty body).
        """
        self._raise_for_transport()
        body, encoding = self._markup_source()
        try:
            return html.document_fromstring(body, parser=html_parser(encoding), base_url=self.url)
        except (etree.ParserError, etree.XMLSyntaxError) as exc:
            raise ParseError(f"invalid HTML: {exc}") from exc

    def xml(self) -> etree._Element:
        """
        Parse the body as XML. Nodes support ``xpath()`` and ``xpath3()``.

        Raises:
            ParseError: on malformed XML.
        """
        self._raise_for_transport()
        body, encoding = self._markup_source()
        try:
            return etree.fromstring(body, parser=xml_parser(encoding), base_url=self.url)
        except etree.XMLSyntaxError as exc:
            raise ParseError(f"invalid XML: {exc}") from exc

    def json(self) -> JSONValue:
        """
        Parse the canonical body as JSON.

        An empty body gives a missing `JSONValue`.

        Raises:
            ParseError: on malformed JSON.
        """
        self._raise_for_transport()
        self._raise_for_decode()
        return JSONValue.parse(self.decoded_body)

    def bind_json(self, target: Any) -> Any:
        """
        Deserialize the canonical body into `target`.

        `target` is any type pydantic can validate: a dataclass, a
        ``BaseModel``, a ``TypedDict`` or a generic such as ``list[int]``.

        Raises:
            BindError: if the body does not fit `target`.
        """
        self._raise_for_transport()
        self._raise_for_decode()
        try:
            return TypeAdapter(target).validate_json(self.decoded_body)
        except ValidationError as exc:
            raise BindError(f"cannot bind JSON to {_type_name(target)}: {exc}", target) from exc

    def bind_xml(self, target: Any) -> Any:
        """
        Deserialize the XML body into `target`.

        The root element maps onto `target`: attributes and child elements
        become fields by local name, leaf elements become their text and
        repeated elements become lists.
        """
        self._raise_for_transport()
        self._raise_for_decode()
        body, encoding = self._markup_source()
        try:
            root = etree.fromstring(body, parser=xml_parser(encoding))
        except etree.XMLSyntaxError as exc:
            raise BindError(f"cannot bind XML to {_type_name(target)}: {exc}", target) from exc

        adapter = TypeAdapter(target)
        data = element_to_data(root)
        for _ in range(_MAX_BIND_PASSES):
            try:
                return adapter.validate_python(data)
            except ValidationError as exc:
                # A single child element looks like a scalar; wrap it when the
                # target field wants a list and try again.
                if not _wrap_singletons(data, exc):
                    raise BindError(
                        f"cannot bind XML to {_type_name(target)}: {exc}", target
                    ) from exc
        raise BindError(f"cannot bind XML to {_type_name(target)}", target)

    def is_html(self) -> bool:
        return ctypes.is_html(self.content_type)

    def is_json(self) -> bool:
        return ctypes.is_json(self.content_type)

    def is_xml(self) -> bool:
        return ctypes.is_xml(self.content_type)


def element_to_data(elem) -> dict | str:
    """
    Convert an XML element into plain data for validation.

    A leaf element without attributes becomes its text. Anything else
    becomes a dict; text next to attributes is stored under ``"text"``.
    """
    children = [child for child in elem if isinstance(child.tag, str)]
    text = (elem.text or "").strip()
    if not children and not elem.attrib:
        return text

    data: dict[str, Any] = {}
    for name, value in elem.attrib.items():
        data[etree.QName(name).localname] = value

    repeated = set()
    for child in children:
        key = etree.QName(child).localname
        value = element_to_data(child)
        if key not in data:
            data[key] = value
        elif key in repeated:
            data[key].append(value)
        else:
            data[key] = [data[key], value]
            repeated.add(key)

    if text and "text" not in data:
        data["text"] = text
    return data


def _wrap_singletons(data: Any, exc: ValidationError) -> bool:
    wrapped = False
    for err in exc.errors():
        if err["type"] != "list_type" or not err["loc"]:
            continue
        *parents, last = err["loc"]
        node = data
        try:
            for key in parents:
                node = node[key]
            if isinstance(node, dict) and last in node and not isinstance(node[last], list):
                node[last] = [node[last]]
                wrapped = True
        except (KeyError, IndexError, TypeError):
            continue
    return wrapped


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)
