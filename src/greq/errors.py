class GreqError(Exception):
    """Base error for greq."""


class TransportError(GreqError):
    """Raised when the HTTP exchange never completed."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class DecodeError(GreqError):
    """Raised when a response body could not be normalized to UTF-8."""


class DetectionError(DecodeError):
    """Raised when charset sniffing finds no confident candidate."""


class TranscodeError(DecodeError, ValueError):
    """Raised when a charset is unknown or the bytes are invalid for it."""

    def __init__(self, message: str, charset: str | None = None):
        super().__init__(message)
        self.charset = charset


class ParseError(GreqError, ValueError):
    """Raised when a structured parser rejects the response body."""


class BindError(GreqError, ValueError):
    """Raised when the body cannot be deserialized into the target type."""

    def __init__(self, message: str, target=None):
        super().__init__(message)
        self.target = target
