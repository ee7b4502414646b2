from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import urlsplit


@dataclass
class Request:
    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    data: bytes | None = None
    timeout: float = 15.0

    # Charset to assume when the response's Content-Type names none
    resp_encoding: str | None = None

    @property
    def hostname(self) -> str:
        return urlsplit(self.url).hostname or ""
