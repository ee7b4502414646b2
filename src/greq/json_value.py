"""
Dynamically-typed JSON values with path access.

`JSONValue` wraps whatever ``json.loads`` produced and lets callers walk it
without knowing its shape up front:

```python
value = JSONValue.parse(b'{"form": {"aaa": "123"}, "tags": ["a", "b"]}')
value.get("form.aaa").as_str()   # '123'
value.get("tags.1").as_str()     # 'b'
value.get("tags.#").as_int()     # 2
value.get("nope.deeper").exists  # False
```
"""
import json
from enum import Enum, auto
from typing import Any, Iterator

from greq.errors import ParseError

_MISSING = object()


class JSONType(Enum):
    MISSING = auto()
    NULL = auto()
    BOOL = auto()
    NUMBER = auto()
    STRING = auto()
    ARRAY = auto()
    OBJECT = auto()


def _split_path(path: str) -> list[str]:
    """Split on dots, honouring ``\\.`` as a literal dot inside a key."""
    parts, buf, escaped = [], [], False
    for ch in path:
        if escaped:
            buf.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == ".":
            parts.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
    parts.append("".join(buf))
    return parts


class JSONValue:
    __slots__ = ("_value",)

    def __init__(self, value: Any = _MISSING):
        self._value = value

    @classmethod
    def parse(cls, data: str | bytes) -> "JSONValue":
        """
        Parse JSON text. Blank input yields a missing value.

        Raises:
            ParseError: if `data` is not valid JSON.
        """
        if not data or not data.strip():
            return cls()
        try:
            return cls(json.loads(data))
        except ValueError as exc:
            raise ParseError(f"invalid JSON: {exc}") from exc

    @property
    def type(self) -> JSONType:
        v = self._value
        if v is _MISSING:
            return JSONType.MISSING
        if v is None:
            return JSONType.NULL
        if isinstance(v, bool):
            return JSONType.BOOL
        if isinstance(v, (int, float)):
            return JSONType.NUMBER
        if isinstance(v, str):
            return JSONType.STRING
        if isinstance(v, list):
            return JSONType.ARRAY
        return JSONType.OBJECT

    @property
    def exists(self) -> bool:
        return self._value is not _MISSING

    @property
    def value(self) -> Any:
        """The plain Python value; ``None`` when missing."""
        return None if self._value is _MISSING else self._value

    def get(self, path: str) -> "JSONValue":
        """
        Walk a dot-separated path.

        Numeric segments index arrays and ``#`` yields an array's length.
        Any step that cannot be taken yields a missing value.
        """
        if not path:
            return self
        cur = self._value
        for key in _split_path(path):
            if isinstance(cur, dict):
                if key not in cur:
                    return JSONValue()
                cur = cur[key]
            elif isinstance(cur, list):
                if key == "#":
                    cur = len(cur)
                elif key.isascii() and key.isdecimal() and int(key) < len(cur):
                    cur = cur[int(key)]
                else:
                    return JSONValue()
            else:
                return JSONValue()
        return JSONValue(cur)

    def as_str(self) -> str:
        """Strings as-is, missing as ``""``, everything else as compact JSON."""
        t = self.type
        if t is JSONType.MISSING:
            return ""
        if t is JSONType.STRING:
            return self._value
        return json.dumps(self._value, ensure_ascii=False, separators=(",", ":"))

    def as_float(self, default: float = 0.0) -> float:
        if self.type not in (JSONType.NUMBER, JSONType.BOOL, JSONType.STRING):
            return default
        try:
            return float(self._value)
        except (ValueError, OverflowError):
            return default

    def as_int(self, default: int = 0) -> int:
        if self.type not in (JSONType.NUMBER, JSONType.BOOL, JSONType.STRING):
            return default
        try:
            return int(self._value)
        except (ValueError, OverflowError):
            pass
        # "1.5", NaN and Infinity all take this route
        try:
            return int(float(self._value))
        except (ValueError, OverflowError):
            return default

    def as_bool(self) -> bool:
        t = self.type
        if t is JSONType.STRING:
            return self._value.strip().lower() in ("1", "true", "t", "yes", "on")
        if t in (JSONType.NUMBER, JSONType.BOOL):
            return bool(self._value)
        return False

    def as_list(self) -> list["JSONValue"]:
        t = self.type
        if t is JSONType.ARRAY:
            return [JSONValue(v) for v in self._value]
        if t in (JSONType.MISSING, JSONType.NULL):
            return []
        return [self]

    def as_dict(self) -> dict[str, "JSONValue"]:
        if self.type is JSONType.OBJECT:
            return {k: JSONValue(v) for k, v in self._value.items()}
        return {}

    def __getitem__(self, key: int | str) -> "JSONValue":
        if isinstance(key, int):
            if isinstance(self._value, list) and -len(self._value) <= key < len(self._value):
                return JSONValue(self._value[key])
            return JSONValue()
        return self.get(key)

    def __iter__(self) -> Iterator["JSONValue"]:
        return iter(self.as_list())

    def __len__(self) -> int:
        if isinstance(self._value, (list, dict)):
            return len(self._value)
        return 0

    def __bool__(self) -> bool:
        return self.exists

    def __eq__(self, other) -> bool:
        if isinstance(other, JSONValue):
            return self._value == other._value
        return self.exists and self._value == other

    __hash__ = None

    def __str__(self) -> str:
        return self.as_str()

    def __repr__(self) -> str:
        if not self.exists:
            return "JSONValue(<missing>)"
        return f"JSONValue({self.type.name.lower()}: {self.as_str()!r})"
