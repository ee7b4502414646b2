"""
Settings for greq.

These settings are global and can be accessed from any module in the greq package.

The SETTINGS dict structure follows the structure of greq submodules.

Expected usage behavior:

```python
from greq.settings import SETTINGS

DETECTOR_SETTINGS = SETTINGS.http.response.detector
```

Once initialized, the settings are expected to be immutable (not enforced).
"""

SETTINGS = {
    'http': {
        'client': {
            'concurrency': 16,
            'timeout': 15,
            'headers': {
                "User-Agent": "greq/0.1 (+https://pypi.org/project/greq/)",
            },
            'proxies': None,
        },
        'response': {
            'detector': {
                # Passed through to charset_normalizer.from_bytes
                'threshold': 0.2,
                'steps': 5,
                'cp_isolation': None,
            },
            # Codec error handler used when transcoding to UTF-8.
            # "strict" raises TranscodeError, "replace" inserts U+FFFD.
            'transcode_errors': "strict",
            'utf8_aliases': ("utf-8", "utf8"),
        },
    },
}


class AttrDict(dict):
    """
    A dictionary subclass that allows dot-notation access while
    recursively converting nested dictionaries.
    """
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Point the instance __dict__ to itself to allow attribute access
        self.__dict__ = self
        for key, value in self.items():
            self[key] = self._convert(value)

    @classmethod
    def _convert(cls, value):
        """Recursively converts dicts to AttrDicts, leaving other types alone."""
        if isinstance(value, dict):
            return cls(value)
        elif isinstance(value, list):
            return [cls._convert(item) for item in value]
        return value

    def __setitem__(self, key, value):
        super().__setitem__(key, self._convert(value))

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError as exc:
            raise AttributeError(f"AttrDict object has no attribute '{key}'") from exc


SETTINGS = AttrDict(SETTINGS)
CLIENT_SETTINGS = SETTINGS.http.client
RESPONSE_SETTINGS = SETTINGS.http.response
