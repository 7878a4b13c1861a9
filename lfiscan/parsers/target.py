from typing import Iterable, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from lfiscan.core.errors import InvalidUrl


_SCHEMES = ("http", "https")


def validate_url(url: str) -> str:
    """Return the stripped URL, or raise InvalidUrl if it is not absolute http(s)."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrl(str(url), "empty URL")
    url = url.strip()
    try:
        parts = urlsplit(url)
        # .port raises on a malformed port
        parts.port
    except ValueError as exc:
        raise InvalidUrl(url, str(exc)) from exc
    if parts.scheme.lower() not in _SCHEMES:
        raise InvalidUrl(url, "scheme must be http or https")
    if not parts.hostname:
        raise InvalidUrl(url, "missing host")
    return url


class Target:
    """
    A scan target: the URL plus its parsed query string.

        t = Target.from_url("https://example.com/index.php?file=home.php")
        t.discover_parameters()        -> ["file"]
        t.original_value("file")       -> "home.php"
        t.with_parameter("file", "../etc/passwd")
    """

    def __init__(self, url: str, pairs: List[Tuple[str, str]]):
        self.url = url
        self.pairs = pairs
        self._parts = urlsplit(url)

    @classmethod
    def from_url(cls, url: str) -> "Target":
        url = validate_url(url)
        pairs = parse_qsl(urlsplit(url).query, keep_blank_values=True)
        return cls(url, pairs)

    def discover_parameters(self) -> List[str]:
        """Query-string keys already on the URL, trimmed, de-duplicated, blanks dropped."""
        return clean_names(k for k, _ in self.pairs)

    def has_parameter(self, name: str) -> bool:
        return any(k == name for k, _ in self.pairs)

    def original_value(self, name: str) -> Optional[str]:
        """First value of *name*, or None if the URL does not carry it."""
        for k, v in self.pairs:
            if k == name:
                return v
        return None

    def with_parameter(self, name: str, value: str) -> str:
        """
        URL with *name* set to *value*. An existing parameter is replaced
        in place (later duplicates dropped); a missing one is appended.
        """
        out = []
        replaced = False
        for k, v in self.pairs:
            if k != name:
                out.append((k, v))
            elif not replaced:
                out.append((k, value))
                replaced = True
        if not replaced:
            out.append((name, value))
        query = urlencode(out)
        p = self._parts
        return urlunsplit((p.scheme, p.netloc, p.path, query, p.fragment))


def clean_names(names: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for name in names:
        name = (name or "").strip()
        if name and name not in seen:
            seen.add(name)
            out.append(name)
    return out
