import pytest

from lfiscan.core.errors import ProbeRequestFailed
from lfiscan.core.models import FetchResponse
from lfiscan.core.payloads import clear_wordlist_cache


class FakeFetcher:
    """Scripted fetcher: url -> (status, body) or an exception to raise."""

    def __init__(self, responses=None, default=(200, "")):
        self.responses = dict(responses or {})
        self.default = default
        self.calls = []
        self.closed = False

    def fetch(self, url, timeout):
        self.calls.append((url, timeout))
        r = self.responses.get(url, self.default)
        if isinstance(r, Exception):
            raise r
        status, body = r
        return FetchResponse(status, body if 200 <= status < 300 else "")

    def close(self):
        self.closed = True

    @property
    def urls(self):
        return [u for u, _ in self.calls]


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def probe_failure():
    def _make(url):
        return ProbeRequestFailed(url, "timed out")
    return _make


@pytest.fixture(autouse=True)
def _fresh_wordlist_cache():
    clear_wordlist_cache()
    yield
    clear_wordlist_cache()
