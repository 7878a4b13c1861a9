"""HTTP fetch capability used by the scan engine.

The engine only needs ``fetch(url, timeout) -> FetchResponse`` and treats a
raised ProbeRequestFailed as a dropped data point, so tests can hand it any
object with that method instead of a real client.
"""

from typing import Optional

import httpx

from lfiscan.core.config import DEFAULT_USER_AGENT
from lfiscan.core.errors import ProbeRequestFailed
from lfiscan.core.models import FetchResponse


class HttpFetcher:
    """GET-only fetcher over a shared httpx.Client."""

    def __init__(self, proxy: Optional[str] = None, verify: bool = False,
                 user_agent: str = DEFAULT_USER_AGENT,
                 transport: Optional[httpx.BaseTransport] = None):
        self.client = httpx.Client(
            verify=verify, proxy=proxy, follow_redirects=True,
            transport=transport, headers={"User-Agent": user_agent})

    def fetch(self, url: str, timeout: float) -> FetchResponse:
        """
        GET *url* with an independent *timeout* (seconds).

        The body is only read for 2xx responses; any other status comes
        back with an empty body.
        """
        try:
            resp = self.client.get(url, timeout=timeout)
            body = resp.text if resp.is_success else ""
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            reason = "timed out" if isinstance(exc, httpx.TimeoutException) else str(exc)
            raise ProbeRequestFailed(url, reason or exc.__class__.__name__) from exc
        return FetchResponse(status_code=resp.status_code, body=body or "")

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
