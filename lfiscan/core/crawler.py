"""Scraper: one page plus its scripts, fed through the endpoint extractor."""

from html.parser import HTMLParser
from typing import List, Optional, Tuple
from urllib.parse import urljoin, urlsplit

import httpx

from lfiscan.core.config import DEFAULT_USER_AGENT
from lfiscan.core.errors import ScrapeFailed
from lfiscan.core.models import EndpointInfo, ScrapeResult
from lfiscan.parsers.endpoints import (categorize_endpoint, dedup_endpoints,
                                       extract_endpoints, is_valid_endpoint,
                                       normalize_url)
from lfiscan.parsers.target import validate_url


_PAGE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
_SCRIPT_HEADERS = {"Accept": "application/javascript, text/javascript, */*"}

_EVENT_ATTRS = ("onclick", "onload", "onerror")
_DATA_ATTRS = ("data-url", "data-src", "data-href")

# external scripts we never fetch
_SKIP_SRC = ("cdn", "min.js", "bundle", "vendor")
# script bodies we never scan
_SKIP_BODY = ("WebSocket", "eval(", "Function(")
MAX_SCRIPT_SIZE = 100000


# ── HTML parser ────────────────────────────────────────────────

class _ScriptExtractor(HTMLParser):
    """Collect <script src>, inline script bodies, inline event handlers
    and data-url/src/href attributes."""

    def __init__(self):
        super().__init__()
        self.script_srcs: List[str] = []
        self.inline_scripts: List[str] = []
        # (element number, value); elements are numbered per attribute group
        self.handlers: List[Tuple[int, str]] = []
        self.data_urls: List[Tuple[int, str]] = []
        self._handler_elems = 0
        self._data_elems = 0
        self._in_script = False
        self._buf: List[str] = []

    def handle_starttag(self, tag, attrs):
        attr_dict = dict(attrs)
        if tag == "script":
            src = attr_dict.get("src")
            if src:
                self.script_srcs.append(src)
            else:
                self._in_script = True
                self._buf = []

        if any(name in attr_dict for name in _EVENT_ATTRS):
            self._handler_elems += 1
            for name in _EVENT_ATTRS:
                if attr_dict.get(name):
                    self.handlers.append((self._handler_elems, attr_dict[name]))
        if any(name in attr_dict for name in _DATA_ATTRS):
            self._data_elems += 1
            for name in _DATA_ATTRS:
                if attr_dict.get(name):
                    self.data_urls.append((self._data_elems, attr_dict[name]))

    def handle_data(self, data):
        if self._in_script:
            self._buf.append(data)

    def handle_endtag(self, tag):
        if tag == "script" and self._in_script:
            self.inline_scripts.append("".join(self._buf))
            self._in_script = False
            self._buf = []


def parse_page(html: str) -> _ScriptExtractor:
    parser = _ScriptExtractor()
    parser.feed(html)
    parser.close()
    return parser


def should_skip_script(src: str) -> bool:
    return any(marker in src for marker in _SKIP_SRC)


def should_skip_script_body(body: str) -> bool:
    return len(body) > MAX_SCRIPT_SIZE or any(m in body for m in _SKIP_BODY)


# ── Scraper class ──────────────────────────────────────────────

class Scraper:
    """
    Fetch one page and the scripts it references, and return every
    endpoint found in them.

    Usage:
        scraper = Scraper(client, logger)
        result = scraper.scrape("http://example.com/")
    """

    def __init__(self, client: Optional[httpx.Client] = None, logger=None,
                 max_scripts: int = 10, timeout: float = 10.0):
        self.client = client or httpx.Client(
            verify=False, follow_redirects=True, timeout=timeout,
            headers={"User-Agent": DEFAULT_USER_AGENT})
        self.logger = logger
        self.max_scripts = max_scripts

    def scrape(self, url: str) -> ScrapeResult:
        url = validate_url(url)
        domain = urlsplit(url).hostname or ""

        if self.logger:
            self.logger.info(f"Scraping {url}")

        html = self._fetch_page(url)
        endpoints: List[EndpointInfo] = list(extract_endpoints(html, "HTML"))

        page = parse_page(html)

        # ── Linked scripts ─────────────────────────────────────
        for src in page.script_srcs[:self.max_scripts]:
            if should_skip_script(src):
                if self.logger:
                    self.logger.debug(f"  Skipping script {src}")
                continue
            script_url = urljoin(url, src)
            body = self._fetch_script(script_url)
            if body is None or should_skip_script_body(body):
                continue
            found = extract_endpoints(body, f"JS: {script_url}")
            endpoints.extend(found)
            if self.logger:
                self.logger.debug(f"  {script_url}: {len(found)} endpoints")

        # ── Inline scripts ─────────────────────────────────────
        for body in page.inline_scripts:
            if body.strip() and "WebSocket" not in body:
                endpoints.extend(extract_endpoints(body, "Inline Script"))

        # ── Event handlers and data attributes ─────────────────
        for i, handler in page.handlers:
            endpoints.extend(extract_endpoints(handler, f"Event Handler {i}"))

        for i, value in page.data_urls:
            if is_valid_endpoint(value):
                endpoints.append(EndpointInfo(
                    url=normalize_url(value),
                    type=categorize_endpoint(normalize_url(value)),
                    source=f"Data Attribute {i}",
                    line=0,
                ))

        unique = dedup_endpoints(endpoints)
        if self.logger:
            self.logger.ok(f"Scrape complete: {len(unique)} endpoints on {domain}")
        return ScrapeResult(endpoints=unique, total_count=len(unique), domain=domain)

    # ── Internal helpers ───────────────────────────────────────

    def _fetch_page(self, url: str) -> str:
        try:
            resp = self.client.get(url, headers=_PAGE_HEADERS)
        except httpx.HTTPError as exc:
            raise ScrapeFailed(url, str(exc) or exc.__class__.__name__) from exc
        if not resp.is_success:
            raise ScrapeFailed(url, f"HTTP {resp.status_code}: {resp.reason_phrase}")
        return resp.text

    def _fetch_script(self, url: str) -> Optional[str]:
        """GET a script and return its body, or None on error."""
        try:
            resp = self.client.get(url, headers=_SCRIPT_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            if self.logger:
                self.logger.warn(f"Failed to fetch script: {url} ({exc})")
            return None
        if not resp.is_success:
            if self.logger:
                self.logger.warn(f"Failed to fetch script: {url} (HTTP {resp.status_code})")
            return None
        return resp.text
