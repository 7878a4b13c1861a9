"""Regex extraction of candidate HTTP endpoints from HTML / JavaScript text."""

import re
from typing import List, Optional

from lfiscan.core.models import EndpointInfo


_PATTERNS = [
    # REST API
    re.compile(r"[\"']/api/[^\"']*[\"']", re.I),
    re.compile(r"[\"']/v\d+/[^\"']*[\"']", re.I),
    re.compile(r"[\"']/[a-zA-Z0-9_-]+/[a-zA-Z0-9_-]+[\"']", re.I),
    # Common endpoint shapes
    re.compile(r"[\"']/[a-zA-Z0-9_-]+/[a-zA-Z0-9_-]*[\"']", re.I),
    re.compile(r"[\"']/[a-zA-Z0-9_-]+\.json[\"']", re.I),
    re.compile(r"[\"']/[a-zA-Z0-9_-]+\.xml[\"']", re.I),
    # Absolute URLs
    re.compile(r"https?://[^\s\"']+", re.I),
    re.compile(r"[\"']https?://[^\"']*[\"']", re.I),
    # fetch / axios / generic client call sites
    re.compile(r"fetch\s*\(\s*[\"']([^\"']+)[\"']", re.I),
    re.compile(r"axios\.[a-z]+\s*\(\s*[\"']([^\"']+)[\"']", re.I),
    re.compile(r"\.get\s*\(\s*[\"']([^\"']+)[\"']", re.I),
    re.compile(r"\.post\s*\(\s*[\"']([^\"']+)[\"']", re.I),
    re.compile(r"\.put\s*\(\s*[\"']([^\"']+)[\"']", re.I),
    re.compile(r"\.delete\s*\(\s*[\"']([^\"']+)[\"']", re.I),
    # jQuery
    re.compile(r"\$\.(get|post|ajax)\s*\(\s*[\"']([^\"']+)[\"']", re.I),
    # XMLHttpRequest
    re.compile(r"open\s*\(\s*[\"'](GET|POST|PUT|DELETE)[\"']\s*,\s*[\"']([^\"']+)[\"']", re.I),
]

_STATIC_EXT = r"\.(css|js|png|jpg|jpeg|gif|svg|ico|woff|woff2|ttf|eot)$"

_EXCLUDE = [
    re.compile(r"^#"),
    re.compile(r"^javascript:"),
    re.compile(r"^mailto:"),
    re.compile(r"^tel:"),
    re.compile(_STATIC_EXT, re.I),
    re.compile(r"^/$"),
    re.compile(r"^/\s*$"),
]

_PAGE_RX = re.compile(r"\.(html|htm|php|asp|aspx)$", re.I)
_STATIC_RX = re.compile(_STATIC_EXT, re.I)
_API_MARKERS = ("/api/", "/v1/", "/v2/")
_METHODS = ("GET", "POST", "PUT", "DELETE")


def is_valid_endpoint(url: str) -> bool:
    return not any(rx.search(url) for rx in _EXCLUDE)


def normalize_url(url: str) -> str:
    """Drop query string and fragment."""
    return url.split("?", 1)[0].split("#", 1)[0]


def categorize_endpoint(url: str) -> str:
    if any(m in url for m in _API_MARKERS):
        return "api"
    if _PAGE_RX.search(url):
        return "page"
    if _STATIC_RX.search(url):
        return "static"
    return "unknown"


def infer_method(match_text: str) -> Optional[str]:
    for method in _METHODS:
        if method in match_text:
            return method
    return None


def line_number(text: str, index: int) -> int:
    return text.count("\n", 0, index) + 1


def _literal(match: "re.Match") -> str:
    # last participating group is the URL; group-less patterns use the whole match
    for group in reversed(match.groups()):
        if group is not None:
            return group
    return match.group(0)


def extract_endpoints(text: str, source: str) -> List[EndpointInfo]:
    """
    Every endpoint-looking literal in *text*, tagged with *source*.

    Patterns run in a fixed order; duplicate URLs (after normalization)
    keep their first occurrence.
    """
    text = text or ""
    endpoints: List[EndpointInfo] = []

    for rx in _PATTERNS:
        for m in rx.finditer(text):
            url = _literal(m).replace('"', "").replace("'", "").strip()
            if not url or not is_valid_endpoint(url):
                continue
            norm = normalize_url(url)
            if not norm:
                continue
            endpoints.append(EndpointInfo(
                url=norm,
                type=categorize_endpoint(norm),
                source=source,
                method=infer_method(m.group(0)),
                line=line_number(text, m.start()),
            ))

    return dedup_endpoints(endpoints)


def dedup_endpoints(endpoints: List[EndpointInfo]) -> List[EndpointInfo]:
    """First occurrence of each URL wins; a later duplicate may only
    fill in a method the first one lacked."""
    kept = {}
    out = []
    for ep in endpoints:
        first = kept.get(ep.url)
        if first is None:
            kept[ep.url] = ep
            out.append(ep)
        elif first.method is None and ep.method:
            first.method = ep.method
    return out
