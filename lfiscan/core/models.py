"""Shared data models for the LFI scanner."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class Detection(str, Enum):
    CONFIRMED_LFI = "CONFIRMED_LFI"
    POSSIBLE_LFI = "POSSIBLE_LFI"
    SUSPICIOUS = "SUSPICIOUS"
    NOT_VULNERABLE = "NOT_VULNERABLE"

    def __str__(self):
        return self.value


class Confidence(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class FetchResponse:
    """What a fetcher hands back: status plus the (2xx-only) body text."""
    status_code: int
    body: str = ""

    @property
    def body_length(self) -> int:
        return len(self.body)


@dataclass(frozen=True)
class Baseline:
    """Snapshot of the unmodified target. Both fields are None when the
    baseline fetch failed."""
    status_code: Optional[int] = None
    body_length: Optional[int] = None

    @property
    def available(self) -> bool:
        return self.status_code is not None


@dataclass(frozen=True)
class ProbeResult:
    """One response to one (parameter, payload) pair."""
    parameter: str
    original_value: Optional[str]  # None = parameter injected fresh
    tested_url: str
    payload: str
    status_code: int
    content_length: int
    indicators: Tuple[str, ...]
    detection: Detection
    confidence: Confidence
    sample: str = ""

    @property
    def vulnerable(self) -> bool:
        return self.detection is not Detection.NOT_VULNERABLE

    def __str__(self):
        ind = ", ".join(self.indicators) or "None"
        return (f"[{self.detection}][{self.confidence}] {self.parameter}="
                f"{self.payload!r} (HTTP {self.status_code}, "
                f"{self.content_length} chars, indicators: {ind})")


@dataclass(frozen=True)
class ParameterSummary:
    name: str
    original_value: Optional[str]
    total_tests: int
    vulnerable_count: int


@dataclass(frozen=True)
class ScanSummary:
    """Everything a scan produced. Results are in parameter-major,
    payload-minor order."""
    base_url: str
    parameters: Tuple[ParameterSummary, ...]
    total_tests: int
    vulnerable_count: int
    results: Tuple[ProbeResult, ...]
    baseline: Baseline = field(default_factory=Baseline)
    cancelled: bool = False

    @property
    def findings(self) -> Tuple[ProbeResult, ...]:
        return tuple(r for r in self.results if r.vulnerable)


# ── Endpoint scraping ──────────────────────────────────────────

@dataclass
class EndpointInfo:
    url: str
    type: str              # "api", "page", "static", "unknown"
    source: str            # "HTML", "Inline Script", "JS: <url>", ...
    method: Optional[str] = None
    line: Optional[int] = None

    def __str__(self):
        method = self.method or "-"
        line = self.line if self.line is not None else "-"
        return f"[{self.type}] {method:<6} {self.url}  ({self.source}:{line})"


@dataclass
class ScrapeResult:
    endpoints: list
    total_count: int
    domain: str
