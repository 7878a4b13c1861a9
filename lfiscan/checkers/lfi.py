# lfiscan/checkers/lfi.py
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from lfiscan.core.models import Baseline, Confidence, Detection, FetchResponse


@dataclass(frozen=True)
class IndicatorSignature:
    label: str
    regex: re.Pattern


# File-content fingerprints. Every entry is evaluated so several
# indicators can co-occur in one response.
INDICATORS: Tuple[IndicatorSignature, ...] = (
    # Unix
    IndicatorSignature("etc/passwd", re.compile(r"root:x:0:0:|:/bin/(bash|sh|csh|zsh)|daemon:x:", re.I)),
    IndicatorSignature("etc/shadow", re.compile(r"root:.*:1[0-9]{4,}:", re.I)),
    IndicatorSignature("Unix hosts file", re.compile(r"127\.0\.0\.1\s+localhost|::1\s+localhost", re.I)),
    IndicatorSignature("proc/environ", re.compile(r"PATH=|HOME=|SHELL=|USER=|PWD=", re.I)),
    IndicatorSignature("proc/version", re.compile(r"Linux version \d+\.\d+\.\d+", re.I)),
    # Windows
    IndicatorSignature("Windows win.ini", re.compile(
        r"\[fonts\]|\[extensions\]|\[mci extensions\]|\[drivers\]|for 16-bit app support", re.I)),
    IndicatorSignature("Windows boot.ini", re.compile(
        r"\[boot loader\]|\[operating systems\]|multi\(0\)disk", re.I)),
    IndicatorSignature("Windows hosts", re.compile(r"127\.0\.0\.1\s+localhost.*::1", re.I)),
    # Source / config leakage
    IndicatorSignature("PHP source", re.compile(r"<\?php|<\?=|phpinfo\(\)|echo\s+\$_", re.I)),
    IndicatorSignature("Apache config", re.compile(r"<Directory|LoadModule|ServerRoot", re.I)),
    IndicatorSignature("SSH config", re.compile(r"Host \*|IdentityFile|UserKnownHostsFile", re.I)),
    IndicatorSignature("MySQL config", re.compile(r"\[mysqld\]|\[client\]|datadir=", re.I)),
    IndicatorSignature("Bash history", re.compile(r"^#\d{10}\Z|^ls\s|^cd\s|^cat\s", re.I)),
    # Include errors
    IndicatorSignature("Error disclosure", re.compile(
        r"Warning:.*include|Failed opening.*for inclusion|No such file or directory", re.I)),
)


def detect_indicators(body: str) -> List[str]:
    """Labels (in table order) of every signature found anywhere in *body*."""
    body = body or ""
    return [sig.label for sig in INDICATORS if sig.regex.search(body)]


# ── Heuristic classifier ───────────────────────────────────────

@dataclass(frozen=True)
class Observation:
    """Everything the classifier looks at for one probe."""
    indicators: Sequence[str]
    baseline_status: Optional[int]
    baseline_length: Optional[int]
    status: int
    length: int
    length_threshold: float = 0.3


def _has_indicators(obs: Observation) -> bool:
    return len(obs.indicators) > 0


def _length_delta_exceeds(obs: Observation) -> bool:
    if obs.baseline_length is None or obs.baseline_length <= 0:
        return False
    ratio = abs(obs.length - obs.baseline_length) / obs.baseline_length
    return ratio > obs.length_threshold


def _status_changed(obs: Observation) -> bool:
    return obs.baseline_status is not None and obs.status != obs.baseline_status


# Evaluated top-down, first match wins. Order matters.
RULES: Tuple[Tuple[Callable[[Observation], bool], Detection, Confidence], ...] = (
    (_has_indicators,       Detection.CONFIRMED_LFI, Confidence.HIGH),
    (_length_delta_exceeds, Detection.POSSIBLE_LFI,  Confidence.MEDIUM),
    (_status_changed,       Detection.SUSPICIOUS,    Confidence.LOW),
)

FALLBACK = (Detection.NOT_VULNERABLE, Confidence.LOW)


def classify(
    indicators: Sequence[str],
    baseline_status: Optional[int],
    baseline_length: Optional[int],
    status: int,
    length: int,
    length_threshold: float = 0.3,
) -> Tuple[Detection, Confidence]:
    obs = Observation(indicators, baseline_status, baseline_length,
                      status, length, length_threshold)
    for predicate, detection, confidence in RULES:
        if predicate(obs):
            return detection, confidence
    return FALLBACK


class LFI:
    """
    Local File Inclusion:
      - Fingerprints of Unix/Windows system files and source leakage.
      - Baseline-relative length / status anomalies as weaker signals.
    """

    name = "Local File Inclusion (LFI)"

    def __init__(self, length_threshold: float = 0.3):
        self.length_threshold = length_threshold

    def detect(self, body: str) -> List[str]:
        return detect_indicators(body)

    def classify(self, indicators: Sequence[str], baseline: Baseline,
                 status: int, length: int) -> Tuple[Detection, Confidence]:
        return classify(indicators, baseline.status_code, baseline.body_length,
                        status, length, self.length_threshold)

    def check(self, baseline: Baseline, response: FetchResponse
              ) -> Tuple[List[str], Detection, Confidence]:
        """Indicators plus verdict for one probe response."""
        indicators = self.detect(response.body)
        detection, confidence = self.classify(
            indicators, baseline, response.status_code, response.body_length)
        return indicators, detection, confidence
