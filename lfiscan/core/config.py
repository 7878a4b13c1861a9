"""Scan tuning knobs.

The thresholds and timeouts here are heuristic defaults, not protocol
constants, so every one of them can be overridden per scan.
"""

from dataclasses import dataclass
from typing import Optional


DEFAULT_USER_AGENT = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                      "AppleWebKit/537.36 (KHTML, like Gecko)")

MIN_PAYLOAD_CAP = 50
MAX_PAYLOAD_CAP = 5000


@dataclass
class ScanConfig:
    baseline_timeout: float = 8.0      # seconds
    request_timeout: float = 8.0       # seconds, per probe
    length_threshold: float = 0.3      # relative body-length delta for POSSIBLE_LFI
    sample_size: int = 300             # chars of body kept as evidence
    payload_cap: int = 500
    workers: int = 1                   # 1 = strictly sequential sweep
    proxy: Optional[str] = None
    verify: bool = False
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if self.baseline_timeout <= 0 or self.request_timeout <= 0:
            raise ValueError("Timeouts must be positive.")
        if self.length_threshold < 0:
            raise ValueError("length_threshold must be >= 0.")
        if self.sample_size < 0:
            raise ValueError("sample_size must be >= 0.")
        if self.payload_cap < 1:
            raise ValueError("payload_cap must be >= 1.")
        if self.workers < 1:
            raise ValueError("workers must be >= 1.")
