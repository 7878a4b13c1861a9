import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from colorama import Style

from lfiscan.checkers.lfi import LFI
from lfiscan.core.config import ScanConfig
from lfiscan.core.errors import (BaselineUnavailable, NoParametersFound,
                                 ProbeRequestFailed)
from lfiscan.core.fetcher import HttpFetcher
from lfiscan.core.models import (Baseline, ParameterSummary, ProbeResult,
                                 ScanSummary)
from lfiscan.core.payloads import build_scan_payloads
from lfiscan.parsers.target import Target, clean_names

ProgressCallback = Callable[[int, int], None]

# (parameter, original value, payload, test url)
_Probe = Tuple[str, Optional[str], str, str]


class Engine:
    def __init__(self, fetcher=None, config: Optional[ScanConfig] = None,
                 logger=None, checker: Optional[LFI] = None):
        self.config = config or ScanConfig()
        self.logger = logger
        self.fetcher = fetcher or HttpFetcher(
            proxy=self.config.proxy, verify=self.config.verify,
            user_agent=self.config.user_agent)
        self.checker = checker or LFI(length_threshold=self.config.length_threshold)
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._current = 0
        self._total = 0
        self._progress: Optional[ProgressCallback] = None

    # ---------- control ----------
    def cancel(self):
        """Abandon the running scan; probes not yet started are skipped."""
        self._stop.set()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    @property
    def progress(self) -> Tuple[int, int]:
        with self._lock:
            return self._current, self._total

    def _tick(self):
        with self._lock:
            self._current += 1
            current, total = self._current, self._total
        if self._progress:
            self._progress(current, total)
        if self.logger:
            self.logger.progress(current, total)

    # ---------- setup ----------
    def resolve_parameters(self, target: Target,
                           parameter_names: Optional[Iterable[str]] = None) -> List[str]:
        """Explicit names win; otherwise every query key already on the URL."""
        if isinstance(parameter_names, str):
            parameter_names = [parameter_names]
        names = clean_names(parameter_names or ())
        if not names:
            names = target.discover_parameters()
        if not names:
            raise NoParametersFound(target.url)
        return names

    def fetch_baseline(self, url: str) -> Baseline:
        try:
            resp = self.fetcher.fetch(url, self.config.baseline_timeout)
        except ProbeRequestFailed as exc:
            raise BaselineUnavailable(url, exc.reason) from exc
        return Baseline(status_code=resp.status_code, body_length=resp.body_length)

    # ---------- scan ----------
    def run_scan(self, target_url: str,
                 parameter_names: Optional[Iterable[str]] = None,
                 payloads: Optional[Sequence[str]] = None,
                 progress: Optional[ProgressCallback] = None) -> ScanSummary:
        """
        Test every (parameter, payload) pair against *target_url*.

        Raises InvalidUrl / NoParametersFound before any request is sent.
        Everything else (baseline or probe failures) only lowers the
        amount of signal in the returned summary.
        """
        target = Target.from_url(target_url)
        params = self.resolve_parameters(target, parameter_names)
        if payloads is None:
            payloads = build_scan_payloads(cap=self.config.payload_cap)
        payloads = list(payloads)

        originals = {name: target.original_value(name) for name in params}
        total = len(params) * len(payloads)

        self._stop.clear()
        with self._lock:
            self._current = 0
            self._total = total
        self._progress = progress

        if self.logger:
            self.logger.info(f"Scanning {self.checker.name} on {target.url}")
            self.logger.info(f"Parameters: {', '.join(params)} · "
                             f"{len(payloads)} payloads · {total} tests")

        try:
            baseline = self.fetch_baseline(target.url)
        except BaselineUnavailable as exc:
            baseline = Baseline()
            if self.logger:
                self.logger.warn(f"{exc}; classifying without baseline")
        else:
            if self.logger:
                self.logger.debug(f"Baseline: HTTP {baseline.status_code}, "
                                  f"{baseline.body_length} chars")

        probes: List[_Probe] = []
        for param in params:
            if self.logger and not target.has_parameter(param):
                self.logger.debug(f"Param {param} not on URL, appending it")
            for payload in payloads:
                probes.append((param, originals[param], payload,
                               target.with_parameter(param, payload)))

        results = self._sweep(probes, baseline)

        summaries = []
        for param in params:
            vuln = sum(1 for r in results if r.parameter == param and r.vulnerable)
            summaries.append(ParameterSummary(
                name=param, original_value=originals[param],
                total_tests=len(payloads), vulnerable_count=vuln))

        summary = ScanSummary(
            base_url=target.url,
            parameters=tuple(summaries),
            total_tests=total,
            vulnerable_count=sum(1 for r in results if r.vulnerable),
            results=tuple(results),
            baseline=baseline,
            cancelled=self._stop.is_set(),
        )

        if self.logger:
            if summary.cancelled:
                self.logger.warn("Scan cancelled; results are partial.")
            if not summary.vulnerable_count:
                self.logger.fail(f"No findings for {self.checker.name}")
        return summary

    def _sweep(self, probes: List[_Probe], baseline: Baseline) -> List[ProbeResult]:
        if self.config.workers <= 1:
            out = [self._probe(p, baseline) for p in probes]
        else:
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                futures = [pool.submit(self._probe, p, baseline) for p in probes]
                out = [f.result() for f in futures]
        # futures are collected in submission order, which is the
        # parameter-major / payload-minor order of `probes`
        return [r for r in out if r is not None]

    def _probe(self, probe: _Probe, baseline: Baseline) -> Optional[ProbeResult]:
        param, original, payload, url = probe
        if self._stop.is_set():
            return None
        self._tick()

        if self.logger and self.logger.verbose >= 2:
            self.logger.debug(
                f"→ GET {param}={self.logger.PAY}{payload}{Style.RESET_ALL}")
        try:
            resp = self.fetcher.fetch(url, self.config.request_timeout)
        except ProbeRequestFailed as exc:
            if self.logger:
                self.logger.debug(f"Skipping {param}={payload!r}: {exc}")
            return None

        indicators, detection, confidence = self.checker.check(baseline, resp)
        result = ProbeResult(
            parameter=param,
            original_value=original,
            tested_url=url,
            payload=payload,
            status_code=resp.status_code,
            content_length=resp.body_length,
            indicators=tuple(indicators),
            detection=detection,
            confidence=confidence,
            sample=resp.body[:self.config.sample_size],
        )
        if self.logger and result.vulnerable:
            self.logger.finding(result)
        return result
