import argparse
import sys

from lfiscan.core.config import MAX_PAYLOAD_CAP, MIN_PAYLOAD_CAP, ScanConfig
from lfiscan.core.crawler import Scraper
from lfiscan.core.engine import Engine
from lfiscan.core.errors import LfiScanError
from lfiscan.core.payloads import CATEGORY_IDS, build_scan_payloads
from lfiscan.reporters.console import Log


def payload_cap(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if not MIN_PAYLOAD_CAP <= n <= MAX_PAYLOAD_CAP:
        raise argparse.ArgumentTypeError(
            f"must be between {MIN_PAYLOAD_CAP} and {MAX_PAYLOAD_CAP}")
    return n


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lfiscan", description="LFI probe and endpoint discovery toolkit")
    p.add_argument("-v", "--verbose", action="count", default=1,
                   help="-v, -vv")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("scan", help="Probe query parameters for LFI")
    s.add_argument("url", help="Target URL (e.g. https://site/index.php?file=home.php)")
    s.add_argument("-p", "--param", action="append", dest="params", default=[],
                   help="Parameter to test (repeatable). Default: every query parameter on the URL")
    s.add_argument("--categories", nargs="+", choices=CATEGORY_IDS,
                   help="Payload categories to use (default: all)")
    s.add_argument("--wordlist", help="Extra newline-delimited payload file")
    s.add_argument("--cap", type=payload_cap, default=500,
                   help=f"Max payloads ({MIN_PAYLOAD_CAP}-{MAX_PAYLOAD_CAP}, default 500)")
    s.add_argument("--timeout", type=float, default=8.0,
                   help="Per-probe timeout in seconds")
    s.add_argument("--baseline-timeout", type=float, default=8.0,
                   help="Baseline request timeout in seconds")
    s.add_argument("--threshold", type=float, default=0.3,
                   help="Relative length delta flagged as POSSIBLE_LFI")
    s.add_argument("--workers", type=int, default=1,
                   help="Concurrent probes (default 1)")
    s.add_argument("--proxy", help="Proxy (e.g. http://127.0.0.1:8080)")

    e = sub.add_parser("endpoints", help="Scrape a page and its scripts for endpoints")
    e.add_argument("url", help="Page URL")
    e.add_argument("--max-scripts", type=int, default=10)
    return p


def run_scan(args, log: Log) -> int:
    config = ScanConfig(
        baseline_timeout=args.baseline_timeout,
        request_timeout=args.timeout,
        length_threshold=args.threshold,
        payload_cap=args.cap,
        workers=args.workers,
        proxy=args.proxy,
    )
    payloads = build_scan_payloads(args.categories, args.wordlist,
                                   cap=config.payload_cap, logger=log)
    engine = Engine(config=config, logger=log)
    try:
        summary = engine.run_scan(args.url, args.params, payloads)
    except KeyboardInterrupt:
        engine.cancel()
        log.warn("Interrupted.")
        return 130
    finally:
        engine.fetcher.close()
    log.summary(summary)
    return 0


def run_endpoints(args, log: Log) -> int:
    scraper = Scraper(logger=log, max_scripts=args.max_scripts)
    try:
        result = scraper.scrape(args.url)
    finally:
        scraper.client.close()
    for ep in result.endpoints:
        log.endpoint(ep)
    log.info(f"{result.total_count} endpoints on {result.domain}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    log = Log(verbose=args.verbose)
    try:
        if args.command == "scan":
            return run_scan(args, log)
        return run_endpoints(args, log)
    except (LfiScanError, ValueError) as exc:
        log.fail(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
