from colorama import init as colorama_init, Fore, Style
from datetime import datetime
colorama_init(autoreset=True)


class Log:
    def __init__(self, verbose: int = 1):
        self.verbose = verbose
        self.PAY = Fore.MAGENTA

    def _time(self):
        return datetime.now().strftime("[%H:%M:%S]")

    def _fmt(self, level: str, color: str):
        return f"{self._time()} {color}[{level}]{Style.RESET_ALL}"

    def info(self, msg: str):
        if self.verbose >= 1:
            print(f"{self._fmt('INFO', Fore.CYAN)} {msg}")

    def warn(self, msg: str):
        if self.verbose >= 0:
            print(f"{self._fmt('WARNING', Fore.YELLOW)} {msg}")

    def ok(self, msg: str):
        print(f"{self._fmt('SUCCESS', Fore.GREEN)} {msg}")

    def fail(self, msg: str):
        print(f"{self._fmt('FAIL', Fore.RED)} {msg}")

    def debug(self, msg: str):
        if self.verbose >= 2:
            print(f"{self._fmt('DEBUG', Fore.MAGENTA)} {msg}")

    def progress(self, current: int, total: int):
        if self.verbose >= 2:
            print(f"{self._fmt('DEBUG', Fore.MAGENTA)} "
                  f"{Style.DIM}[{current}/{total}]{Style.RESET_ALL}")

    def finding(self, result):
        col = {"High": Fore.RED, "Medium": Fore.YELLOW,
               "Low": Fore.GREEN}.get(str(result.confidence), Fore.WHITE)
        ind = ", ".join(result.indicators)
        print(f"{self._fmt(str(result.detection), col)} "
              f"{result.parameter} = {Fore.MAGENTA}{result.payload}{Style.RESET_ALL} "
              f"{Style.DIM}(HTTP {result.status_code}, {result.content_length} chars"
              f"{', ' + ind if ind else ''}){Style.RESET_ALL}")

    def summary(self, summary):
        print(f"\n{Style.BRIGHT}LFI Scan Results{Style.RESET_ALL}")
        print(f"Target: {summary.base_url}")
        params = ", ".join(
            f"{p.name} (original: {p.original_value})" if p.original_value is not None
            else p.name
            for p in summary.parameters)
        print(f"Parameters Tested: {params}")
        if not summary.baseline.available:
            print(f"{Fore.YELLOW}Baseline: unavailable{Style.RESET_ALL}")
        print(f"Total Tests: {summary.total_tests}")
        col = Fore.RED if summary.vulnerable_count else Fore.GREEN
        print(f"Vulnerable Findings: {col}{summary.vulnerable_count}{Style.RESET_ALL}")

    def endpoint(self, ep):
        col = {"api": Fore.RED, "page": Fore.GREEN,
               "static": Fore.YELLOW}.get(ep.type, Fore.WHITE)
        print(f"{col}[{ep.type}]{Style.RESET_ALL} {ep.method or '-':<6} {ep.url} "
              f"{Style.DIM}({ep.source}:{ep.line if ep.line is not None else '-'}){Style.RESET_ALL}")
