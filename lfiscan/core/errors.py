"""Exception taxonomy for the LFI scanner.

Only InvalidUrl and NoParametersFound (and ScrapeFailed for the endpoint
scraper) ever reach the caller. The rest are raised and handled inside
the scan so a single bad response never aborts the sweep.
"""


class LfiScanError(Exception):
    """Base class for every scanner error."""


class InvalidUrl(LfiScanError, ValueError):
    """Target is not an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = "not an absolute http(s) URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class NoParametersFound(LfiScanError, ValueError):
    """Neither explicit nor discovered query parameters to test."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"No query parameters found to test for LFI in {url!r}. "
            "Add parameters to the URL or specify a parameter name."
        )


class WordlistUnavailable(LfiScanError):
    """External wordlist could not be read."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        msg = f"Wordlist unavailable: {source}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class ProbeRequestFailed(LfiScanError):
    """A single fetch failed (network error, timeout, malformed URL)."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"Request to {url} failed: {reason}" if reason
                         else f"Request to {url} failed")


class BaselineUnavailable(ProbeRequestFailed):
    """The unmodified target could not be fetched."""


class ScrapeFailed(LfiScanError):
    """The page handed to the endpoint scraper could not be fetched."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to scrape {url}: {reason}" if reason
                         else f"Failed to scrape {url}")
