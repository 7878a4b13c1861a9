import httpx
import pytest

from lfiscan.core.engine import Engine
from lfiscan.core.errors import ProbeRequestFailed
from lfiscan.core.fetcher import HttpFetcher
from lfiscan.core.models import Detection


def handler(request: httpx.Request) -> httpx.Response:
    file = request.url.params.get("file", "")
    if file == "slow":
        raise httpx.ReadTimeout("read timed out", request=request)
    if file == "down":
        raise httpx.ConnectError("connection refused", request=request)
    if file == "/etc/passwd":
        return httpx.Response(200, text="root:x:0:0:root:/root:/bin/bash\n")
    if file == "missing":
        return httpx.Response(404, text="<b>Warning</b>: include(missing): Failed opening")
    return httpx.Response(200, text="<p>home page</p>")


@pytest.fixture
def fetcher():
    f = HttpFetcher(transport=httpx.MockTransport(handler))
    yield f
    f.close()


def test_success_reads_body(fetcher):
    resp = fetcher.fetch("http://lab.test/?file=home", timeout=1.0)
    assert resp.status_code == 200
    assert resp.body == "<p>home page</p>"
    assert resp.body_length == len("<p>home page</p>")


def test_non_2xx_body_is_dropped(fetcher):
    resp = fetcher.fetch("http://lab.test/?file=missing", timeout=1.0)
    assert resp.status_code == 404
    assert resp.body == ""


def test_timeout_raises_probe_failure(fetcher):
    with pytest.raises(ProbeRequestFailed) as exc:
        fetcher.fetch("http://lab.test/?file=slow", timeout=0.1)
    assert exc.value.reason == "timed out"
    assert exc.value.url == "http://lab.test/?file=slow"


def test_network_error_raises_probe_failure(fetcher):
    with pytest.raises(ProbeRequestFailed):
        fetcher.fetch("http://lab.test/?file=down", timeout=1.0)


def test_user_agent_header():
    seen = {}

    def capture(request):
        seen["ua"] = request.headers.get("user-agent")
        return httpx.Response(200)

    with HttpFetcher(user_agent="lfiscan-test", transport=httpx.MockTransport(capture)) as f:
        f.fetch("http://lab.test/", timeout=1.0)
    assert seen["ua"] == "lfiscan-test"


def test_engine_over_http_fetcher(fetcher):
    summary = Engine(fetcher=fetcher).run_scan(
        "http://lab.test/view?file=home", None,
        ["/etc/passwd", "slow", "down", "missing", "home"])

    assert summary.total_tests == 5
    by_payload = {r.payload: r for r in summary.results}
    assert set(by_payload) == {"/etc/passwd", "missing", "home"}
    assert by_payload["/etc/passwd"].detection is Detection.CONFIRMED_LFI
    # 404 body is never read, so the include warning does not count
    assert by_payload["missing"].indicators == ()
    assert by_payload["missing"].detection is Detection.POSSIBLE_LFI
    assert by_payload["home"].detection is Detection.NOT_VULNERABLE
