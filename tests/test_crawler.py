import httpx
import pytest

from lfiscan.core.crawler import Scraper, parse_page, should_skip_script
from lfiscan.core.errors import InvalidUrl, ScrapeFailed

PAGE = """<html><head>
<script src="/static/app.js"></script>
<script src="https://cdn.example.net/lib.js"></script>
<script src="js/vendor.js"></script>
<script src="/static/evil.js"></script>
<script src="/static/broken.js"></script>
</head><body>
<button onclick="fetch(&quot;/api/escaped/click&quot;)">go</button>
<div data-href="reports.php?year=2024"></div>
<div data-src="/img/a.png"></div>
<script>var s = 1;</script>
</body></html>
"""

APP_JS = "fetch('/api/products');\nxhr.open('DELETE', '/api/orders/42');\n"


def make_client(requested, page_status=200):
    def handler(request):
        requested.append(str(request.url))
        path = request.url.path
        if path == "/":
            return httpx.Response(page_status, text=PAGE)
        if path == "/static/app.js":
            return httpx.Response(200, text=APP_JS)
        if path == "/static/evil.js":
            return httpx.Response(200, text="eval(x); fetch('/api/evil')")
        if path == "/static/broken.js":
            return httpx.Response(500)
        return httpx.Response(404)
    return httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)


def test_scrape_page_and_scripts():
    requested = []
    result = Scraper(make_client(requested)).scrape("http://site.test/")
    by_url = {e.url: e for e in result.endpoints}

    assert result.domain == "site.test"
    assert result.total_count == len(result.endpoints)

    assert by_url["/api/products"].source == "JS: http://site.test/static/app.js"
    assert by_url["/api/products"].line == 1
    assert by_url["/api/orders/42"].method == "DELETE"
    assert by_url["/api/escaped/click"].source == "Event Handler 1"
    assert by_url["reports.php"].source == "Data Attribute 1"
    assert by_url["reports.php"].type == "page"
    assert by_url["reports.php"].line == 0

    assert "/api/evil" not in by_url
    assert "/img/a.png" not in by_url
    assert len(by_url) == len(result.endpoints)

    assert "https://cdn.example.net/lib.js" not in requested
    assert not any("vendor" in u for u in requested)
    assert "http://site.test/static/broken.js" in requested


def test_max_scripts():
    requested = []
    Scraper(make_client(requested), max_scripts=1).scrape("http://site.test/")
    assert requested == ["http://site.test/", "http://site.test/static/app.js"]


def test_page_error_raises():
    with pytest.raises(ScrapeFailed, match="HTTP 503"):
        Scraper(make_client([], page_status=503)).scrape("http://site.test/")


def test_network_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)
    client = httpx.Client(transport=httpx.MockTransport(handler))
    with pytest.raises(ScrapeFailed):
        Scraper(client).scrape("http://site.test/")


def test_invalid_url():
    with pytest.raises(InvalidUrl):
        Scraper(make_client([])).scrape("site.test")


def test_parse_page():
    page = parse_page(PAGE)
    assert page.script_srcs[0] == "/static/app.js"
    assert len(page.script_srcs) == 5
    assert page.inline_scripts == ["var s = 1;"]
    assert page.handlers == [(1, 'fetch("/api/escaped/click")')]
    assert page.data_urls == [(1, "reports.php?year=2024"), (2, "/img/a.png")]


def test_should_skip_script():
    assert should_skip_script("https://cdn.x/y.js")
    assert should_skip_script("/js/app.min.js")
    assert should_skip_script("/dist/bundle.js")
    assert not should_skip_script("/static/app.js")


def test_handlers_and_data_attributes_numbered_per_element():
    page = parse_page("""<html><body>
<img src="x.png" onload="track(1)" onerror="track(2)">
<button onclick="track(3)">go</button>
<div data-url="/api/one" data-href="/api/two"></div>
<div data-src="/api/three"></div>
</body></html>""")

    assert page.handlers == [(1, "track(1)"), (1, "track(2)"), (2, "track(3)")]
    assert page.data_urls == [(1, "/api/one"), (1, "/api/two"), (2, "/api/three")]


def test_scraped_handler_labels_follow_element_number():
    html = ('<img onload="fetch(&quot;/api/track/load&quot;)" '
            'onerror="fetch(&quot;/api/track/error&quot;)">'
            '<button onclick="fetch(&quot;/api/track/click&quot;)">go</button>')

    def handler(request):
        return httpx.Response(200, text=html)
    client = httpx.Client(transport=httpx.MockTransport(handler))
    by_url = {e.url: e for e in Scraper(client).scrape("http://site.test/").endpoints}

    assert by_url["/api/track/load"].source == "Event Handler 1"
    assert by_url["/api/track/error"].source == "Event Handler 1"
    assert by_url["/api/track/click"].source == "Event Handler 2"
