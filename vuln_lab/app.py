"""VulnLab — Deliberately vulnerable web server for lfiscan testing.

The LFI endpoint resolves paths against an in-memory file system instead of
the real disk, so traversal payloads behave like they would on a Linux/PHP
host without ever reading files from the machine running the lab.
"""

import posixpath
import re

from flask import Flask, request, render_template_string, Response

app = Flask(__name__)

WEB_ROOT = "/var/www/html/pages"

# ── Fake file system ────────────────────────────────────────────

FILES = {
    "/etc/passwd": (
        "root:x:0:0:root:/root:/bin/bash\n"
        "daemon:x:1:1:daemon:/usr/sbin:/usr/sbin/nologin\n"
        "www-data:x:33:33:www-data:/var/www:/usr/sbin/nologin\n"
    ),
    "/etc/hosts": "127.0.0.1 localhost\n::1 localhost ip6-localhost\n",
    "/proc/version": "Linux version 5.15.0-91-generic (buildd@lcy02-amd64-045)\n",
    "/proc/self/environ": "PATH=/usr/local/bin:/usr/bin\x00HOME=/var/www\x00",
    "/windows/win.ini": "; for 16-bit app support\n[fonts]\n[extensions]\n",
    "/var/www/html/pages/home.php": "Welcome home! Latest news and updates.",
    "/var/www/html/pages/about.php": "About us: a small shop selling things.",
}

_DRIVE = re.compile(r"^[a-zA-Z]:")


def resolve(name: str) -> str:
    """Map a user-supplied include name onto the fake file system."""
    # VULNERABLE: naive null-byte truncation, no traversal filtering
    for nul in ("%00", "\x00"):
        name = name.split(nul, 1)[0]
    name = _DRIVE.sub("", name.replace("\\", "/"))
    if not name.startswith("/"):
        name = posixpath.join(WEB_ROOT, name)
    return posixpath.normpath(name).lower()


# ── Shared HTML layout ──────────────────────────────────────────

_LAYOUT = """<!DOCTYPE html>
<html><head><title>VulnLab — {{ title }}</title>
<script src="/static/app.js"></script>
<script src="https://cdn.example.net/jquery.min.js"></script>
</head>
<body>
<h1>VulnLab</h1>
<p><a href="/">Home</a></p>
<h2>{{ title }}</h2>
{{ content|safe }}
</body></html>
"""


def page(title, content):
    return render_template_string(_LAYOUT, title=title, content=content)


# ══════════════════════════════════════════════════════════════════
#  HOME — links, inline scripts and attributes for endpoint discovery
# ══════════════════════════════════════════════════════════════════

@app.route("/")
def home():
    return page("Home", """
    <ul>
        <li><a href="/lfi?file=home.php">Local File Inclusion</a></li>
        <li><a href="/safe?file=home.php">Whitelisted include</a></li>
    </ul>
    <button onclick="fetch('/api/v2/cart/add')">Add</button>
    <div data-url="/api/profile?id=7"></div>
    <script>
      var base = "/api/session";
      $.post('/api/login', {user: 'x'});
    </script>
    """)


_APP_JS = """
// lab client
fetch('/api/products');
axios.get('/api/orders?page=1');
var xhr = new XMLHttpRequest();
xhr.open('DELETE', '/api/orders/42');
var docs = "https://docs.vulnlab.local/reference";
var logo = '/img/logo.png';
"""


@app.route("/static/app.js")
def app_js():
    return Response(_APP_JS, mimetype="application/javascript")


# ══════════════════════════════════════════════════════════════════
#  LFI — Local File Inclusion
# ══════════════════════════════════════════════════════════════════

@app.route("/lfi", methods=["GET", "POST"])
def lfi():
    filename = request.values.get("file", "")
    if not filename:
        return page("Local File Inclusion", "<p>Provide a file path.</p>")

    # VULNERABLE: Path traversal — no sanitization
    path = resolve(filename)
    if path in FILES:
        return page("Local File Inclusion", f"<pre>{FILES[path]}</pre>")

    warning = (f"<b>Warning</b>: include({filename}): Failed opening "
               f"'{filename}' for inclusion")
    return page("Local File Inclusion", warning), 404


# ══════════════════════════════════════════════════════════════════
#  SAFE — whitelisted include, never vulnerable
# ══════════════════════════════════════════════════════════════════

_WHITELIST = {"home.php", "about.php"}


@app.route("/safe")
def safe():
    filename = request.args.get("file", "")
    if filename not in _WHITELIST:
        filename = "home.php"
    return page("Safe include", f"<pre>{FILES[resolve(filename)]}</pre>")


# ══════════════════════════════════════════════════════════════════
#  Main
# ══════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    print("\n  VulnLab starting on http://127.0.0.1:5000\n")
    app.run(host="127.0.0.1", port=5000, debug=True)
