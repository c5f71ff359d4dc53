# tests/fakes.py
from contextlib import contextmanager
from urllib.parse import unquote_plus


SEARCH_RESULTS_HTML = """
<html><body><div id="search">
  <div class="g">
    <a href="https://boards.greenhouse.io/zalando/jobs/4471"><h3>Backend Engineer at Zalando</h3></a>
    <div class="VwiC3b">Build payment services in Berlin, Germany.</div>
  </div>
  <div class="g">
    <a href="/url?q=https://boards.greenhouse.io/acme/jobs/9&amp;sa=U"><h3>Data Engineer - Acme...</h3></a>
  </div>
  <div class="g"><h3>Result without a link</h3></div>
</div></body></html>
"""

WIDGET_HTML = """
<html><body><ul>
  <li><div role="heading">Senior Python Developer</div><div>Contoso GmbH</div><div>Berlin</div></li>
  <li><div role="heading">Platform Engineer</div>
      <div>This company description is far too long to be a company name</div></li>
  <li><span>No heading here</span></li>
</ul></body></html>
"""

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel>
  <title>Remote Programming Jobs</title>
  <item>
    <title>Go Developer (Germany only)</title>
    <link>https://example.com/jobs/1</link>
    <guid>https://example.com/jobs/1</guid>
    <description>&lt;p&gt;Remote role for people based in &lt;b&gt;Germany&lt;/b&gt;.&lt;/p&gt;</description>
    <pubDate>Mon, 06 Oct 2025 10:00:00 +0000</pubDate>
  </item>
  <item>
    <title>Rust Engineer</title>
    <link>https://example.com/jobs/2</link>
    <guid>job-2</guid>
    <description>Work from anywhere.</description>
  </item>
</channel></rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Jobs</title>
  <entry>
    <title>Frontend Developer, India</title>
    <link href="https://example.org/jobs/a"/>
    <id>urn:job:a</id>
    <updated>2025-10-01T08:30:00Z</updated>
    <summary>React work</summary>
  </entry>
</feed>
"""

class FakeSession:
    """BrowserSession double serving canned HTML keyed by a marker in the decoded URL."""

    def __init__(self, pages=None, default='', fail_on=(), listing_ready=True):
        self.pages = pages or {}
        self.default = default
        self.fail_on = tuple(fail_on)
        self.listing_ready = listing_ready
        self.visited = []
        self._url = 'about:blank'

    @property
    def url(self):
        return self._url

    def navigate(self, url, timeout_ms=30000):
        decoded = unquote_plus(url)
        self.visited.append(decoded)
        self._url = url
        for marker in self.fail_on:
            if marker in decoded:
                raise RuntimeError(f"blocked while loading {marker}")

    def wait_for(self, selector, timeout_ms=10000):
        return self.listing_ready

    def content(self):
        decoded = unquote_plus(self._url)
        for marker, html in self.pages.items():
            if marker in decoded:
                return html
        return self.default

class FakeSessionFactory:
    def __init__(self, session):
        self.session = session
        self.opened = 0
        self.closed = 0
        self.viewports = []

    @contextmanager
    def __call__(self, settings, viewport=None):
        self.opened += 1
        self.viewports.append(viewport)
        try:
            yield self.session
        finally:
            self.closed += 1
