"""
Headless browser sessions for the search-engine strategies.

Strategies only talk to the small :class:`BrowserSession` surface so tests can
swap in a fake that serves canned HTML. The real implementation drives
Chromium through Playwright with the usual automation fingerprints hidden.
"""

import logging
from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Optional, Protocol

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from .config import ScrapeSettings

logger = logging.getLogger(__name__)


STEALTH_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
    '--disable-blink-features=AutomationControlled',
    '--disable-extensions',
    '--no-first-run',
    '--no-default-browser-check',
    '--disable-background-timer-throttling',
    '--disable-backgrounding-occluded-windows',
    '--disable-renderer-backgrounding',
    '--disable-ipc-flooding-protection',
    '--disable-default-apps',
    '--disable-sync',
    '--disable-translate',
    '--hide-scrollbars',
    '--mute-audio',
    '--no-pings',
    '--password-store=basic',
    '--use-mock-keychain',
    '--lang=en-US,en',
]

STEALTH_INIT_SCRIPT = """
    // Remove webdriver property
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined,
    });

    // Mock plugins
    Object.defineProperty(navigator, 'plugins', {
        get: () => [1, 2, 3, 4, 5],
    });

    // Mock chrome object
    window.chrome = {
        runtime: {},
        loadTimes: function() {},
        csi: function() {},
        app: {}
    };

    // Mock permissions
    if (window.navigator.permissions) {
        const originalQuery = window.navigator.permissions.query;
        window.navigator.permissions.query = (parameters) => (
            parameters.name === 'notifications' ?
                Promise.resolve({ state: Notification.permission }) :
                originalQuery(parameters)
        );
    }

    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en'],
    });

    Object.defineProperty(navigator, 'platform', {
        get: () => 'Win32',
    });

    delete navigator.__proto__.webdriver;
"""

DEFAULT_VIEWPORT = {'width': 1920, 'height': 1080}


class BrowserSession(Protocol):
    """What a strategy needs from a browser tab."""

    @property
    def url(self) -> str: ...

    def navigate(self, url: str, timeout_ms: int = 30000) -> None: ...

    def wait_for(self, selector: str, timeout_ms: int = 10000) -> bool: ...

    def content(self) -> str: ...


SessionFactory = Callable[..., ContextManager[BrowserSession]]


class PlaywrightSession:
    """BrowserSession backed by a Playwright page."""

    def __init__(self, page):
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    def navigate(self, url: str, timeout_ms: int = 30000) -> None:
        self._page.goto(url, wait_until='networkidle', timeout=timeout_ms)

    def wait_for(self, selector: str, timeout_ms: int = 10000) -> bool:
        """Wait for ``selector`` to appear; a timeout is reported, not raised."""
        try:
            self._page.wait_for_selector(selector, timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            logger.debug("Timed out waiting for %s on %s", selector, self._page.url)
            return False

    def content(self) -> str:
        return self._page.content()


@contextmanager
def open_browser_session(
    settings: ScrapeSettings,
    viewport: Optional[dict] = None,
) -> Iterator[BrowserSession]:
    """
    Launch a stealth Chromium, yield one tab, and always tear the browser down.

    The browser process is closed on every exit path, including exceptions
    raised by the caller while the session is open.
    """
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=settings.headless, args=STEALTH_ARGS)
        try:
            context = browser.new_context(
                user_agent=settings.user_agent,
                viewport=viewport or DEFAULT_VIEWPORT,
                locale='en-US',
                extra_http_headers={
                    'Accept-Language': 'en-US,en;q=0.9',
                    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
                    'Upgrade-Insecure-Requests': '1',
                },
            )
            context.add_init_script(STEALTH_INIT_SCRIPT)
            page = context.new_page()
            yield PlaywrightSession(page)
        finally:
            try:
                browser.close()
            except PlaywrightError as exc:
                logger.warning("Browser did not close cleanly: %s", exc)
