"""Headless browser sessions for the scrapers"""

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, ContextManager, Iterator, Optional

from playwright.sync_api import Error as PlaywrightError, Page, sync_playwright

from matchday.utils.errors import NavigationError
from matchday.utils.logging import get_logger

logger = get_logger("scrapers.browser")

LAUNCH_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
    '--disable-accelerated-2d-canvas',
    '--no-first-run',
    '--no-zygote',
    '--disable-gpu',
]

USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)


@dataclass
class BrowserSettings:
    """Launch options shared by every stage"""
    headless: bool = True
    executable_path: Optional[str] = None
    navigation_timeout_ms: int = 30000


SessionFactory = Callable[[BrowserSettings], ContextManager[Page]]


@contextmanager
def browser_session(settings: BrowserSettings) -> Iterator[Page]:
    """Launch a dedicated browser and yield a page. The browser is always closed."""
    with sync_playwright() as p:
        browser = p.chromium.launch(
            headless=settings.headless,
            executable_path=settings.executable_path,
            args=LAUNCH_ARGS,
        )
        try:
            context = browser.new_context(
                user_agent=USER_AGENT,
                viewport={'width': 1920, 'height': 1080},
            )
            context.set_default_navigation_timeout(settings.navigation_timeout_ms)
            page = context.new_page()
            yield page
        finally:
            browser.close()
            logger.debug("Browser session closed")


def navigate(page: Page, url: str, timeout_ms: Optional[int] = None) -> None:
    """Open a page and wait for the network to go quiet"""
    try:
        if timeout_ms is None:
            page.goto(url, wait_until='networkidle')
        else:
            page.goto(url, wait_until='networkidle', timeout=timeout_ms)
    except PlaywrightError as e:
        raise NavigationError(f"Failed to load {url}: {e}") from e


@contextmanager
def network_settled(page: Page, idle_ms: int = 500, timeout_ms: int = 30000, poll_ms: int = 50) -> Iterator[None]:
    """Wait, after the body runs, until no request has been in flight for ``idle_ms``.

    Listeners are attached before the body so that requests fired by a click
    inside it are counted.
    """
    inflight = [0]

    def on_request(_request) -> None:
        inflight[0] += 1

    def on_request_done(_request) -> None:
        inflight[0] = max(0, inflight[0] - 1)

    page.on('request', on_request)
    page.on('requestfinished', on_request_done)
    page.on('requestfailed', on_request_done)
    try:
        yield
        deadline = time.monotonic() + timeout_ms / 1000
        quiet_since = time.monotonic()
        while True:
            now = time.monotonic()
            if inflight[0] > 0:
                quiet_since = now
            elif (now - quiet_since) * 1000 >= idle_ms:
                return
            if now >= deadline:
                raise NavigationError(
                    f"Network did not settle within {timeout_ms}ms ({inflight[0]} requests in flight)"
                )
            page.wait_for_timeout(poll_ms)
    finally:
        page.remove_listener('request', on_request)
        page.remove_listener('requestfinished', on_request_done)
        page.remove_listener('requestfailed', on_request_done)
