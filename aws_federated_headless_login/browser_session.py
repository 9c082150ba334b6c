"""
Playwright-based browser session that clicks through the consent screen
"""
import asyncio
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from logging import Logger, getLogger

from playwright.async_api import Browser, BrowserContext
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page, Playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .common import (
    AllowButtonNotFoundError,
    AutomationError,
    BrowserConnectError,
    BrowserLaunchError,
    ClosedPipeError,
    LoginConfig,
    PageTimeoutError,
    allow_button_label,
    closed_pipe_error_text,
    confirm_button_label,
)
from .credential_store import CredentialStore
from .status import NullStatusReporter, StatusReporter

default_logger = getLogger(__name__)


def is_closed_pipe_error(e: BaseException) -> bool:
    return isinstance(e, BrokenPipeError) or closed_pipe_error_text in str(e)


@asynccontextmanager
async def async_browser_session(
    config: LoginConfig | None = None,
    reporter: StatusReporter = NullStatusReporter(),
    store: CredentialStore | None = None,
    logger: Logger = default_logger,
) -> AsyncIterator["BrowserSession"]:
    """
    Context manager for launching a browser and preparing a session in it.

    This is the main starting point for automating a login. The yielded
    session already has the previously persisted credential (if any)
    injected.

    Args:
        config: Login configuration (headless mode, timeouts, ...).
        reporter: Receiver of progress messages and warnings.
        store: Credential store to load/save the session cookie with.
            Defaults to one using the path from ``config``.
        logger: Logger to log messages to.

    Raises:
        BrowserLaunchError: If the browser can't be started.
        BrowserConnectError: If no session can be opened in the browser.
    """
    if config is None:
        config = LoginConfig()
    reporter.progress("launching browser")
    try:
        playwright = await async_playwright().start()
    except (PlaywrightError, OSError) as e:
        raise BrowserLaunchError(f"could not start Playwright: {e}") from e
    try:
        browser = await _launch_browser(playwright, config, logger)
        try:
            context = await _connect_session(browser, config)
            session = await BrowserSession.make_with_credential_injected(
                context, config, reporter, store, logger
            )
            yield session
        finally:
            # the browser might already be gone, e.g. closed by the user
            with suppress(PlaywrightError):
                await browser.close()
    finally:
        await playwright.stop()


async def _launch_browser(
    playwright: Playwright, config: LoginConfig, logger: Logger
) -> Browser:
    logger.info("launching chromium (headless: %s)", config.headless)
    try:
        return await playwright.chromium.launch(headless=config.headless)
    except (PlaywrightError, OSError) as e:
        raise BrowserLaunchError(f"could not launch browser: {e}") from e


async def _connect_session(
    browser: Browser, config: LoginConfig
) -> BrowserContext:
    try:
        context = await browser.new_context()
    except PlaywrightError as e:
        raise BrowserConnectError(f"could not connect to browser: {e}") from e
    context.set_default_timeout(config.timeout * 1000)
    return context


class BrowserSession:
    """
    Browser session driving the device authorization consent screen.

    Should normally not be instantiated directly but through
    :any:`async_browser_session`, which takes care of launching the browser.
    """

    def __init__(
        self,
        context: BrowserContext,
        config: LoginConfig | None = None,
        reporter: StatusReporter = NullStatusReporter(),
        store: CredentialStore | None = None,
        logger: Logger = default_logger,
    ):
        self.context = context
        self.config = config if config is not None else LoginConfig()
        self.reporter = reporter
        self.store = (
            store
            if store is not None
            else CredentialStore(self.config.credential_path, reporter)
        )
        self.logger = logger

    @classmethod
    async def make_with_credential_injected(
        cls, *args, **kwargs
    ) -> "BrowserSession":
        """
        Convenience method to instantiate with the prior credential injected.
        """
        session = cls(*args, **kwargs)
        await session.inject_prior_credential()
        return session

    async def inject_prior_credential(self) -> bool:
        """
        Put the persisted session cookie (if any) into the browser.

        Must happen before navigating anywhere so the identity provider can
        recognize the existing session.

        Returns:
            Whether a credential was injected.
        """
        self.reporter.progress("loading cookies")
        credential = self.store.load()
        if credential is None:
            return False
        try:
            await self.context.add_cookies([credential.to_set_cookie_param()])
        except (ValueError, PlaywrightError) as e:
            self.reporter.warning(f"could not use stored credential: {e}")
            return False
        self.logger.info("injected stored %s cookie", credential.name)
        return True

    async def open_page(self, url: str) -> Page:
        self.reporter.progress("opening url")
        page = await self.context.new_page()
        await page.goto(url)
        return page

    @staticmethod
    def _buttons(page: Page, label: str) -> Locator:
        return page.locator("button", has_text=re.compile(re.escape(label)))

    async def confirm(self, page: Page) -> None:
        """
        Click the "Confirm and continue" button once it can be clicked.

        Waits for ``config.settle_delay`` seconds afterwards to give the page
        time to transition.
        """
        self.reporter.progress(f"clicking {confirm_button_label} button")
        button = self._buttons(page, confirm_button_label).first
        await button.wait_for(state="visible")
        await button.click()
        await asyncio.sleep(self.config.settle_delay)

    async def wait_for_allow_button(self, page: Page) -> Locator:
        """
        Poll for the "Allow" button until it shows up.

        There is no deadline for this unless
        ``config.max_allow_poll_attempts`` is set. Failed lookups (e.g. while
        the page is still navigating) count as not found.

        Raises:
            AllowButtonNotFoundError: If the maximum number of attempts was
                reached without finding the button.
        """
        self.reporter.progress(f"waiting for {allow_button_label} button")
        buttons = self._buttons(page, allow_button_label)
        max_attempts = self.config.max_allow_poll_attempts
        attempt = 0
        while True:
            attempt += 1
            try:
                found = await buttons.count() > 0
            except PlaywrightTimeoutError:
                raise
            except PlaywrightError as e:
                if is_closed_pipe_error(e):
                    raise
                self.logger.debug(
                    "looking for %s button failed: %s", allow_button_label, e
                )
                found = False
            if found:
                self.logger.info(
                    "found %s button after %d attempt(s)",
                    allow_button_label,
                    attempt,
                )
                return buttons.first
            if max_attempts is not None and attempt >= max_attempts:
                raise AllowButtonNotFoundError(
                    f"no {allow_button_label} button found "
                    f"after {attempt} attempts"
                )
            await asyncio.sleep(self.config.allow_poll_interval)

    async def allow(self, page: Page) -> None:
        button = await self.wait_for_allow_button(page)
        self.reporter.progress(f"clicking {allow_button_label} button")
        await button.wait_for(state="visible")
        await button.click()

    async def persist_credential(self) -> bool:
        """
        Save the session cookie the browser now holds, if it holds one.
        """
        self.reporter.progress("saving cookies")
        return self.store.save(await self.context.cookies())

    async def login(self, url: str) -> None:
        """
        Go through the consent screen at the given URL and persist the result.

        Args:
            url: Device authorization URL as printed by the AWS CLI.

        Raises:
            PageTimeoutError: If a page or element took too long to show up.
            ClosedPipeError: If the process' output was closed.
            AllowButtonNotFoundError: See :meth:`wait_for_allow_button`.
            AutomationError: For all other errors in the browser.
        """
        try:
            page = await self.open_page(url)
            await self.confirm(page)
            await self.allow(page)
            await self.persist_credential()
        except PlaywrightTimeoutError as e:
            self.logger.debug("timeout: %s", e)
            raise PageTimeoutError() from e
        except (PlaywrightError, OSError) as e:
            if is_closed_pipe_error(e):
                raise ClosedPipeError(str(e)) from e
            raise AutomationError(str(e)) from e
