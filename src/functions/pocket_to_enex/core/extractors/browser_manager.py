"""Lifecycle of the shared headless browser used by the browser extractor."""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Optional

import psutil
from playwright.async_api import async_playwright

from src.shared.batch import BrowserPool

from .light_extractor import DEFAULT_USER_AGENT


class BrowserState(str, Enum):
    UNSTARTED = "unstarted"
    RUNNING = "running"
    RESTARTING = "restarting"
    CLOSED = "closed"


def _descendant_pids() -> set[int]:
    try:
        return {child.pid for child in psutil.Process().children(recursive=True)}
    except psutil.Error:
        return set()


class BrowserManager:
    """Owns one Chromium process and the pool of pages leased from it.

    The browser starts lazily on the first lease and is restarted every
    ``restart_interval`` leases to bound memory growth. :meth:`close` is
    idempotent; once closed, further leases fail.
    """

    _LAUNCH_ARGS = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--disable-web-security",
        "--disable-features=IsolateOrigins,site-per-process",
        "--disable-blink-features=AutomationControlled",
    ]

    def __init__(
        self,
        *,
        max_pages: int = 10,
        restart_interval: int = 1000,
        launch_timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self.launch_timeout = launch_timeout
        self.state = BrowserState.UNSTARTED
        self._playwright: Any = None
        self._browser: Any = None
        self._process_ids: set[int] = set()
        self._launch_lock = asyncio.Lock()
        self.pool = BrowserPool(
            open_page=self._open_page,
            close_page=self._close_page,
            on_recycle=self.restart,
            max_pages=max_pages,
            recycle_interval=restart_interval,
        )

    @property
    def processed_count(self) -> int:
        """Cumulative leases, kept across restarts."""
        return self.pool.leases

    async def _launch(self) -> tuple[Any, Any]:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=True,
                args=self._LAUNCH_ARGS,
                ignore_default_args=["--enable-automation"],
                timeout=self.launch_timeout * 1000,
                handle_sigint=False,
                handle_sigterm=False,
                handle_sighup=False,
            )
        except BaseException:
            await playwright.stop()
            raise
        return playwright, browser

    async def _ensure_browser(self) -> Any:
        async with self._launch_lock:
            if self.state is BrowserState.CLOSED:
                raise RuntimeError("Browser manager is closed")
            if self._browser is None:
                before = _descendant_pids()
                self._playwright, self._browser = await self._launch()
                self._process_ids = _descendant_pids() - before
                self.state = BrowserState.RUNNING
                self._logger.info("Started headless browser")
            return self._browser

    async def _open_page(self) -> Any:
        browser = await self._ensure_browser()
        return await browser.new_page(user_agent=DEFAULT_USER_AGENT, ignore_https_errors=True)

    async def _close_page(self, page: Any) -> None:
        await page.close()

    async def lease(self) -> Any:
        return await self.pool.acquire()

    async def release(self, page: Any) -> None:
        await self.pool.release(page)

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Any]:
        """Lease a page for the duration of the block; it is always returned."""
        page = await self.lease()
        try:
            yield page
        finally:
            await self.release(page)

    async def restart(self) -> None:
        """Close the browser; the next lease starts a fresh one."""
        if self.state is BrowserState.CLOSED:
            return
        self.state = BrowserState.RESTARTING
        self._logger.info("Restarting browser after %d processed pages", self.processed_count)
        async with self._launch_lock:
            await self._teardown()
        if self.state is BrowserState.RESTARTING:
            self.state = BrowserState.UNSTARTED

    async def close(self) -> None:
        """Close every page and the browser. Safe to call more than once."""
        if self.state is BrowserState.CLOSED:
            return
        self.state = BrowserState.CLOSED
        self._logger.info("Cleaning up browser resources...")
        await self.pool.shutdown()
        async with self._launch_lock:
            await self._teardown()

    async def _teardown(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        process_ids, self._process_ids = self._process_ids, set()

        if browser is not None:
            try:
                for context in list(browser.contexts):
                    for page in list(context.pages):
                        try:
                            await page.close()
                        except Exception as exc:
                            self._logger.warning("Page close error: %s", exc)
                    await context.close()
                await browser.close()
                self._logger.info("Browser closed successfully")
            except Exception as exc:
                self._logger.error("Error closing browser: %s", exc)
                self._force_kill(process_ids)

        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as exc:
                self._logger.warning("Error stopping browser driver: %s", exc)

    def _force_kill(self, process_ids: set[int]) -> int:
        """Kill the browser processes and their descendants."""
        victims: dict[int, psutil.Process] = {}
        for pid in process_ids:
            try:
                process = psutil.Process(pid)
                victims[pid] = process
                for child in process.children(recursive=True):
                    victims[child.pid] = child
            except psutil.NoSuchProcess:
                continue
            except psutil.Error as exc:
                self._logger.error("Failed to inspect browser process %s: %s", pid, exc)

        if not victims:
            return 0

        self._logger.warning("Force killing %d browser processes", len(victims))
        for process in victims.values():
            try:
                process.kill()
            except psutil.NoSuchProcess:
                pass
            except psutil.Error as exc:
                self._logger.error("Failed to kill browser process %s: %s", process.pid, exc)
        psutil.wait_procs(list(victims.values()), timeout=3)
        return len(victims)


def install_shutdown_handlers(
    manager: BrowserManager,
    *,
    main_task: Optional[asyncio.Task] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Close the browser on SIGINT/SIGTERM and on unhandled task failures.

    When ``main_task`` is given it is cancelled once cleanup has finished, so
    the entry point decides how to exit.
    """

    log = logger or logging.getLogger(__name__)
    loop = asyncio.get_running_loop()
    pending: set[asyncio.Task] = set()

    def _schedule_cleanup() -> None:
        task = loop.create_task(manager.close())
        pending.add(task)
        task.add_done_callback(pending.discard)
        if main_task is not None:
            task.add_done_callback(lambda _: main_task.cancel())

    def _on_signal(signame: str) -> None:
        log.warning("Received %s, shutting down gracefully...", signame)
        _schedule_cleanup()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig.name)
        except (NotImplementedError, RuntimeError):
            log.debug("Signal handler for %s not supported on this platform", sig.name)

    previous = loop.get_exception_handler()

    def _on_exception(event_loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        log.error(
            "Unhandled asynchronous failure: %s",
            context.get("message"),
            exc_info=context.get("exception"),
        )
        _schedule_cleanup()
        if previous is not None:
            previous(event_loop, context)

    loop.set_exception_handler(_on_exception)
