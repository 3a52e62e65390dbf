"""Async lease pool for browser pages with a recycle-every-N policy."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class BrowserPool:
    """Pool of reusable page handles leased to concurrent coroutines.

    Pages are opened on demand and kept idle up to ``max_pages``. A running
    lease counter, never reset, triggers ``on_recycle`` every
    ``recycle_interval`` leases; the recycle waits until all outstanding
    leases have been returned.

    Example:
        pool = BrowserPool(
            open_page=manager.new_page,
            close_page=manager.close_page,
            on_recycle=manager.restart,
        )

        page = await pool.acquire()
        try:
            await page.goto(url)
        finally:
            await pool.release(page)

        await pool.shutdown()
    """

    def __init__(
        self,
        *,
        open_page: Callable[[], Awaitable[Any]],
        close_page: Callable[[Any], Awaitable[None]],
        on_recycle: Optional[Callable[[], Awaitable[None]]] = None,
        max_pages: int = 10,
        recycle_interval: int = 1000,
    ):
        """Initialize browser pool.

        Args:
            open_page: Coroutine factory returning a fresh page handle
            close_page: Coroutine closing a page handle
            on_recycle: Coroutine restarting the underlying browser
            max_pages: Maximum number of idle pages kept for reuse
            recycle_interval: Leases between forced recycles
        """
        if max_pages < 1:
            raise ValueError("max_pages must be positive")
        if recycle_interval < 1:
            raise ValueError("recycle_interval must be positive")
        self.max_pages = max_pages
        self.recycle_interval = recycle_interval
        self._open_page = open_page
        self._close_page = close_page
        self._on_recycle = on_recycle
        self._idle: List[Any] = []
        self._in_use = 0
        self._condition = asyncio.Condition()
        self.leases = 0
        self.recycles = 0
        self.closed = False

    def should_recycle(self) -> bool:
        return self.leases > 0 and self.leases % self.recycle_interval == 0

    async def acquire(self) -> Any:
        """Lease a page, reusing an idle one when available.

        Raises:
            RuntimeError: If the pool is closed
        """
        async with self._condition:
            if self.closed:
                raise RuntimeError("Browser pool is closed")

            if self.should_recycle():
                await self._condition.wait_for(
                    lambda: self._in_use == 0 or not self.should_recycle()
                )
                # Another waiter may have recycled already
                if self.should_recycle():
                    await self._recycle()

            if self.closed:
                raise RuntimeError("Browser pool is closed")

            self.leases += 1
            self._in_use += 1
            if self._idle:
                logger.debug("Reused idle page from pool")
                return self._idle.pop()

        try:
            return await self._open_page()
        except BaseException:
            async with self._condition:
                self._in_use -= 1
                self._condition.notify_all()
            raise

    async def release(self, page: Any) -> None:
        """Return a leased page. Pages beyond capacity or after shutdown are closed."""
        keep = False
        async with self._condition:
            self._in_use = max(0, self._in_use - 1)
            if page is not None and not self.closed and len(self._idle) < self.max_pages:
                if not _is_closed(page):
                    self._idle.append(page)
                    keep = True
            self._condition.notify_all()

        if not keep and page is not None:
            await self._safe_close(page)

    async def _recycle(self) -> None:
        logger.info("Recycling browser after %d leased pages", self.leases)
        await self._drain_idle()
        self.recycles += 1
        if self._on_recycle is not None:
            await self._on_recycle()

    async def _drain_idle(self) -> int:
        pages, self._idle = self._idle, []
        for page in pages:
            await self._safe_close(page)
        return len(pages)

    async def _safe_close(self, page: Any) -> None:
        try:
            if not _is_closed(page):
                await self._close_page(page)
        except Exception as exc:
            logger.warning("Failed to close page: %s", exc)

    async def shutdown(self) -> None:
        """Close all idle pages and refuse further leases. Safe to call repeatedly."""
        async with self._condition:
            already_closed = self.closed
            self.closed = True
            closed = await self._drain_idle()
            self._condition.notify_all()
        if not already_closed:
            logger.info("Browser pool shutdown complete (closed %d)", closed)

    def get_stats(self) -> Dict[str, int]:
        return {
            "max_pages": self.max_pages,
            "leases": self.leases,
            "recycles": self.recycles,
            "idle": len(self._idle),
            "in_use": self._in_use,
        }


def _is_closed(page: Any) -> bool:
    is_closed = getattr(page, "is_closed", None)
    if callable(is_closed):
        try:
            return bool(is_closed())
        except Exception:
            return True
    return False
