"""Tests for the page pool, the browser manager and the browser extractor."""

from __future__ import annotations

import asyncio
from typing import Any, List

import pytest

from src.shared.batch import BrowserPool
from src.functions.pocket_to_enex.core.contracts import ExtractionMethod
from src.functions.pocket_to_enex.core.extractors import (
    BrowserExtractor,
    BrowserManager,
    BrowserState,
)

from tests.pocket_to_enex.fakes import ARTICLE_TEXT


class FakePage:
    def __init__(self, number: int, text: str = ARTICLE_TEXT, error: Exception | None = None):
        self.number = number
        self.text = text
        self.error = error
        self.closed = False
        self.visited: List[str] = []

    def is_closed(self) -> bool:
        return self.closed

    async def close(self) -> None:
        self.closed = True

    async def goto(self, url: str, **_: Any) -> None:
        if self.error is not None:
            raise self.error
        self.visited.append(url)

    async def wait_for_timeout(self, _: float) -> None:
        return None

    async def evaluate(self, _script: str, _args: Any) -> str:
        return self.text


class FakeContext:
    def __init__(self, pages: List[FakePage]):
        self.pages = pages
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, *, fail_close: bool = False):
        self.pages: List[FakePage] = []
        self.closed = False
        self.fail_close = fail_close

    @property
    def contexts(self) -> List[FakeContext]:
        return [FakeContext([page for page in self.pages if not page.closed])]

    async def new_page(self, **_: Any) -> FakePage:
        page = FakePage(len(self.pages))
        self.pages.append(page)
        return page

    async def close(self) -> None:
        if self.fail_close:
            raise RuntimeError("browser hung")
        self.closed = True


class FakeDriver:
    def __init__(self) -> None:
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


def _manager(**kwargs) -> tuple[BrowserManager, List[FakeBrowser]]:
    manager = BrowserManager(**kwargs)
    launched: List[FakeBrowser] = []

    async def fake_launch():
        browser = FakeBrowser()
        launched.append(browser)
        return FakeDriver(), browser

    manager._launch = fake_launch  # noqa: SLF001
    return manager, launched


def _pool(**kwargs) -> tuple[BrowserPool, List[FakePage], List[int]]:
    opened: List[FakePage] = []
    recycles: List[int] = []

    async def open_page() -> FakePage:
        page = FakePage(len(opened))
        opened.append(page)
        return page

    async def close_page(page: FakePage) -> None:
        await page.close()

    async def on_recycle() -> None:
        recycles.append(len(opened))

    pool = BrowserPool(open_page=open_page, close_page=close_page, on_recycle=on_recycle, **kwargs)
    return pool, opened, recycles


@pytest.mark.asyncio
class TestBrowserPool:
    async def test_released_pages_are_reused(self) -> None:
        pool, opened, _ = _pool()

        first = await pool.acquire()
        await pool.release(first)
        second = await pool.acquire()

        assert second is first
        assert len(opened) == 1

    async def test_concurrent_leases_get_distinct_pages(self) -> None:
        pool, opened, _ = _pool(max_pages=2)

        pages = await asyncio.gather(pool.acquire(), pool.acquire(), pool.acquire())

        assert len({id(page) for page in pages}) == 3
        for page in pages:
            await pool.release(page)
        # only max_pages stay idle, the rest are closed
        assert pool.get_stats()["idle"] == 2
        assert sum(page.closed for page in opened) == 1

    async def test_recycles_every_interval_leases(self) -> None:
        pool, opened, recycles = _pool(recycle_interval=3)

        for _ in range(7):
            page = await pool.acquire()
            await pool.release(page)

        assert pool.leases == 7
        assert pool.recycles == 2
        assert len(recycles) == 2
        # idle pages are closed on each recycle
        assert len(opened) == 3
        assert opened[0].closed and opened[1].closed

    async def test_recycle_waits_for_outstanding_leases(self) -> None:
        pool, _, recycles = _pool(recycle_interval=2)
        first = await pool.acquire()
        second = await pool.acquire()

        third = asyncio.create_task(pool.acquire())
        await asyncio.sleep(0)
        assert not third.done()
        assert recycles == []

        await pool.release(first)
        await asyncio.sleep(0)
        assert not third.done()

        await pool.release(second)
        page = await third
        assert recycles == [2]
        await pool.release(page)

    async def test_shutdown_is_idempotent_and_refuses_leases(self) -> None:
        pool, opened, _ = _pool()
        page = await pool.acquire()
        await pool.release(page)

        await pool.shutdown()
        await pool.shutdown()

        assert opened[0].closed
        with pytest.raises(RuntimeError, match="closed"):
            await pool.acquire()

    async def test_release_after_shutdown_closes_page(self) -> None:
        pool, _, _ = _pool()
        page = await pool.acquire()
        await pool.shutdown()

        await pool.release(page)

        assert page.closed


def test_pool_rejects_invalid_sizes() -> None:
    async def noop(*_: Any) -> None:
        return None

    with pytest.raises(ValueError):
        BrowserPool(open_page=noop, close_page=noop, max_pages=0)
    with pytest.raises(ValueError):
        BrowserPool(open_page=noop, close_page=noop, recycle_interval=0)


@pytest.mark.asyncio
class TestBrowserManager:
    async def test_starts_lazily_on_first_lease(self) -> None:
        manager, launched = _manager()
        assert manager.state is BrowserState.UNSTARTED
        assert launched == []

        async with manager.page() as page:
            assert isinstance(page, FakePage)

        assert manager.state is BrowserState.RUNNING
        assert len(launched) == 1
        await manager.close()

    async def test_restarts_browser_after_interval(self) -> None:
        manager, launched = _manager(restart_interval=2)

        for _ in range(5):
            async with manager.page():
                pass

        assert len(launched) == 3
        assert launched[0].closed and launched[1].closed
        assert manager.processed_count == 5
        await manager.close()

    async def test_close_is_idempotent(self) -> None:
        manager, launched = _manager()
        async with manager.page():
            pass

        await manager.close()
        await manager.close()

        assert manager.state is BrowserState.CLOSED
        assert launched[0].closed
        with pytest.raises(RuntimeError):
            await manager.lease()

    async def test_close_without_start_is_noop(self) -> None:
        manager, launched = _manager()

        await manager.close()

        assert launched == []
        assert manager.state is BrowserState.CLOSED

    async def test_failed_close_escalates_to_force_kill(self) -> None:
        manager, _ = _manager()
        killed: List[set] = []

        async def hanging_launch():
            return FakeDriver(), FakeBrowser(fail_close=True)

        manager._launch = hanging_launch  # noqa: SLF001
        manager._force_kill = lambda pids: killed.append(pids) or 0  # noqa: SLF001
        async with manager.page():
            pass

        await manager.close()

        assert len(killed) == 1


@pytest.mark.asyncio
class TestBrowserExtractor:
    async def test_extracts_rendered_text(self) -> None:
        manager, launched = _manager()
        extractor = BrowserExtractor(manager, timeout=5, settle_seconds=0)

        result = await extractor.extract("https://spa.example.com/post")

        assert result.ok
        assert result.method is ExtractionMethod.BROWSER
        assert launched[0].pages[0].visited == ["https://spa.example.com/post"]
        # page went back to the pool
        assert manager.pool.get_stats()["in_use"] == 0
        await manager.close()

    async def test_navigation_error_is_failure_and_page_is_released(self) -> None:
        manager, launched = _manager()

        async def erroring_launch():
            browser = FakeBrowser()
            launched.append(browser)

            async def new_page(**_: Any) -> FakePage:
                page = FakePage(0, error=TimeoutError("Timeout 5000ms exceeded.\nCall log: ..."))
                browser.pages.append(page)
                return page

            browser.new_page = new_page
            return FakeDriver(), browser

        manager._launch = erroring_launch  # noqa: SLF001
        extractor = BrowserExtractor(manager, timeout=5, settle_seconds=0)

        result = await extractor.extract("https://spa.example.com/slow")

        assert not result.ok
        assert result.text == (
            "<p>Failed to scrape content from https://spa.example.com/slow (browser): "
            "Timeout 5000ms exceeded.</p>"
        )
        assert manager.pool.get_stats()["in_use"] == 0
        await manager.close()

    async def test_short_rendered_text_is_insufficient(self) -> None:
        manager, launched = _manager()

        async def short_launch():
            browser = FakeBrowser()
            launched.append(browser)

            async def new_page(**_: Any) -> FakePage:
                return FakePage(0, text="Loading...")

            browser.new_page = new_page
            return FakeDriver(), browser

        manager._launch = short_launch  # noqa: SLF001
        result = await BrowserExtractor(manager, settle_seconds=0).extract("https://spa.example.com/x")

        assert not result.ok
        assert "(browser)" in result.text
        await manager.close()
