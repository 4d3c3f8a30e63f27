"""
模块职责（基础设施层）
- 浏览器爬取引擎：从请求队列取出列表页URL，用 Playwright 渲染后交给页面处理器；
- 控制并发 worker 数、每分钟请求数、单次运行最大请求数、重试次数与处理器超时；
- 收到停止信号后不再取新请求，正在处理的页面允许完成。

注意：Playwright 的 Page 不是线程安全的，这里全部在同一个事件循环里使用 async API。
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional
from playwright.async_api import async_playwright

from ..domain.demand_interface.i_crawl_engine import ICrawlEngine
from ..domain.demand_interface.i_listing_page import IListingPage
from ..domain.demand_interface.i_request_queue import IRequestQueue
from .playwright_listing_page import PlaywrightListingPage

error_logger = logging.getLogger('infrastructure.error')
perf_logger = logging.getLogger('infrastructure.perf')
logger = logging.getLogger('domain.crawl_process')

PageHandler = Callable[[IListingPage, str], Awaitable[Any]]


class PlaywrightCrawler(ICrawlEngine):
    """基于 Playwright async API 的列表页爬取引擎"""

    def __init__(
        self,
        request_queue: IRequestQueue,
        handler: PageHandler,
        concurrency: int = 2,
        max_requests_per_crawl: int = 4,
        max_requests_per_minute: int = 100,
        max_request_retries: int = 3,
        request_handler_timeout_secs: float = 60,
        navigation_timeout_secs: float = 30,
        user_agent: Optional[str] = None,
        headless: bool = True,
        idle_interval: float = 0.1
    ):
        """
        参数:
            request_queue: 列表页请求队列
            handler: 页面处理器 handler(page, url)
            concurrency: 同时处理的页面数
            max_requests_per_crawl: 单次运行最多处理的请求数
            max_requests_per_minute: 每分钟最多发起的页面请求数
            max_request_retries: 页面失败后的重试次数
            request_handler_timeout_secs: 单个页面处理器的超时时间
        """
        self._queue = request_queue
        self._handler = handler
        self._concurrency = concurrency
        self._max_requests = max_requests_per_crawl
        self._max_retries = max_request_retries
        self._handler_timeout = request_handler_timeout_secs
        self._navigation_timeout_ms = navigation_timeout_secs * 1000
        self._user_agent = user_agent
        self._headless = headless
        self._idle_interval = idle_interval

        # 速率控制：两次请求之间的最小间隔
        self._min_interval = 60.0 / max_requests_per_minute
        self._next_slot = 0.0
        self._rate_lock = asyncio.Lock()

        self._stopped = False
        self._started = 0
        self._in_flight = 0
        self._finished = 0
        self._failed = 0

    async def run(self, start_urls: List[str]) -> Dict[str, int]:
        """启动浏览器并运行爬取，直到队列耗尽、达到请求上限或收到停止信号"""
        await self._queue.enqueue(start_urls)

        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self._headless)
            try:
                # 创建新上下文（相当于隐身窗口）
                context = await browser.new_context(user_agent=self._user_agent)
                return await self.run_in_context(context)
            finally:
                await browser.close()

    async def run_in_context(self, context) -> Dict[str, int]:
        """在已有的浏览器上下文中运行所有 worker"""
        workers = [asyncio.create_task(self._worker(context)) for _ in range(self._concurrency)]
        await asyncio.gather(*workers)

        if self._started >= self._max_requests and not self._queue.is_empty():
            logger.info(f"达到最大请求数 {self._max_requests}，剩余 {self._queue.size()} 个请求未处理")

        return self.stats

    def stop(self) -> None:
        """停止取新请求，正在处理的页面继续完成"""
        self._stopped = True

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def stats(self) -> Dict[str, int]:
        return {
            'requests_started': self._started,
            'requests_finished': self._finished,
            'requests_failed': self._failed,
        }

# --------------------- 内部方法 ---------------------

    async def _worker(self, context) -> None:
        while not self._stopped and self._started < self._max_requests:
            url = self._queue.dequeue()
            if url is None:
                if self._in_flight == 0:
                    break
                # 其他 worker 还在处理，可能会产生新的请求
                await asyncio.sleep(self._idle_interval)
                continue

            self._started += 1
            self._in_flight += 1
            try:
                await self._process_request(context, url)
            finally:
                self._in_flight -= 1

    async def _process_request(self, context, url: str) -> bool:
        """渲染页面并调用处理器，失败时按配置重试"""
        last_error: Optional[BaseException] = None

        for attempt in range(self._max_retries + 1):
            await self._throttle()
            start_time = time.time()
            page = await context.new_page()
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=self._navigation_timeout_ms)
                await asyncio.wait_for(
                    self._handler(PlaywrightListingPage(page), url),
                    timeout=self._handler_timeout
                )

                elapsed_ms = (time.time() - start_time) * 1000
                perf_logger.info(f"Playwright Render {url} - {elapsed_ms:.2f}ms", extra={
                    'url': url,
                    'method': 'RENDER',
                    'elapsed_ms': elapsed_ms,
                    'attempt': attempt + 1,
                    'component': 'PlaywrightCrawler'
                })
                self._finished += 1
                return True

            except Exception as e:
                last_error = e
                error_logger.warning(
                    f"页面处理失败 (第 {attempt + 1}/{self._max_retries + 1} 次): {url} - {type(e).__name__}: {str(e)}",
                    extra={'url': url, 'component': 'PlaywrightCrawler'}
                )
            finally:
                try:
                    await page.close()
                except Exception as e:
                    error_logger.debug(f"关闭页面失败: {url} - {str(e)}")

            if self._stopped:
                break

        self._failed += 1
        error_logger.error(f"页面最终失败: {url} - {last_error}", extra={'url': url, 'component': 'PlaywrightCrawler'})
        return False

    async def _throttle(self) -> None:
        """保证相邻两次页面请求之间至少间隔 60/max_requests_per_minute 秒"""
        async with self._rate_lock:
            now = time.monotonic()
            wait = self._next_slot - now
            if wait > 0:
                await asyncio.sleep(wait)
            self._next_slot = max(now, self._next_slot) + self._min_interval
