"""
模块职责（应用层）
- 每个被渲染的列表页调用一次：并发处理页面上的全部职位候选，并决定下一步入队哪些列表页；
- 分页优先使用“下一页”链接，不可用时按顺序回退到页面上的分页链接；
- 每次入队前都要通过 robots 检查并从预算中预留名额，停止信号到达后不再入队；
- 职位详情页由流水线直接抓取，永远不会进入列表页队列；
- 页面处理器超时不会取消已认领的职位，运行结束前由 drain() 等待它们完成。
"""

import asyncio
import logging
from typing import List, Optional, Sequence, Set

from ..domain.demand_interface.i_listing_page import IListingPage
from ..domain.demand_interface.i_request_queue import IRequestQueue
from ..domain.demand_interface.i_robots_txt_parser import IRobotsTxtParser
from ..domain.domain_event.crawl_process_event import LinkFilteredEvent, PageEnqueuedEvent, PageVisitedEvent
from ..domain.entity.crawl_budget import CrawlBudget
from ..domain.entity.dedup_registry import DedupRegistry
from ..domain.value_objects.job_candidate import JobCandidate
from .job_fetch_pipeline import JobFetchPipeline, JobOutcome
from job_crawler.shared.event_bus import EventBus

logger = logging.getLogger('domain.crawl_process')


class CrawlFrontier:
    """列表页处理器：职位扇出 + 预算内分页"""

    def __init__(
        self,
        robots: IRobotsTxtParser,
        dedup: DedupRegistry,
        budget: CrawlBudget,
        pipeline: JobFetchPipeline,
        request_queue: IRequestQueue,
        event_bus: Optional[EventBus] = None,
        run_id: str = "",
        user_agent: str = "*"
    ):
        self._robots = robots
        self._dedup = dedup
        self._budget = budget
        self._pipeline = pipeline
        self._queue = request_queue
        self._event_bus = event_bus
        self._run_id = run_id
        self._user_agent = user_agent
        # 尚未结束的职位扇出（处理器超时后仍在运行）
        self._fan_outs: Set[asyncio.Future] = set()

    async def handle_listing_page(self, page: IListingPage, url: str) -> List[JobOutcome]:
        """浏览器引擎的页面回调：从渲染好的页面提取候选后交给 handle_page"""
        self._dedup.mark_url_visited(url)

        candidates = await page.extract_job_candidates()
        next_page_url = await page.extract_next_page_url()
        pagination_links = await page.extract_pagination_links()

        logger.info(f"Processing listing page: {url} ({len(candidates)} job candidates)")
        self._publish(PageVisitedEvent(run_id=self._run_id, url=url, job_count=len(candidates)))

        return await self.handle_page(candidates, next_page_url, pagination_links)

    async def handle_page(
        self,
        job_candidates: Sequence[JobCandidate],
        next_page_url: Optional[str] = None,
        pagination_links: Sequence[str] = ()
    ) -> List[JobOutcome]:
        """
        处理一页：先等待所有职位候选处理完成，再决定分页

        返回:
            每个候选的处理结果（与输入顺序一致）
        """
        fan_out = asyncio.gather(*(self._pipeline.process(c) for c in job_candidates))
        self._fan_outs.add(fan_out)
        fan_out.add_done_callback(self._fan_outs.discard)

        # 处理器超时被取消时，已认领的职位仍要处理完
        outcomes = await asyncio.shield(fan_out)

        if self._budget.is_exhausted:
            logger.debug("预算已用尽或已请求停止，跳过分页")
            return list(outcomes)

        if next_page_url and await self._enqueue_next_page(next_page_url):
            return list(outcomes)

        await self._enqueue_fallback(pagination_links)
        return list(outcomes)

    async def drain(self) -> None:
        """等待被超时打断的页面遗留的职位处理完成"""
        if self._fan_outs:
            await asyncio.gather(*list(self._fan_outs), return_exceptions=True)

# -------------------- 分页 --------------------

    async def _enqueue_next_page(self, url: str) -> bool:
        if not await self._robots.is_allowed(url, self._user_agent):
            self._publish(LinkFilteredEvent(run_id=self._run_id, url=url, reason="robots_txt"))
            return False

        if not self._budget.try_reserve():
            self._publish(LinkFilteredEvent(run_id=self._run_id, url=url, reason="budget_exhausted"))
            return False

        self._dedup.mark_url_visited(url)
        await self._enqueue(url)
        return True

    async def _enqueue_fallback(self, links: Sequence[str]) -> None:
        for link in links:
            if self._budget.is_exhausted:
                break

            if not self._dedup.mark_url_visited(link):
                self._publish(LinkFilteredEvent(run_id=self._run_id, url=link, reason="visited"))
                continue

            if not await self._robots.is_allowed(link, self._user_agent):
                self._publish(LinkFilteredEvent(run_id=self._run_id, url=link, reason="robots_txt"))
                continue

            # robots 检查期间可能有其他页面用掉了预算
            if not self._budget.try_reserve():
                break

            await self._enqueue(link)

    async def _enqueue(self, url: str) -> None:
        await self._queue.enqueue([url])
        logger.info(f"Enqueued page: {url} ({self._budget.enqueued}/{self._budget.max_pages})")
        self._publish(PageEnqueuedEvent(
            run_id=self._run_id,
            url=url,
            enqueued=self._budget.enqueued,
            max_pages=self._budget.max_pages
        ))

    def _publish(self, event) -> None:
        if self._event_bus:
            self._event_bus.publish(event)
