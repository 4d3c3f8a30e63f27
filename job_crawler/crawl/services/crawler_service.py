"""
模块职责（应用层）
- 编排一次完整的爬取运行：准备输出目录 -> 检查起始URL -> 运行浏览器引擎 -> 导出 -> 汇总；
- 启动停止文件监视器，检测到停止信号时让预算和引擎一起停止，正在处理的页面允许完成；
- 发布运行生命周期事件，日志转发由 shared 中的事件处理器完成。

只有启动阶段的错误（起始URL被 robots.txt 禁止）会终止运行，单个页面或职位的错误在下层被计数。
"""

import logging
import traceback
from typing import Optional

from ..domain.demand_interface.i_crawl_engine import ICrawlEngine
from ..domain.demand_interface.i_job_sink import IJobSink
from ..domain.demand_interface.i_robots_txt_parser import IRobotsTxtParser
from ..domain.domain_event.run_life_cycle_event import (
    RunCompletedEvent,
    RunFailedEvent,
    RunStartedEvent,
    RunStopRequestedEvent,
)
from ..domain.domain_service.stats_aggregator import StatsAggregator
from ..domain.entity.crawl_budget import CrawlBudget
from ..domain.entity.dedup_registry import DedupRegistry
from ..domain.exceptions import StartUrlDisallowedError
from ..domain.value_objects.crawl_config import CrawlConfig
from ..domain.value_objects.crawl_summary import CrawlSummary
from ..infrastructure.exporter_impl import export_jobs, prepare_output_directory
from ..infrastructure.stop_file_watcher import StopFileWatcher
from .crawl_frontier import CrawlFrontier
from job_crawler.shared.event_bus import EventBus

logger = logging.getLogger('domain.run_lifecycle')


class CrawlerService:
    """
    应用服务 - 爬取运行编排
    所有运行期状态（去重表、预算、统计）都由调用方创建并注入，一个实例对应一次运行
    """

    def __init__(
        self,
        config: CrawlConfig,
        robots: IRobotsTxtParser,
        engine: ICrawlEngine,
        sink: IJobSink,
        dedup: DedupRegistry,
        budget: CrawlBudget,
        stats: StatsAggregator,
        event_bus: Optional[EventBus] = None,
        run_id: str = "",
        stop_check_interval: float = 2.0,
        frontier: Optional[CrawlFrontier] = None
    ):
        self._config = config
        self._robots = robots
        self._engine = engine
        self._sink = sink
        self._dedup = dedup
        self._budget = budget
        self._stats = stats
        self._event_bus = event_bus
        self._run_id = run_id
        self._stop_check_interval = stop_check_interval
        self._frontier = frontier
        self._stop_requested = False

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def stats(self) -> StatsAggregator:
        return self._stats

# -------------------- 运行生命周期 --------------------

    async def run(self) -> CrawlSummary:
        """
        执行一次爬取

        返回:
            运行汇总
        异常:
            StartUrlDisallowedError: 起始URL被 robots.txt 禁止
        """
        config = self._config
        prepare_output_directory(config.output_dir)
        self._sink.clear()
        self._stats.start_timer()

        self._publish(RunStartedEvent(
            run_id=self._run_id,
            start_url=config.start_url,
            max_pages=config.max_pages,
            concurrency=config.concurrency
        ))

        try:
            await self._robots.log_info(config.start_url)
            if not await self._robots.is_allowed(config.start_url, config.robots_user_agent):
                raise StartUrlDisallowedError(config.start_url)

            self._dedup.mark_url_visited(config.start_url)
            await self._run_engine()

            jobs = [record.to_dict() for record in self._sink.get_all_jobs()]
            export_jobs(jobs, config.output_dir)

        except Exception as e:
            self._stats.end_timer()
            self._publish(RunFailedEvent(
                run_id=self._run_id,
                error_message=str(e),
                stack_trace=traceback.format_exc()
            ))
            raise

        self._stats.end_timer()
        summary = self._stats.summary()
        self._publish(RunCompletedEvent(
            run_id=self._run_id,
            total_jobs=summary.total_jobs,
            duplicates=summary.duplicates,
            failed=summary.failed,
            invalid=summary.invalid,
            pages_enqueued=self._budget.enqueued,
            elapsed_time=summary.duration_seconds or 0.0
        ))
        return summary

    def stop(self) -> None:
        """外部停止信号：不再预留预算和调度新页面，正在处理的页面继续完成"""
        if self._stop_requested:
            return
        self._stop_requested = True
        self._budget.request_stop()
        self._engine.stop()
        self._publish(RunStopRequestedEvent(run_id=self._run_id))

    async def _run_engine(self) -> None:
        watcher = None
        if self._config.stop_file:
            watcher = StopFileWatcher(self._config.stop_file, self.stop, self._stop_check_interval)
            watcher.start()

        try:
            engine_stats = await self._engine.run([self._config.start_url])
            logger.info(f"爬取引擎结束: {engine_stats}")
            if self._frontier is not None:
                await self._frontier.drain()
        finally:
            if watcher is not None:
                await watcher.close()

    def _publish(self, event) -> None:
        if self._event_bus:
            self._event_bus.publish(event)
