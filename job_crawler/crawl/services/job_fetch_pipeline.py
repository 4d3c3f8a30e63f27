"""
模块职责（应用层）
- 处理列表页上的单个职位候选：robots 检查 -> 去重 -> 抓取详情 -> 解析 -> 校验 -> 保存；
- 每个结果都汇报给统计汇总器，并发布对应的领域事件；
- 单个候选的任何错误都在这里被捕获并计为失败，不会影响同一页面上的其他候选。
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from ..domain.demand_interface.i_http_client import IHttpClient
from ..domain.demand_interface.i_job_parser import IJobParser
from ..domain.demand_interface.i_job_sink import IJobSink
from ..domain.demand_interface.i_job_validator import IJobValidator
from ..domain.demand_interface.i_robots_txt_parser import IRobotsTxtParser
from ..domain.domain_event.crawl_process_event import (
    JobDuplicateEvent,
    JobFailedEvent,
    JobInvalidEvent,
    JobSavedEvent,
)
from ..domain.domain_service.stats_aggregator import StatsAggregator
from ..domain.entity.dedup_registry import DedupRegistry
from ..domain.exceptions import JobFetchError
from ..domain.value_objects.job_candidate import JobCandidate
from job_crawler.shared.event_bus import EventBus

error_logger = logging.getLogger('infrastructure.error')


class JobOutcome(Enum):
    SAVED = "saved"
    DUPLICATE = "duplicate"
    FAILED = "failed"
    INVALID = "invalid"


class JobFetchPipeline:
    """单个职位候选的处理流水线"""

    def __init__(
        self,
        robots: IRobotsTxtParser,
        dedup: DedupRegistry,
        http_client: IHttpClient,
        parser: IJobParser,
        validator: IJobValidator,
        sink: IJobSink,
        reporter: StatsAggregator,
        event_bus: Optional[EventBus] = None,
        run_id: str = "",
        user_agent: str = "*"
    ):
        """
        参数:
            robots: robots.txt 策略引擎
            dedup: 本次运行的去重登记表
            http_client: 获取职位详情页的 HTTP 客户端
            parser / validator / sink: 解析、校验、存储
            reporter: 统计汇总器
            event_bus: 事件总线 (可选，便于测试)
            user_agent: 检查 robots 规则时使用的 user-agent
        """
        self._robots = robots
        self._dedup = dedup
        self._http = http_client
        self._parser = parser
        self._validator = validator
        self._sink = sink
        self._reporter = reporter
        self._event_bus = event_bus
        self._run_id = run_id
        self._user_agent = user_agent

    async def process(self, candidate: JobCandidate) -> JobOutcome:
        """处理一个候选，返回结果类型；永不抛出异常"""
        job_id, url = candidate.id, candidate.url

        if not job_id or not url:
            return self._fail(url, "MissingField", "职位候选缺少 id 或链接")

        if not await self._robots.is_allowed(url, self._user_agent):
            return self._fail(url, "RobotsDisallowed", "robots.txt 禁止访问")

        if not self._dedup.mark_job_seen(job_id):
            self._reporter.add_duplicate()
            self._publish(JobDuplicateEvent(run_id=self._run_id, job_id=job_id, url=url))
            return JobOutcome.DUPLICATE

        try:
            response = await self._http.get(url)
            if not response.is_success:
                raise JobFetchError(url, response.error_message or f"HTTP {response.status_code}")

            record = await asyncio.to_thread(self._parser.parse, response.content, job_id, url)

            if not self._validator.is_valid(record):
                self._reporter.add_invalid()
                self._publish(JobInvalidEvent(run_id=self._run_id, job_id=job_id, url=url))
                return JobOutcome.INVALID

            # 先写入存储再计数，写入失败只计为失败
            await self._sink.push(record)
            self._reporter.add_job(record)

        except Exception as e:
            error_logger.error(f"处理职位失败: {url} - {type(e).__name__}: {str(e)}", extra={
                'url': url,
                'job_id': job_id,
                'component': 'JobFetchPipeline'
            })
            return self._fail(url, type(e).__name__, str(e))

        self._publish(JobSavedEvent(run_id=self._run_id, job_id=job_id, url=url, job_title=record.job_title))
        return JobOutcome.SAVED

    def _fail(self, url: Optional[str], error_type: str, message: str) -> JobOutcome:
        self._reporter.add_failed(url)
        self._publish(JobFailedEvent(
            run_id=self._run_id,
            url=url,
            error_type=error_type,
            error_message=message
        ))
        return JobOutcome.FAILED

    def _publish(self, event) -> None:
        if self._event_bus:
            self._event_bus.publish(event)
