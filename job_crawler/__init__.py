import uuid
from typing import Optional

from .crawl.domain.domain_service.stats_aggregator import StatsAggregator
from .crawl.domain.entity.crawl_budget import CrawlBudget
from .crawl.domain.entity.dedup_registry import DedupRegistry
from .crawl.domain.value_objects.crawl_config import CrawlConfig
from .crawl.infrastructure.database.sqlalchemy_job_dao_impl import SqlAlchemyJobDaoImpl
from .crawl.infrastructure.database.job_sink_impl import SqlAlchemyJobSinkImpl
from .crawl.infrastructure.http_client_impl import HttpClientImpl
from .crawl.infrastructure.job_parser_impl import ProfesiaJobParserImpl
from .crawl.infrastructure.job_validator_impl import JobValidatorImpl
from .crawl.infrastructure.playwright_crawler import PlaywrightCrawler
from .crawl.infrastructure.request_queue_impl import RequestQueueImpl
from .crawl.infrastructure.robots_txt_parser_impl import RobotsTxtParserImpl
from .crawl.services.crawl_frontier import CrawlFrontier
from .crawl.services.crawler_service import CrawlerService
from .crawl.services.job_fetch_pipeline import JobFetchPipeline
from .shared.db_manager import create_session
from .shared.event_bus import EventBus


def create_crawler_service(config: CrawlConfig, event_bus: Optional[EventBus] = None) -> CrawlerService:
    """组装一次爬取运行所需的全部对象，运行期状态只属于这一次运行"""
    run_id = str(uuid.uuid4())

    http_client = HttpClientImpl(user_agent=config.user_agent)
    robots = RobotsTxtParserImpl(http_client)
    dedup = DedupRegistry()
    budget = CrawlBudget(config.max_pages)
    stats = StatsAggregator()
    request_queue = RequestQueueImpl()

    _engine, session = create_session(config.database_url)
    sink = SqlAlchemyJobSinkImpl(SqlAlchemyJobDaoImpl(session))

    pipeline = JobFetchPipeline(
        robots=robots,
        dedup=dedup,
        http_client=http_client,
        parser=ProfesiaJobParserImpl(),
        validator=JobValidatorImpl(),
        sink=sink,
        reporter=stats,
        event_bus=event_bus,
        run_id=run_id,
        user_agent=config.robots_user_agent
    )
    frontier = CrawlFrontier(
        robots=robots,
        dedup=dedup,
        budget=budget,
        pipeline=pipeline,
        request_queue=request_queue,
        event_bus=event_bus,
        run_id=run_id,
        user_agent=config.robots_user_agent
    )
    engine = PlaywrightCrawler(
        request_queue=request_queue,
        handler=frontier.handle_listing_page,
        concurrency=config.concurrency,
        max_requests_per_crawl=config.max_pages,
        max_requests_per_minute=config.max_requests_per_minute,
        max_request_retries=config.max_request_retries,
        request_handler_timeout_secs=config.request_handler_timeout_secs,
        user_agent=config.user_agent
    )

    return CrawlerService(
        config=config,
        robots=robots,
        engine=engine,
        sink=sink,
        dedup=dedup,
        budget=budget,
        stats=stats,
        event_bus=event_bus,
        run_id=run_id,
        frontier=frontier
    )
