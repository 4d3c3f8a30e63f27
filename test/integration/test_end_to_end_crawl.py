"""
端到端测试：真实的 robots 引擎、HTTP 客户端、解析器、校验器、SQLite 存储、Frontier 与服务编排
网络请求由 requests_mock 拦截，浏览器引擎由假的列表页驱动
"""

import asyncio
import json
from typing import List, Optional

import pytest
import requests_mock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from job_crawler.crawl.domain.demand_interface.i_crawl_engine import ICrawlEngine
from job_crawler.crawl.domain.demand_interface.i_listing_page import IListingPage
from job_crawler.crawl.domain.domain_service.stats_aggregator import StatsAggregator
from job_crawler.crawl.domain.entity.crawl_budget import CrawlBudget
from job_crawler.crawl.domain.entity.dedup_registry import DedupRegistry
from job_crawler.crawl.domain.exceptions import StartUrlDisallowedError
from job_crawler.crawl.domain.value_objects.crawl_config import CrawlConfig
from job_crawler.crawl.domain.value_objects.job_candidate import JobCandidate
from job_crawler.crawl.infrastructure.database.job_sink_impl import SqlAlchemyJobSinkImpl
from job_crawler.crawl.infrastructure.database.sqlalchemy_job_dao_impl import SqlAlchemyJobDaoImpl
from job_crawler.crawl.infrastructure.http_client_impl import HttpClientImpl
from job_crawler.crawl.infrastructure.job_parser_impl import ProfesiaJobParserImpl
from job_crawler.crawl.infrastructure.job_validator_impl import JobValidatorImpl
from job_crawler.crawl.infrastructure.request_queue_impl import RequestQueueImpl
from job_crawler.crawl.infrastructure.robots_txt_parser_impl import RobotsTxtParserImpl
from job_crawler.crawl.services.crawl_frontier import CrawlFrontier
from job_crawler.crawl.services.crawler_service import CrawlerService
from job_crawler.crawl.services.job_fetch_pipeline import JobFetchPipeline
from job_crawler.shared.db_manager import Base
from job_crawler.shared.event_bus import EventBus
from job_crawler.shared.event_handlers.logging_handler import LoggingEventHandler

SITE = 'https://jobs.example.sk'
START_URL = f'{SITE}/praca/'

ROBOTS_TXT = """
User-agent: *
Disallow: /private
"""

DETAIL_HTML = """
<html><body>
  <h1 itemprop="title">Python Developer</h1>
  <h2 itemprop="hiringOrganization"><span>ACME</span></h2>
  <div><strong>Miesto práce</strong><br><span>Bratislava</span></div>
  <span class="salary-range">2 000 – 3 000 EUR/mesiac</span>
  <span itemprop="employmentType">plný úväzok</span>
</body></html>
"""


# ============================================================================
# 假的浏览器引擎与列表页
# ============================================================================

class FakeListingPage(IListingPage):
    def __init__(self, candidates, next_page_url=None, pagination_links=()):
        self._candidates = candidates
        self._next = next_page_url
        self._links = list(pagination_links)

    async def extract_job_candidates(self) -> List[JobCandidate]:
        return list(self._candidates)

    async def extract_next_page_url(self) -> Optional[str]:
        return self._next

    async def extract_pagination_links(self) -> List[str]:
        return self._links


class FakeEngine(ICrawlEngine):
    """按队列顺序把预先准备好的列表页交给 Frontier"""

    def __init__(self, queue, pages, handler=None):
        self._queue = queue
        self._pages = pages
        self.handler = handler
        self.visited = []
        self._stopped = False

    async def run(self, start_urls):
        await self._queue.enqueue(start_urls)
        while not self._stopped and not self._queue.is_empty():
            url = self._queue.dequeue()
            self.visited.append(url)
            await self.handler(self._pages[url], url)
        return {'requests_finished': len(self.visited)}

    def stop(self):
        self._stopped = True


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


@pytest.fixture
def http_mock():
    with requests_mock.Mocker() as m:
        m.get(f'{SITE}/robots.txt', text=ROBOTS_TXT)
        m.get(f'{SITE}/detail/O1', text=DETAIL_HTML, headers={'Content-Type': 'text/html; charset=utf-8'})
        m.get(f'{SITE}/detail/O2', text=DETAIL_HTML.replace('Python Developer', 'Tester'),
              headers={'Content-Type': 'text/html; charset=utf-8'})
        m.get(f'{SITE}/detail/O3', status_code=500)
        yield m


def build(session, max_pages=4, event_bus=None):
    http_client = HttpClientImpl(user_agent='TestBot/1.0')
    robots = RobotsTxtParserImpl(http_client)
    dedup = DedupRegistry()
    budget = CrawlBudget(max_pages)
    stats = StatsAggregator()
    queue = RequestQueueImpl()
    sink = SqlAlchemyJobSinkImpl(SqlAlchemyJobDaoImpl(session))

    pipeline = JobFetchPipeline(
        robots, dedup, http_client, ProfesiaJobParserImpl(base_url=SITE), JobValidatorImpl(),
        sink, stats, event_bus=event_bus, run_id='e2e'
    )
    frontier = CrawlFrontier(robots, dedup, budget, pipeline, queue, event_bus=event_bus, run_id='e2e')
    return {
        'robots': robots, 'dedup': dedup, 'budget': budget, 'stats': stats,
        'queue': queue, 'sink': sink, 'frontier': frontier,
    }


# ============================================================================
# 测试
# ============================================================================

class TestSinglePage:

    def test_disallowed_duplicate_and_new_job(self, session, http_mock):
        """一个被 robots 禁止、一个重复、一个新职位 -> 1 保存, 1 重复, 1 失败"""
        parts = build(session)

        asyncio.run(parts['frontier'].handle_page([
            JobCandidate('P1', f'{SITE}/private/P1'),
            JobCandidate('O1', f'{SITE}/detail/O1'),
            JobCandidate('O1', f'{SITE}/detail/O1'),
        ]))

        stats = parts['stats']
        assert (stats.total_jobs, stats.duplicates, stats.failed) == (1, 1, 1)
        assert stats.failed_urls == [f'{SITE}/private/P1']

        jobs = parts['sink'].get_all_jobs()
        assert len(jobs) == 1
        assert jobs[0].job_title == 'Python Developer'
        assert (jobs[0].salary_min, jobs[0].salary_max) == (2000, 3000)

        # robots.txt 只请求一次
        robots_calls = [r for r in http_mock.request_history if r.path == '/robots.txt']
        assert len(robots_calls) == 1

    def test_previously_seen_id_is_duplicate(self, session, http_mock):
        parts = build(session)
        parts['dedup'].mark_job_seen('O1')

        asyncio.run(parts['frontier'].handle_page([JobCandidate('O1', f'{SITE}/detail/O1')]))

        assert parts['stats'].duplicates == 1
        assert parts['sink'].get_all_jobs() == []

    def test_fetch_failure_isolated(self, session, http_mock):
        parts = build(session)

        asyncio.run(parts['frontier'].handle_page([
            JobCandidate('O3', f'{SITE}/detail/O3'),
            JobCandidate('O2', f'{SITE}/detail/O2'),
        ]))

        assert parts['stats'].failed_urls == [f'{SITE}/detail/O3']
        assert [job.job_id for job in parts['sink'].get_all_jobs()] == ['O2']


class TestFullRun:

    def _service(self, session, tmp_path, pages, max_pages=4, event_bus=None):
        config = CrawlConfig(
            start_url=START_URL,
            max_pages=max_pages,
            output_dir=str(tmp_path / 'output'),
            stop_file=str(tmp_path / 'stop.txt'),
        )
        parts = build(session, max_pages=max_pages, event_bus=event_bus)
        engine = FakeEngine(parts['queue'], pages, handler=parts['frontier'].handle_listing_page)
        service = CrawlerService(
            config=config, robots=parts['robots'], engine=engine, sink=parts['sink'],
            dedup=parts['dedup'], budget=parts['budget'], stats=parts['stats'],
            event_bus=event_bus, run_id='e2e'
        )
        return service, engine, parts

    def test_crawls_pages_and_exports(self, session, http_mock, tmp_path):
        pages = {
            START_URL: FakeListingPage(
                [JobCandidate('O1', f'{SITE}/detail/O1'), JobCandidate('P1', f'{SITE}/private/P1')],
                next_page_url=f'{SITE}/praca/?page_num=2',
            ),
            f'{SITE}/praca/?page_num=2': FakeListingPage(
                [JobCandidate('O1', f'{SITE}/detail/O1'), JobCandidate('O2', f'{SITE}/detail/O2')],
                pagination_links=[START_URL, f'{SITE}/private/praca/3'],
            ),
        }
        bus = EventBus()
        log_handler = LoggingEventHandler()
        bus.subscribe_to_all(log_handler.handle)

        service, engine, parts = self._service(session, tmp_path, pages, event_bus=bus)
        summary = asyncio.run(service.run())

        assert engine.visited == [START_URL, f'{SITE}/praca/?page_num=2']
        assert (summary.total_jobs, summary.duplicates, summary.failed) == (2, 1, 1)
        assert summary.top_locations == [('Bratislava', 2)]
        assert parts['budget'].enqueued == 1

        exported = json.loads((tmp_path / 'output' / 'jobs.json').read_text(encoding='utf-8'))
        assert [job['jobId'] for job in exported] == ['O1', 'O2']
        assert (tmp_path / 'output' / 'jobs.csv').exists()

        logs = log_handler.get_logs('e2e')
        assert logs[0]['event_type'] == 'RunStartedEvent'
        assert logs[-1]['event_type'] == 'RunCompletedEvent'

    def test_budget_limits_pages(self, session, http_mock, tmp_path):
        pages = {
            START_URL: FakeListingPage([], pagination_links=[f'{SITE}/praca/{i}' for i in range(1, 6)]),
            **{f'{SITE}/praca/{i}': FakeListingPage([]) for i in range(1, 6)},
        }
        service, engine, parts = self._service(session, tmp_path, pages, max_pages=2)

        asyncio.run(service.run())

        assert engine.visited == [START_URL, f'{SITE}/praca/1', f'{SITE}/praca/2']
        assert parts['budget'].enqueued == 2

    def test_start_url_disallowed(self, session, tmp_path):
        with requests_mock.Mocker() as m:
            m.get(f'{SITE}/robots.txt', text="User-agent: *\nDisallow: /praca\n")
            service, engine, _ = self._service(session, tmp_path, {})

            with pytest.raises(StartUrlDisallowedError):
                asyncio.run(service.run())

        assert engine.visited == []
