"""
CrawlFrontier 测试：职位扇出、下一页优先、备用分页、预算与停止信号
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from job_crawler.crawl.domain.domain_service.stats_aggregator import StatsAggregator
from job_crawler.crawl.domain.entity.crawl_budget import CrawlBudget
from job_crawler.crawl.domain.entity.dedup_registry import DedupRegistry
from job_crawler.crawl.domain.value_objects.http_response import HttpResponse
from job_crawler.crawl.domain.value_objects.job_candidate import JobCandidate
from job_crawler.crawl.domain.value_objects.job_record import JobRecord
from job_crawler.crawl.infrastructure.request_queue_impl import RequestQueueImpl
from job_crawler.crawl.services.crawl_frontier import CrawlFrontier
from job_crawler.crawl.services.job_fetch_pipeline import JobFetchPipeline, JobOutcome

NEXT = 'https://s/praca/?page_num=2'


def make_frontier(max_pages=4, disallowed=(), pipeline=None):
    robots = Mock()
    robots.is_allowed = AsyncMock(side_effect=lambda url, ua='*': url not in disallowed)

    if pipeline is None:
        pipeline = Mock()
        pipeline.process = AsyncMock(return_value=JobOutcome.SAVED)

    queue = RequestQueueImpl()
    budget = CrawlBudget(max_pages)
    dedup = DedupRegistry()
    frontier = CrawlFrontier(robots, dedup, budget, pipeline, queue, run_id='run-1')
    return frontier, queue, budget, dedup, pipeline


def queued(queue):
    urls = []
    while not queue.is_empty():
        urls.append(queue.dequeue())
    return urls


# ============================================================================
# 职位扇出
# ============================================================================

class TestJobFanOut:

    def test_all_candidates_processed_before_return(self):
        finished = []

        async def process(candidate):
            await asyncio.sleep(0.01 if candidate.id == 'slow' else 0)
            finished.append(candidate.id)
            return JobOutcome.SAVED

        pipeline = Mock()
        pipeline.process = process
        frontier, *_ = make_frontier(pipeline=pipeline)

        outcomes = asyncio.run(frontier.handle_page(
            [JobCandidate('slow', 'https://s/d/1'), JobCandidate('fast', 'https://s/d/2')]
        ))

        assert sorted(finished) == ['fast', 'slow']
        assert outcomes == [JobOutcome.SAVED, JobOutcome.SAVED]

    def test_job_urls_never_enqueued(self):
        frontier, queue, *_ = make_frontier()
        asyncio.run(frontier.handle_page([JobCandidate('O1', 'https://s/detail/O1')]))
        assert queue.is_empty()

    def test_timed_out_page_still_saves_claimed_jobs(self):
        robots = Mock()
        robots.is_allowed = AsyncMock(return_value=True)
        sink = Mock()
        sink.push = AsyncMock()
        stats = StatsAggregator()
        http_client = Mock()
        parser = Mock()
        parser.parse = Mock(side_effect=lambda html, job_id, url: JobRecord(
            job_id=job_id, job_title='Dev', job_url=url, location='Bratislava'))
        validator = Mock()
        validator.is_valid = Mock(return_value=True)
        dedup = DedupRegistry()
        pipeline = JobFetchPipeline(robots, dedup, http_client, parser, validator, sink, stats)
        frontier = CrawlFrontier(robots, dedup, CrawlBudget(4), pipeline, RequestQueueImpl())
        candidates = [JobCandidate('O1', 'https://s/d/1'), JobCandidate('O2', 'https://s/d/2')]

        async def run():
            release = asyncio.Event()

            async def slow_get(url):
                await release.wait()
                return HttpResponse(url=url, status_code=200, headers={}, content='<html></html>',
                                    content_type='text/html', is_success=True)

            http_client.get = slow_get

            # 引擎的处理器超时后会重试同一页
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(frontier.handle_page(candidates), 0.05)
            retried = await frontier.handle_page(candidates)

            release.set()
            await frontier.drain()
            return retried

        retried = asyncio.run(run())

        assert retried == [JobOutcome.DUPLICATE, JobOutcome.DUPLICATE]
        assert sink.push.await_count == 2
        assert stats.total_jobs == 2
        assert stats.failed == 0


# ============================================================================
# 分页
# ============================================================================

class TestPagination:

    def test_next_page_preferred(self):
        frontier, queue, budget, *_ = make_frontier()

        asyncio.run(frontier.handle_page([], NEXT, ['https://s/praca/?page_num=3']))

        assert queued(queue) == [NEXT]
        assert budget.enqueued == 1

    def test_fallback_when_next_page_disallowed(self):
        frontier, queue, budget, *_ = make_frontier(disallowed={NEXT})
        links = ['https://s/praca/?page_num=3', 'https://s/praca/?page_num=4']

        asyncio.run(frontier.handle_page([], NEXT, links))

        assert queued(queue) == links
        assert budget.enqueued == 2

    def test_fallback_without_next_page(self):
        frontier, queue, *_ = make_frontier()
        asyncio.run(frontier.handle_page([], None, ['https://s/praca/a']))
        assert queued(queue) == ['https://s/praca/a']

    def test_fallback_skips_visited_and_disallowed(self):
        frontier, queue, budget, dedup, _ = make_frontier(disallowed={'https://s/praca/blocked'})
        dedup.mark_url_visited('https://s/praca/seen')

        asyncio.run(frontier.handle_page([], None, [
            'https://s/praca/seen',
            'https://s/praca/blocked',
            'https://s/praca/new',
            'https://s/praca/new',
        ]))

        assert queued(queue) == ['https://s/praca/new']
        assert budget.enqueued == 1

    def test_fallback_stops_at_budget(self):
        frontier, queue, budget, *_ = make_frontier(max_pages=2)
        links = [f'https://s/praca/{i}' for i in range(5)]

        asyncio.run(frontier.handle_page([], None, links))

        assert queued(queue) == links[:2]
        assert budget.enqueued == 2

    def test_budget_exhausted_skips_pagination(self):
        frontier, queue, budget, *_ = make_frontier(max_pages=1)
        budget.try_reserve()

        asyncio.run(frontier.handle_page([], NEXT, ['https://s/praca/3']))

        assert queue.is_empty()
        assert budget.enqueued == 1

    def test_stop_requested_skips_pagination(self):
        frontier, queue, budget, *_ = make_frontier()
        budget.request_stop()

        asyncio.run(frontier.handle_page([JobCandidate('O1', 'https://s/d/1')], NEXT, []))

        assert queue.is_empty()

    def test_budget_shared_across_pages(self):
        frontier, queue, budget, *_ = make_frontier(max_pages=3)

        async def run():
            await asyncio.gather(*(
                frontier.handle_page([], f'https://s/praca/?page_num={i}', [f'https://s/praca/alt{i}'])
                for i in range(10)
            ))

        asyncio.run(run())

        assert budget.enqueued == 3
        assert len(queued(queue)) == 3


# ============================================================================
# 列表页回调
# ============================================================================

class TestHandleListingPage:

    def test_extracts_from_page(self):
        frontier, queue, budget, dedup, pipeline = make_frontier()
        page = Mock()
        page.extract_job_candidates = AsyncMock(return_value=[JobCandidate('O1', 'https://s/d/1')])
        page.extract_next_page_url = AsyncMock(return_value=NEXT)
        page.extract_pagination_links = AsyncMock(return_value=[])

        outcomes = asyncio.run(frontier.handle_listing_page(page, 'https://s/praca/'))

        assert outcomes == [JobOutcome.SAVED]
        assert dedup.is_url_visited('https://s/praca/') is True
        assert queued(queue) == [NEXT]

    def test_current_page_not_re_enqueued_by_fallback(self):
        frontier, queue, *_ = make_frontier()
        page = Mock()
        page.extract_job_candidates = AsyncMock(return_value=[])
        page.extract_next_page_url = AsyncMock(return_value=None)
        page.extract_pagination_links = AsyncMock(return_value=['https://s/praca/', 'https://s/praca/2'])

        asyncio.run(frontier.handle_listing_page(page, 'https://s/praca/'))

        assert queued(queue) == ['https://s/praca/2']
