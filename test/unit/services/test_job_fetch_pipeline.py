"""
JobFetchPipeline 测试
外部协作者全部使用 Mock/AsyncMock
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from job_crawler.crawl.domain.domain_service.stats_aggregator import StatsAggregator
from job_crawler.crawl.domain.entity.dedup_registry import DedupRegistry
from job_crawler.crawl.domain.value_objects.http_response import HttpResponse
from job_crawler.crawl.domain.value_objects.job_candidate import JobCandidate
from job_crawler.crawl.domain.value_objects.job_record import JobRecord
from job_crawler.crawl.services.job_fetch_pipeline import JobFetchPipeline, JobOutcome
from job_crawler.shared.event_bus import EventBus

JOB_URL = 'https://www.profesia.sk/praca/acme/O1'


def ok_response(url=JOB_URL, content='<html></html>'):
    return HttpResponse(url=url, status_code=200, headers={}, content=content,
                        content_type='text/html', is_success=True)


def make_record(job_id='O1', url=JOB_URL):
    return JobRecord(job_id=job_id, job_title='Dev', job_url=url, location='Bratislava')


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def collaborators():
    robots = Mock()
    robots.is_allowed = AsyncMock(return_value=True)

    http_client = Mock()
    http_client.get = AsyncMock(return_value=ok_response())

    parser = Mock()
    parser.parse = Mock(side_effect=lambda html, job_id, url: make_record(job_id, url))

    validator = Mock()
    validator.is_valid = Mock(return_value=True)

    sink = Mock()
    sink.push = AsyncMock()

    return {
        'robots': robots,
        'dedup': DedupRegistry(),
        'http_client': http_client,
        'parser': parser,
        'validator': validator,
        'sink': sink,
        'reporter': StatsAggregator(),
    }


@pytest.fixture
def events():
    return []


@pytest.fixture
def pipeline(collaborators, events):
    bus = EventBus()
    bus.subscribe_to_all(events.append)
    return JobFetchPipeline(event_bus=bus, run_id='run-1', **collaborators)


def process(pipeline, candidate):
    return asyncio.run(pipeline.process(candidate))


# ============================================================================
# 正常流程
# ============================================================================

class TestSuccess:

    def test_saves_valid_job(self, pipeline, collaborators, events):
        outcome = process(pipeline, JobCandidate('O1', JOB_URL))

        assert outcome is JobOutcome.SAVED
        collaborators['sink'].push.assert_awaited_once()
        collaborators['parser'].parse.assert_called_once_with('<html></html>', 'O1', JOB_URL)
        assert collaborators['reporter'].total_jobs == 1
        assert [e.event_type for e in events] == ['JobSavedEvent']
        assert events[0].run_id == 'run-1'

    def test_checks_robots_with_user_agent(self, collaborators):
        pipeline = JobFetchPipeline(user_agent='jobbot', **collaborators)
        process(pipeline, JobCandidate('O1', JOB_URL))
        collaborators['robots'].is_allowed.assert_awaited_once_with(JOB_URL, 'jobbot')

    def test_works_without_event_bus(self, collaborators):
        pipeline = JobFetchPipeline(**collaborators)
        assert process(pipeline, JobCandidate('O1', JOB_URL)) is JobOutcome.SAVED


# ============================================================================
# 跳过与失败
# ============================================================================

class TestSkipAndFailure:

    @pytest.mark.parametrize('candidate', [JobCandidate(None, JOB_URL), JobCandidate('O1', None), JobCandidate('', '')])
    def test_missing_id_or_url(self, pipeline, collaborators, candidate):
        assert process(pipeline, candidate) is JobOutcome.FAILED
        assert collaborators['reporter'].failed == 1
        collaborators['robots'].is_allowed.assert_not_called()
        collaborators['http_client'].get.assert_not_called()

    def test_robots_disallowed(self, pipeline, collaborators, events):
        collaborators['robots'].is_allowed.return_value = False

        assert process(pipeline, JobCandidate('O1', JOB_URL)) is JobOutcome.FAILED
        assert collaborators['reporter'].failed_urls == [JOB_URL]
        # 被禁止的职位不会登记到去重表
        assert collaborators['dedup'].is_job_seen('O1') is False
        assert events[0].error_type == 'RobotsDisallowed'

    def test_duplicate(self, pipeline, collaborators, events):
        collaborators['dedup'].mark_job_seen('O1')

        assert process(pipeline, JobCandidate('O1', JOB_URL)) is JobOutcome.DUPLICATE
        assert collaborators['reporter'].duplicates == 1
        collaborators['http_client'].get.assert_not_called()
        assert events[0].event_type == 'JobDuplicateEvent'

    def test_fetch_not_success(self, pipeline, collaborators, events):
        collaborators['http_client'].get.return_value = HttpResponse(
            url=JOB_URL, status_code=503, headers={}, content='', content_type='',
            is_success=False, error_message='HTTP 503'
        )

        assert process(pipeline, JobCandidate('O1', JOB_URL)) is JobOutcome.FAILED
        assert collaborators['reporter'].failed_urls == [JOB_URL]
        assert events[0].error_type == 'JobFetchError'
        collaborators['parser'].parse.assert_not_called()

    def test_fetch_raises(self, pipeline, collaborators):
        collaborators['http_client'].get.side_effect = ConnectionError('reset')
        assert process(pipeline, JobCandidate('O1', JOB_URL)) is JobOutcome.FAILED
        assert collaborators['reporter'].failed == 1

    def test_parser_raises(self, pipeline, collaborators):
        collaborators['parser'].parse.side_effect = ValueError('bad html')
        assert process(pipeline, JobCandidate('O1', JOB_URL)) is JobOutcome.FAILED
        collaborators['sink'].push.assert_not_called()

    def test_invalid_record_counted_separately(self, pipeline, collaborators, events):
        collaborators['validator'].is_valid.return_value = False

        assert process(pipeline, JobCandidate('O1', JOB_URL)) is JobOutcome.INVALID
        reporter = collaborators['reporter']
        assert (reporter.total_jobs, reporter.failed, reporter.invalid) == (0, 0, 1)
        collaborators['sink'].push.assert_not_called()
        assert events[0].event_type == 'JobInvalidEvent'

    def test_sink_failure_not_counted_as_saved(self, pipeline, collaborators):
        collaborators['sink'].push.side_effect = RuntimeError('db down')

        assert process(pipeline, JobCandidate('O1', JOB_URL)) is JobOutcome.FAILED
        assert collaborators['reporter'].total_jobs == 0
        assert collaborators['reporter'].failed == 1

    def test_failure_does_not_affect_siblings(self, pipeline, collaborators):
        async def get(url):
            if url.endswith('bad'):
                raise ConnectionError('reset')
            return ok_response(url)

        collaborators['http_client'].get.side_effect = get

        async def run():
            return await asyncio.gather(
                pipeline.process(JobCandidate('O1', 'https://s/ok1')),
                pipeline.process(JobCandidate('O2', 'https://s/bad')),
                pipeline.process(JobCandidate('O3', 'https://s/ok2')),
            )

        outcomes = asyncio.run(run())

        assert outcomes == [JobOutcome.SAVED, JobOutcome.FAILED, JobOutcome.SAVED]
        assert collaborators['reporter'].total_jobs == 2
