from dataclasses import dataclass
from job_crawler.shared.domain.events import DomainEvent


@dataclass
class RunStartedEvent(DomainEvent):
    start_url: str
    max_pages: int
    concurrency: int


@dataclass
class RunStopRequestedEvent(DomainEvent):
    reason: str = "检测到停止信号"


@dataclass
class RunCompletedEvent(DomainEvent):
    total_jobs: int
    duplicates: int
    failed: int
    invalid: int
    pages_enqueued: int
    elapsed_time: float


@dataclass
class RunFailedEvent(DomainEvent):
    error_message: str
    stack_trace: str = ""
