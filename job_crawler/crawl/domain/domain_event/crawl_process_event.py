from dataclasses import dataclass
from typing import Optional
from job_crawler.shared.domain.events import DomainEvent


@dataclass
class PageVisitedEvent(DomainEvent):
    """列表页被渲染并交给 Frontier 处理"""
    url: str
    job_count: int


@dataclass
class JobSavedEvent(DomainEvent):
    """职位通过校验并写入存储"""
    job_id: str
    url: str
    job_title: Optional[str] = None


@dataclass
class JobDuplicateEvent(DomainEvent):
    job_id: str
    url: str


@dataclass
class JobInvalidEvent(DomainEvent):
    """职位未通过校验，被丢弃"""
    job_id: str
    url: str


@dataclass
class JobFailedEvent(DomainEvent):
    """单个职位处理失败（缺少字段、robots 禁止、抓取或解析异常）"""
    url: Optional[str]
    error_type: str
    error_message: str


@dataclass
class PageEnqueuedEvent(DomainEvent):
    url: str
    enqueued: int
    max_pages: int


@dataclass
class LinkFilteredEvent(DomainEvent):
    """分页链接被过滤（用于调试日志）"""
    url: str
    reason: str  # e.g., "visited", "robots_txt", "budget_exhausted"
