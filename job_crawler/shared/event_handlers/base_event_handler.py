from abc import ABC, abstractmethod
from datetime import datetime
from job_crawler.shared.domain.events import DomainEvent


class BaseEventHandler(ABC):
    """
    事件处理器基类
    提供通用的事件格式化方法
    """

    @abstractmethod
    def handle(self, event: DomainEvent) -> None:
        """
        处理事件（子类必须实现）

        参数:
            event: DomainEvent 实例
        """
        pass

    def _format_event_to_log(self, event: DomainEvent) -> dict:
        """
        将领域事件转换为日志格式（通用方法）

        返回:
            格式化的日志字典
        """
        message, level = self._get_message_and_level(event)

        return {
            "timestamp": self._format_timestamp(event.timestamp),
            "level": level,
            "message": message,
            "event_type": event.event_type,
            "run_id": event.run_id,
            "data": event.data
        }

    def _get_message_and_level(self, event: DomainEvent) -> tuple[str, str]:
        """
        根据事件类型生成消息和日志级别

        返回:
            (message, level) 元组
        """
        event_type = event.event_type
        data = event.data

        # --- 运行生命周期事件 (Run Life Cycle) ---
        if event_type == "RunStartedEvent":
            return (
                f"▶ 开始爬取: {data.get('start_url', 'N/A')} "
                f"[最大页数: {data.get('max_pages')}, 并发: {data.get('concurrency')}]",
                "INFO"
            )

        elif event_type == "RunStopRequestedEvent":
            return (f"⏹ 停止请求: {data.get('reason', '')}", "WARNING")

        elif event_type == "RunCompletedEvent":
            elapsed_time = data.get('elapsed_time') or 0
            return (
                f"✓ 爬取完成! 保存 {data.get('total_jobs', 0)} 个职位, "
                f"重复 {data.get('duplicates', 0)}, 失败 {data.get('failed', 0)}, "
                f"无效 {data.get('invalid', 0)}, 入队 {data.get('pages_enqueued', 0)} 个列表页 "
                f"(耗时: {elapsed_time:.1f}秒)",
                "SUCCESS"
            )

        elif event_type == "RunFailedEvent":
            return (f"✗ 爬取失败: {data.get('error_message', '未知错误')}", "ERROR")

        # --- 爬取过程事件 (Crawl Process) ---

        elif event_type == "PageVisitedEvent":
            return (
                f"访问列表页: {data.get('url')} (职位链接: {data.get('job_count', 0)})",
                "INFO"
            )

        elif event_type == "JobSavedEvent":
            return (
                f"✓ 职位已保存: {data.get('job_title') or '无标题'}\n  URL: {data.get('url')}",
                "INFO"
            )

        elif event_type == "JobDuplicateEvent":
            return (f"∅ 重复职位: {data.get('job_id')} ({data.get('url')})", "DEBUG")

        elif event_type == "JobInvalidEvent":
            return (f"⚠ 职位校验失败: {data.get('job_id')} ({data.get('url')})", "WARNING")

        elif event_type == "JobFailedEvent":
            return (
                f"✗ 职位处理失败 [{data.get('error_type', 'UNKNOWN')}]: {data.get('url')}\n"
                f"  错误: {data.get('error_message', '')}",
                "ERROR"
            )

        elif event_type == "PageEnqueuedEvent":
            return (
                f"➕ 列表页入队: {data.get('url')} "
                f"({data.get('enqueued')}/{data.get('max_pages')})",
                "INFO"
            )

        elif event_type == "LinkFilteredEvent":
            return (
                f"∅ 链接过滤: {data.get('url')} ({data.get('reason')})",
                "DEBUG"
            )

        else:
            return (
                f"事件: {event_type}",
                "DEBUG"
            )

    def _format_timestamp(self, timestamp: datetime) -> str:
        """格式化时间戳"""
        if not isinstance(timestamp, datetime):
            return str(timestamp)
        return timestamp.strftime('%Y-%m-%d %H:%M:%S')
