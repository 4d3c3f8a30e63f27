# shared/event_handlers/logging_handler.py
from typing import Dict, List, Optional
from collections import deque
import logging
from .base_event_handler import BaseEventHandler
from job_crawler.shared.domain.events import DomainEvent

# SUCCESS 不是标准级别，按 INFO 写入日志文件
_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'SUCCESS': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
}

_LIFECYCLE_EVENTS = {
    'RunStartedEvent', 'RunStopRequestedEvent', 'RunCompletedEvent', 'RunFailedEvent'
}


class LoggingEventHandler(BaseEventHandler):
    """
    日志事件处理器
    职责：
    1. 捕获领域事件并转换为日志格式
    2. 按运行ID分组存储日志到内存队列
    3. 将日志写入对应的业务 Logger（文件格式由 logging_config 决定）
    """

    def __init__(self, max_logs_per_run: int = 1000):
        """
        参数:
            max_logs_per_run: 每次运行最多保留的日志条数（超出则丢弃最旧的）
        """
        self._run_logs: Dict[str, deque] = {}
        self._max_logs_per_run = max_logs_per_run

        self._lifecycle_logger = logging.getLogger('domain.run_lifecycle')
        self._process_logger = logging.getLogger('domain.crawl_process')

# -------------------- 最重要的方法：将事件转换为日志格式并存储 --------------------

    def handle(self, event: DomainEvent) -> None:
        """处理事件：转换为日志格式、写入 Logger 并存储"""
        try:
            run_id = getattr(event, 'run_id', 'unknown_run')

            if run_id not in self._run_logs:
                self._run_logs[run_id] = deque(maxlen=self._max_logs_per_run)

            log_entry = self._format_event_to_log(event)
            self._run_logs[run_id].append(log_entry)

            logger = self._lifecycle_logger if event.event_type in _LIFECYCLE_EVENTS else self._process_logger
            logger.log(
                _LEVELS.get(log_entry['level'], logging.INFO),
                log_entry['message'],
                extra={
                    'event_type': log_entry['event_type'],
                    'run_id': run_id,
                    'data': log_entry['data']
                }
            )

        except Exception as e:
            # 日志处理本身出错不能影响爬取
            logging.getLogger('infrastructure.error').error(f"LoggingEventHandler error: {e}")

# -------------------- 日志查询接口 --------------------

    def get_logs(self, run_id: str, last_n: Optional[int] = None) -> List[dict]:
        """
        获取运行日志

        参数:
            run_id: 运行ID
            last_n: 获取最近N条，None表示全部
        """
        logs = self._run_logs.get(run_id, deque())

        if last_n:
            return list(logs)[-last_n:]
        return list(logs)

    def get_all_run_ids(self) -> List[str]:
        """获取所有有日志的运行ID列表"""
        return list(self._run_logs.keys())

    def get_log_count(self, run_id: str) -> int:
        return len(self._run_logs.get(run_id, deque()))

    def get_logs_by_level(self, run_id: str, level: str) -> List[dict]:
        """获取指定级别的日志 (INFO/ERROR/SUCCESS/WARNING/DEBUG)"""
        logs = self._run_logs.get(run_id, deque())
        return [log for log in logs if log['level'] == level]

    def get_error_logs(self, run_id: str) -> List[dict]:
        """快捷方法：获取所有错误日志"""
        return self.get_logs_by_level(run_id, 'ERROR')

# -------------------- 清空和检查错误 --------------------

    def clear_logs(self, run_id: str) -> None:
        if run_id in self._run_logs:
            self._run_logs[run_id].clear()

    def has_errors(self, run_id: str) -> bool:
        return len(self.get_error_logs(run_id)) > 0
