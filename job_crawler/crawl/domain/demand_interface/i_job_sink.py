from abc import ABC, abstractmethod
from typing import List
from ..value_objects.job_record import JobRecord


class IJobSink(ABC):
    """
    职位存储接口（仅追加）
    去重在上游完成，存储层不负责去重
    """

    @abstractmethod
    async def push(self, record: JobRecord) -> None:
        """追加一条已通过校验的职位"""
        pass

    @abstractmethod
    def get_all_jobs(self) -> List[JobRecord]:
        """按写入顺序返回所有职位"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """清空存储（每次运行开始时调用，不保留跨运行状态）"""
        pass

    @abstractmethod
    def count(self) -> int:
        pass
