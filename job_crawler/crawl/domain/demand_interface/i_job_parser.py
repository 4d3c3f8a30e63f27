from abc import ABC, abstractmethod
from ..value_objects.job_record import JobRecord


class IJobParser(ABC):
    """职位详情页字段提取器"""

    @abstractmethod
    def parse(self, html: str, job_id: str, job_url: str) -> JobRecord:
        """
        解析职位详情HTML
        纯函数，输入残缺时不抛异常，缺失字段为 None / 空列表；job_id 与 job_url 原样透传
        """
        pass
