from abc import ABC, abstractmethod
from ..value_objects.job_record import JobRecord


class IJobValidator(ABC):

    @abstractmethod
    def is_valid(self, record: JobRecord) -> bool:
        """
        校验职位数据（保存前调用）
        副作用: posted_at 无法解析或在未来时置为 None；tags 不是列表时置为 []
        """
        pass
