from abc import ABC, abstractmethod
from typing import List
from .models import JobRecordModel


class IJobDao(ABC):
    """
    Interface for Job Data Access Object
    """

    @abstractmethod
    def add_job(self, job: JobRecordModel) -> None:
        """Add a job record"""
        pass

    @abstractmethod
    def get_all_jobs(self) -> List[JobRecordModel]:
        """Get all job records in insertion order"""
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Delete all job records (e.g. on restart)"""
        pass
