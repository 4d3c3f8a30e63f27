"""
职位存储实现
JobRecord 与 ORM 模型之间的转换，以及写入失败时的日志
"""

import logging
from typing import List

from ...domain.demand_interface.i_job_sink import IJobSink
from ...domain.value_objects.job_record import JobRecord
from .i_job_dao import IJobDao
from .models import JobRecordModel

error_logger = logging.getLogger('infrastructure.error')


def _to_number(value):
    """数据库中以浮点数保存，整数值还原为 int"""
    if value is None:
        return None
    return int(value) if float(value).is_integer() else value


class SqlAlchemyJobSinkImpl(IJobSink):
    """基于 DAO 的职位存储，每条记录单独提交"""

    def __init__(self, dao: IJobDao):
        self._dao = dao

    async def push(self, record: JobRecord) -> None:
        try:
            self._dao.add_job(self.to_model(record))
        except Exception as e:
            error_logger.error(f"保存职位失败: {record.job_id} - {str(e)}", extra={
                'job_id': record.job_id,
                'component': 'SqlAlchemyJobSinkImpl'
            })
            raise

    def get_all_jobs(self) -> List[JobRecord]:
        return [self.to_record(model) for model in self._dao.get_all_jobs()]

    def count(self) -> int:
        return self._dao.count()

    def clear(self) -> None:
        self._dao.delete_all()

    @staticmethod
    def to_model(record: JobRecord) -> JobRecordModel:
        return JobRecordModel(
            job_id=record.job_id,
            job_title=record.job_title,
            company_name=record.company_name,
            company_url=record.company_url,
            location=record.location,
            salary_min=record.salary_min,
            salary_max=record.salary_max,
            salary_currency=record.salary_currency,
            salary_period=record.salary_period,
            employment_type=record.employment_type,
            tags=list(record.tags or []),
            posted_at=record.posted_at,
            job_url=record.job_url,
            description=record.description,
        )

    @staticmethod
    def to_record(model: JobRecordModel) -> JobRecord:
        return JobRecord(
            job_id=model.job_id,
            job_title=model.job_title,
            company_name=model.company_name,
            company_url=model.company_url,
            location=model.location,
            salary_min=_to_number(model.salary_min),
            salary_max=_to_number(model.salary_max),
            salary_currency=model.salary_currency,
            salary_period=model.salary_period,
            employment_type=model.employment_type,
            tags=list(model.tags or []),
            posted_at=model.posted_at,
            job_url=model.job_url,
            description=model.description,
        )
