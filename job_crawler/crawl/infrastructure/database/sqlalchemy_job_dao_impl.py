from typing import List
from sqlalchemy.orm import Session
from .models import JobRecordModel
from .i_job_dao import IJobDao


class SqlAlchemyJobDaoImpl(IJobDao):
    """
    SQLAlchemy implementation of IJobDao
    """

    def __init__(self, session: Session):
        """
        :param session: SQLAlchemy session (scoped session in production, plain session in tests)
        """
        self._session = session

    def add_job(self, job: JobRecordModel) -> None:
        try:
            self._session.add(job)
            self._session.commit()
        except Exception as e:
            self._session.rollback()
            raise e

    def get_all_jobs(self) -> List[JobRecordModel]:
        return self._session.query(JobRecordModel).order_by(JobRecordModel.id.asc()).all()

    def count(self) -> int:
        return self._session.query(JobRecordModel).count()

    def delete_all(self) -> None:
        try:
            self._session.query(JobRecordModel).delete()
            self._session.commit()
        except Exception as e:
            self._session.rollback()
            raise e
