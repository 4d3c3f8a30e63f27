from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, JSON
from job_crawler.shared.db_manager import Base


class JobRecordModel(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String(64), nullable=False, index=True, comment="Job ID from listing")
    job_title = Column(Text, nullable=True)
    company_name = Column(String(255), nullable=True)
    company_url = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)

    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(String(16), nullable=True)
    salary_period = Column(String(32), nullable=True)

    employment_type = Column(String(100), nullable=True)
    tags = Column(JSON, nullable=True)
    posted_at = Column(String(32), nullable=True, comment="ISO date string")
    job_url = Column(Text, nullable=False)
    description = Column(Text, nullable=True)

    crawled_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return f"<JobRecordModel(id={self.id}, job_id={self.job_id})>"
