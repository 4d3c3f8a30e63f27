from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float]


@dataclass
class JobRecord:
    """
    结构化的职位数据
    除 posted_at / tags 由校验器规范化外，创建后不再修改
    """
    job_id: Optional[str] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    company_url: Optional[str] = None
    location: Optional[str] = None
    salary_min: Optional[Number] = None
    salary_max: Optional[Number] = None
    salary_currency: Optional[str] = None
    salary_period: Optional[str] = None
    employment_type: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    posted_at: Optional[str] = None
    job_url: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """导出格式（与 jobs.json / jobs.csv 的列名一致）"""
        return {
            "jobId": self.job_id,
            "jobTitle": self.job_title,
            "companyName": self.company_name,
            "companyUrl": self.company_url,
            "location": self.location,
            "salaryMin": self.salary_min,
            "salaryMax": self.salary_max,
            "salaryCurrency": self.salary_currency,
            "salaryPeriod": self.salary_period,
            "employmentType": self.employment_type,
            "tags": list(self.tags) if isinstance(self.tags, (list, tuple)) else [],
            "postedAt": self.posted_at,
            "jobUrl": self.job_url,
            "description": self.description,
        }
