from datetime import date, datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from ..domain.demand_interface.i_job_validator import IJobValidator
from ..domain.value_objects.job_record import JobRecord

REQUIRED_FIELDS = ('job_title', 'job_id', 'job_url', 'location')


def _is_absolute_url(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def _parse_posted_at(value) -> Optional[datetime]:
    """支持 date/datetime 对象和 ISO 字符串；无时区的按 UTC 处理"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_invalid_number(value) -> bool:
    if value is None:
        return False
    return isinstance(value, bool) or not isinstance(value, (int, float))


class JobValidatorImpl(IJobValidator):
    """
    职位数据校验器
    必填（非空字符串）: job_title, job_id, job_url, location
    job_url 与 company_url（若存在）必须是绝对URL；薪资上下限若存在必须是数字。
    """

    def is_valid(self, record: JobRecord) -> bool:
        if record is None:
            return False

        for field_name in REQUIRED_FIELDS:
            value = getattr(record, field_name, None)
            if not isinstance(value, str) or not value.strip():
                return False

        if not _is_absolute_url(record.job_url):
            return False

        if record.company_url and not _is_absolute_url(record.company_url):
            return False

        # 发布日期无法解析或在未来：保留职位，但清空日期
        if record.posted_at:
            posted = _parse_posted_at(record.posted_at)
            if posted is None or posted > datetime.now(timezone.utc):
                record.posted_at = None

        if not isinstance(record.tags, list):
            record.tags = list(record.tags) if isinstance(record.tags, tuple) else []

        if _is_invalid_number(record.salary_min) or _is_invalid_number(record.salary_max):
            return False

        return True
