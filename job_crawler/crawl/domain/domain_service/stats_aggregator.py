"""
模块职责（领域服务）
- 汇总一次爬取运行的统计：成功/重复/失败/无效计数，地点、标签、公司、雇佣类型的频次，薪资区间；
- 只能通过 add_* 方法修改，外部通过 summary() 获得只读视图。
"""

import time
from typing import Dict, List, Optional, Tuple
from ..value_objects.crawl_summary import CrawlSummary, SalaryStats
from ..value_objects.job_record import JobRecord


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _top(counter: Dict[str, int], n: int) -> List[Tuple[str, int]]:
    # sorted 是稳定排序，reverse=True 时计数相同的键仍保持首次插入顺序
    return sorted(counter.items(), key=lambda item: item[1], reverse=True)[:n]


class StatsAggregator:
    """
    爬取统计汇总器
    """

    def __init__(self):
        self.total_jobs = 0
        self.duplicates = 0
        self.failed = 0
        self.invalid = 0
        self.locations: Dict[str, int] = {}
        self.tags: Dict[str, int] = {}
        self.companies: Dict[str, int] = {}
        self.employment_types: Dict[str, int] = {}
        self.salaries: List[dict] = []
        self.failed_urls: List[str] = []
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

# -------------------- 计时 --------------------

    def start_timer(self) -> None:
        self.start_time = time.time()

    def end_timer(self) -> None:
        self.end_time = time.time()

# -------------------- 累加 --------------------

    def add_job(self, job: JobRecord) -> None:
        """登记一个成功保存的职位并更新各项分布"""
        self.total_jobs += 1

        if job.location:
            self.locations[job.location] = self.locations.get(job.location, 0) + 1

        if isinstance(job.tags, (list, tuple)):
            for tag in job.tags:
                self.tags[tag] = self.tags.get(tag, 0) + 1

        if job.company_name:
            self.companies[job.company_name] = self.companies.get(job.company_name, 0) + 1

        if _is_number(job.salary_min) and _is_number(job.salary_max):
            self.salaries.append({
                'min': job.salary_min,
                'max': job.salary_max,
                'currency': job.salary_currency,
                'period': job.salary_period,
            })

        if job.employment_type:
            self.employment_types[job.employment_type] = self.employment_types.get(job.employment_type, 0) + 1

    def add_duplicate(self) -> None:
        self.duplicates += 1

    def add_failed(self, url: Optional[str] = None) -> None:
        self.failed += 1
        if url:
            self.failed_urls.append(url)

    def add_invalid(self) -> None:
        """校验失败的职位单独计数，不计入 failed"""
        self.invalid += 1

# -------------------- 汇总 --------------------

    def summary(self) -> CrawlSummary:
        duration = None
        if self.start_time is not None and self.end_time is not None:
            duration = round(self.end_time - self.start_time, 2)

        salary_stats = None
        if self.salaries:
            count = len(self.salaries)
            salary_stats = SalaryStats(
                count=count,
                avg_min=sum(s['min'] for s in self.salaries) / count,
                avg_max=sum(s['max'] for s in self.salaries) / count,
                currency=self.salaries[0]['currency'] or '',
                period=self.salaries[0]['period'] or '',
            )

        top_employment_types = [
            (emp_type, count) for emp_type, count in _top(self.employment_types, len(self.employment_types))
            if emp_type and count > 0
        ][:3]

        return CrawlSummary(
            total_jobs=self.total_jobs,
            duplicates=self.duplicates,
            failed=self.failed,
            invalid=self.invalid,
            duration_seconds=duration,
            top_locations=_top(self.locations, 5),
            top_tags=_top(self.tags, 5),
            top_companies=_top(self.companies, 5),
            salary_stats=salary_stats,
            top_employment_types=top_employment_types,
            unique_locations=len(self.locations),
            unique_tags=len(self.tags),
            unique_companies=len(self.companies),
            failed_urls=self.failed_urls[:5],
        )


def render_summary(summary: CrawlSummary) -> str:
    """把汇总渲染成运行结束时打印的文本报告"""
    lines = ['', '--- CRAWL SUMMARY REPORT ---', '']
    if summary.duration_seconds is not None:
        lines.append(f"Crawl duration: {summary.duration_seconds:.2f} seconds")
    lines.append(f"Total jobs processed: {summary.total_jobs}")
    lines.append(f"Duplicates skipped: {summary.duplicates}")
    lines.append(f"Failed jobs: {summary.failed}")
    lines.append(f"Invalid jobs dropped: {summary.invalid}")

    for title, items in (
        ('Top locations', summary.top_locations),
        ('Top tags', summary.top_tags),
        ('Top companies', summary.top_companies),
    ):
        lines.append('')
        lines.append(f"{title}:")
        lines.extend(f"  {key}: {count}" for key, count in items)

    lines.append('')
    lines.append('Salary stats:')
    salary = summary.salary_stats
    if salary:
        lines.append(f"  Jobs with salary info: {salary.count}")
        lines.append(f"  Average min: {salary.avg_min:.2f} {salary.currency} / {salary.period}")
        lines.append(f"  Average max: {salary.avg_max:.2f} {salary.currency} / {salary.period}")
    else:
        lines.append('  No salary info available.')

    lines.append('')
    lines.append('Top employment types:')
    if summary.top_employment_types:
        lines.extend(f"  {emp_type}: {count}" for emp_type, count in summary.top_employment_types)
    else:
        lines.append('  No employment type data available.')

    lines.append('')
    lines.append(f"Unique locations: {summary.unique_locations}")
    lines.append(f"Unique tags: {summary.unique_tags}")
    lines.append(f"Unique companies: {summary.unique_companies}")

    if summary.failed_urls:
        lines.append('')
        lines.append('Failed job URLs (first 5):')
        lines.extend(f"  {url}" for url in summary.failed_urls)

    lines.append('---------------------------')
    return '\n'.join(lines)
