from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class SalaryStats:
    count: int
    avg_min: float
    avg_max: float
    currency: str = ""
    period: str = ""


@dataclass(frozen=True)
class CrawlSummary:
    """StatsAggregator.summary() 的只读视图"""
    total_jobs: int
    duplicates: int
    failed: int
    invalid: int = 0
    duration_seconds: Optional[float] = None
    top_locations: List[Tuple[str, int]] = field(default_factory=list)
    top_tags: List[Tuple[str, int]] = field(default_factory=list)
    top_companies: List[Tuple[str, int]] = field(default_factory=list)
    salary_stats: Optional[SalaryStats] = None
    top_employment_types: List[Tuple[str, int]] = field(default_factory=list)
    unique_locations: int = 0
    unique_tags: int = 0
    unique_companies: int = 0
    failed_urls: List[str] = field(default_factory=list)
