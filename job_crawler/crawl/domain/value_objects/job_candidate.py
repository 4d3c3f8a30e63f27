from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class JobCandidate:
    """列表页上提取出的职位链接 {id, url}，尚未校验"""
    id: Optional[str]
    url: Optional[str]
