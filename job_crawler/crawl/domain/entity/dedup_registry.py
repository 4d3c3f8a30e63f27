from threading import Lock
from typing import Set


class DedupRegistry:
    """
    去重登记表（一次爬取运行内有效）
    - seen_job_ids: 已处理过的职位ID
    - visited_urls: 已访问/已入队的列表页URL

    成员关系单调增长，不提供删除操作。
    检查与插入在同一个锁内完成，中间没有挂起点。
    """

    def __init__(self):
        self._seen_job_ids: Set[str] = set()
        self._visited_urls: Set[str] = set()
        self._lock = Lock()

    def mark_job_seen(self, job_id: str) -> bool:
        """登记职位ID，首次出现返回 True，已存在返回 False"""
        with self._lock:
            if job_id in self._seen_job_ids:
                return False
            self._seen_job_ids.add(job_id)
            return True

    def mark_url_visited(self, url: str) -> bool:
        """登记URL，首次出现返回 True，已存在返回 False"""
        with self._lock:
            if url in self._visited_urls:
                return False
            self._visited_urls.add(url)
            return True

    def is_job_seen(self, job_id: str) -> bool:
        return job_id in self._seen_job_ids

    def is_url_visited(self, url: str) -> bool:
        return url in self._visited_urls

    @property
    def seen_job_count(self) -> int:
        return len(self._seen_job_ids)

    @property
    def visited_urls(self) -> Set[str]:
        """已访问URL集合（副本）"""
        return set(self._visited_urls)
