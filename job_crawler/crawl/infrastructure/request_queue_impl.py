# infrastructure/request_queue_impl.py
from collections import deque
from typing import Deque, List, Optional, Set
from ..domain.demand_interface.i_request_queue import IRequestQueue


class RequestQueueImpl(IRequestQueue):
    """
    列表页请求队列实现 - 先进先出(BFS)
    同一个URL在一次运行中只会入队一次（与浏览器爬取引擎的 uniqueKey 语义一致）
    """

    def __init__(self):
        self._queue: Deque[str] = deque()
        self._seen: Set[str] = set()
        self._handled_count: int = 0

    async def enqueue(self, urls: List[str]) -> int:
        """添加URL到队列，返回新加入的数量"""
        added = 0
        for url in urls:
            if not url or url in self._seen:
                continue
            self._seen.add(url)
            self._queue.append(url)
            added += 1
        return added

    def dequeue(self) -> Optional[str]:
        """从队列取出下一个URL"""
        if not self._queue:
            return None
        self._handled_count += 1
        return self._queue.popleft()

    def is_empty(self) -> bool:
        return len(self._queue) == 0

    def size(self) -> int:
        return len(self._queue)

    @property
    def handled_count(self) -> int:
        """已取出的请求数量"""
        return self._handled_count
