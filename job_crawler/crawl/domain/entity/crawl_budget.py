from threading import Lock


class CrawlBudget:
    """
    列表页入队预算
    enqueued 单调递增且不超过 max_pages；请求停止后不再发放预算
    """

    def __init__(self, max_pages: int):
        if max_pages < 0:
            raise ValueError(f"max_pages 不能为负数: {max_pages}")
        self._max_pages = max_pages
        self._enqueued = 0
        self._stopped = False
        self._lock = Lock()

    def try_reserve(self) -> bool:
        """
        预留一个页面名额
        当前计数 < max_pages 且未停止时计数加一并返回 True，否则不做修改返回 False
        """
        with self._lock:
            if self._stopped or self._enqueued >= self._max_pages:
                return False
            self._enqueued += 1
            return True

    def request_stop(self) -> None:
        """外部停止信号：之后 try_reserve 一律返回 False"""
        with self._lock:
            self._stopped = True

    @property
    def is_exhausted(self) -> bool:
        return self._stopped or self._enqueued >= self._max_pages

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def enqueued(self) -> int:
        return self._enqueued

    @property
    def max_pages(self) -> int:
        return self._max_pages
