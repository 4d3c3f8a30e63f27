from abc import ABC, abstractmethod
from typing import List, Optional


class IRequestQueue(ABC):
    """
    列表页请求队列接口
    职责: 保存待渲染的列表页 URL（先进先出）
    """

    @abstractmethod
    async def enqueue(self, urls: List[str]) -> int:
        """
        添加URL到队列

        返回:
            实际新加入的数量（已入队过的URL会被忽略）
        """
        pass

    @abstractmethod
    def dequeue(self) -> Optional[str]:
        """取出下一个URL，队列为空时返回None"""
        pass

    @abstractmethod
    def is_empty(self) -> bool:
        pass

    @abstractmethod
    def size(self) -> int:
        pass
