from abc import ABC, abstractmethod
from typing import Dict, List


class ICrawlEngine(ABC):
    """
    列表页爬取引擎（浏览器渲染）
    负责调度、并发、限速、重试与超时；每个页面渲染完成后调用页面处理器
    """

    @abstractmethod
    async def run(self, start_urls: List[str]) -> Dict[str, int]:
        """运行直到队列耗尽、达到请求上限或收到停止信号，返回引擎统计"""
        pass

    @abstractmethod
    def stop(self) -> None:
        """停止调度新请求，正在处理的页面允许完成"""
        pass
