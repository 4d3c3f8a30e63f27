from abc import ABC, abstractmethod
from typing import List, Optional
from ..value_objects.job_candidate import JobCandidate


class IListingPage(ABC):
    """
    已渲染的列表页（由浏览器渲染引擎提供）
    只负责 DOM 查询，不包含业务判断
    """

    @abstractmethod
    async def extract_job_candidates(self) -> List[JobCandidate]:
        """提取职位行中的 {id, href}"""
        pass

    @abstractmethod
    async def extract_next_page_url(self) -> Optional[str]:
        """提取“下一页”链接，不存在返回 None"""
        pass

    @abstractmethod
    async def extract_pagination_links(self) -> List[str]:
        """
        提取备用分页链接：
        包含列表路径标记、不包含详情路径标记、且没有 id 属性的 <a> href，按页面顺序
        """
        pass
