from abc import ABC, abstractmethod
from ..value_objects.http_response import HttpResponse


class IHttpClient(ABC):
    @abstractmethod
    async def get(self, url: str) -> HttpResponse:
        """
        执行HTTP GET请求（robots.txt 与职位详情页共用）
        返回: HttpResponse(status_code, headers, content, content_type)
        处理: 网络异常、超时不抛出，而是返回 is_success=False 的响应
        """
        pass
