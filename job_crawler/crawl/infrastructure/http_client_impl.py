import asyncio
import logging
import time
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from typing import Optional
from ..domain.demand_interface.i_http_client import IHttpClient
from ..domain.value_objects.http_response import HttpResponse

error_logger = logging.getLogger('infrastructure.error')
perf_logger = logging.getLogger('infrastructure.perf')


class HttpClientImpl(IHttpClient):
    """
    基于requests库的HTTP客户端实现

    requests 是阻塞的，get() 通过 asyncio.to_thread 在线程池中执行，
    事件循环线程之外不修改任何共享状态。
    职位详情页与 robots.txt 都不做自动重试（max_retries 默认 0），
    列表页的重试由爬取引擎负责。
    """

    def __init__(
        self,
        user_agent: str = "JobCrawler/1.0",
        timeout: int = 30,
        max_retries: int = 0,
        retry_backoff: float = 0.3
    ):
        """
        初始化HTTP客户端

        参数:
            user_agent: User-Agent标识
            timeout: 请求超时时间(秒)
            max_retries: 最大重试次数
            retry_backoff: 重试间隔倍数
        """
        self._timeout = timeout
        self._session = requests.Session()
        self._max_retries = max_retries

        # 设置请求头
        self._session.headers.update({
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'sk-SK,sk;q=0.9,en;q=0.8',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive'
        })

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=retry_backoff,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            raise_on_status=False,
            connect=max_retries,
            read=max_retries,
            redirect=5,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    async def get(self, url: str) -> HttpResponse:
        """异步GET：在工作线程中执行阻塞请求"""
        return await asyncio.to_thread(self.fetch, url)

    def fetch(self, url: str, headers: Optional[dict] = None) -> HttpResponse:
        """
        执行HTTP GET请求（阻塞）

        参数:
            url: 目标URL
            headers: 自定义请求头(可选)

        返回:
            HttpResponse对象，包含响应信息或错误信息
        """
        start_time = time.time()
        try:
            response = self._session.get(
                url,
                headers=headers,
                timeout=self._timeout,
                allow_redirects=True
            )

            # header 里没写编码时 requests 默认 ISO-8859-1，斯洛伐克语页面会乱码
            if response.encoding == 'ISO-8859-1':
                response.encoding = response.apparent_encoding

            if not response.encoding:
                response.encoding = 'utf-8'

            content = response.text

            elapsed_ms = (time.time() - start_time) * 1000
            perf_logger.info(f"GET {url} - {response.status_code} - {elapsed_ms:.2f}ms", extra={
                'url': url,
                'method': 'GET',
                'status_code': response.status_code,
                'elapsed_ms': elapsed_ms,
                'component': 'HttpClientImpl'
            })

            return HttpResponse(
                url=response.url,
                status_code=response.status_code,
                headers=dict(response.headers),
                content=content,
                content_type=response.headers.get('Content-Type', ''),
                is_success=response.ok,
                error_message=None if response.ok else f"HTTP {response.status_code}"
            )

        except requests.exceptions.Timeout:
            return self._create_error_response(
                url, "请求超时", f"请求超过{self._timeout}秒未响应"
            )

        except requests.exceptions.ConnectionError as e:
            return self._create_error_response(
                url, "连接失败", f"无法连接到服务器: {str(e)}"
            )

        except requests.exceptions.TooManyRedirects:
            return self._create_error_response(
                url, "重定向过多", "重定向次数超过限制"
            )

        except requests.exceptions.RequestException as e:
            return self._create_error_response(
                url, "请求异常", f"请求失败: {str(e)}"
            )

    def _create_error_response(
        self,
        url: str,
        error_type: str,
        error_detail: str
    ) -> HttpResponse:
        """创建表示错误的HttpResponse对象，并写入错误日志"""
        error_logger.warning(f"{error_type}: {url} - {error_detail}", extra={
            'url': url,
            'error_type': error_type,
            'component': 'HttpClientImpl'
        })
        return HttpResponse(
            url=url,
            status_code=0,
            headers={},
            content='',
            content_type='',
            is_success=False,
            error_message=f"{error_type}: {error_detail}"
        )

    def close(self):
        """关闭会话，释放连接"""
        self._session.close()

    def __enter__(self):
        """支持上下文管理器"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """退出时自动关闭会话"""
        self.close()
