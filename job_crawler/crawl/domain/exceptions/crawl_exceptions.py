"""
爬取异常类模块

定义爬取运行过程中可能发生的异常类型。
单个职位/单个页面的错误在边界处被捕获并计数，只有启动阶段的错误是致命的。
"""


class CrawlError(Exception):
    """爬取异常基类"""

    def __init__(self, message: str = "Crawl failed"):
        self.message = message
        super().__init__(self.message)


class StartUrlDisallowedError(CrawlError):
    """
    起始 URL 被 robots.txt 禁止

    Attributes:
        url: 起始 URL
    """

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Crawling disallowed by robots.txt: {url}")


class JobFetchError(CrawlError):
    """
    职位详情页获取失败（非 2xx 或网络错误）

    Attributes:
        url: 职位详情 URL
    """

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        super().__init__(f"Failed to fetch job detail {url}: {reason}" if reason else f"Failed to fetch job detail {url}")


class ConfigError(CrawlError):
    """配置值非法"""
    pass
