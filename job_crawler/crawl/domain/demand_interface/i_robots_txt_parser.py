from abc import ABC, abstractmethod
from typing import Optional


class IRobotsTxtParser(ABC):
    """Robots.txt协议解析器接口"""

    @abstractmethod
    async def is_allowed(self, url: str, user_agent: str = "*") -> bool:
        """
        检查URL是否允许被指定user-agent爬取

        参数:
            url: 目标URL
            user_agent: 爬虫的User-Agent标识，默认 "*"

        返回:
            True表示允许爬取，False表示禁止

        逻辑:
            1. 获取该域名的robots.txt文件（每个域名只获取一次）
            2. 解析Disallow和Allow规则
            3. 判断url是否匹配禁止规则
            任何解析或网络错误都按允许处理，不向调用方抛出异常
        """
        pass

    @abstractmethod
    async def log_info(self, url: str) -> Optional[dict]:
        """
        输出域名的 robots.txt 概况（仅用于诊断，不影响 is_allowed）

        返回:
            概况字典，URL 非法时返回 None
        """
        pass
