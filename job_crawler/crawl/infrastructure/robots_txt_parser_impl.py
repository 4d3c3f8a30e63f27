# infrastructure/robots_txt_parser_impl.py
"""
模块职责（基础设施层）
- 获取、解析、缓存 robots.txt，并判断 URL 是否允许爬取；
- 每个域名在一次运行中只获取一次，并发的首次请求共享同一个获取任务；
- 获取失败（非2xx、网络错误、内容异常）缓存为“全部允许”，本次运行内不再重试。

规则语义（简化版，刻意不同于 RFC 9309）
- 每一行 User-agent 都会重置当前 agent，多行 User-agent 不合并成一组；
- 先找第一个命中的 Disallow，再看是否有任意 Allow 命中，命中则放行；
- 模式中 * 匹配任意子串，结尾 $ 锚定结尾，其余按前缀匹配；模式 "/" 只匹配根路径。
"""

import asyncio
import logging
import re
from typing import Dict, Optional
from urllib.parse import urlparse
from ..domain.demand_interface.i_http_client import IHttpClient
from ..domain.demand_interface.i_robots_txt_parser import IRobotsTxtParser
from ..domain.value_objects.robots_rule_set import AgentRules, RobotsRuleSet

logger = logging.getLogger('domain.crawl_process')
error_logger = logging.getLogger('infrastructure.error')


class RobotsTxtParserImpl(IRobotsTxtParser):
    """基于自定义解析规则的 robots.txt 策略引擎"""

    def __init__(self, http_client: IHttpClient):
        """
        参数:
            http_client: 用于获取 robots.txt 的 HTTP 客户端
        """
        self._http = http_client
        # robots_url -> 解析结果；键不存在表示尚未获取
        self._cache: Dict[str, RobotsRuleSet] = {}
        # robots_url -> 正在进行的获取任务（合并并发的首次请求）
        self._pending: Dict[str, asyncio.Task] = {}

    async def is_allowed(self, url: str, user_agent: str = "*") -> bool:
        """检查URL是否允许爬取"""
        try:
            parsed = urlparse(url)
            if not parsed.scheme or not parsed.netloc:
                raise ValueError(f"Invalid URL: {url}")

            rules = await self._get_rules(self._robots_url(parsed.scheme, parsed.netloc))
            if rules.is_permissive:
                return True

            return self.check_rules(parsed.path or '/', rules, user_agent)

        except Exception as e:
            # robots.txt 检查失败，默认允许访问
            error_logger.warning(f"Robots.txt检查失败: {str(e)}, 默认允许访问", extra={
                'url': url,
                'component': 'RobotsTxtParserImpl'
            })
            return True

    async def log_info(self, url: str) -> Optional[dict]:
        """输出域名的 robots.txt 概况"""
        try:
            parsed = urlparse(url)
            if not parsed.scheme or not parsed.netloc:
                raise ValueError(f"Invalid URL: {url}")

            rules = await self._get_rules(self._robots_url(parsed.scheme, parsed.netloc))
        except Exception as e:
            error_logger.warning(f"获取 robots.txt 信息失败: {str(e)}")
            return None

        info = {
            'host': parsed.netloc,
            'loaded': not rules.is_permissive,
            'user_agents': len(rules.groups),
            'rules': {
                agent: {'allow': len(agent_rules.allow), 'disallow': len(agent_rules.disallow)}
                for agent, agent_rules in rules.groups.items()
            }
        }

        if rules.is_permissive:
            logger.info(f"robots.txt info for {parsed.netloc}: 无法加载或不存在，默认允许继续爬取")
        else:
            logger.info(
                f"robots.txt info for {parsed.netloc}: 加载成功，定义了 {len(rules.groups)} 个 user-agent 的规则"
            )
            for agent, counts in info['rules'].items():
                logger.debug(f"  {agent}: {counts['disallow']} disallow, {counts['allow']} allow rules")

        return info

# -------------------- 获取与缓存 --------------------

    @staticmethod
    def _robots_url(scheme: str, netloc: str) -> str:
        return f"{scheme}://{netloc}/robots.txt"

    async def _get_rules(self, robots_url: str) -> RobotsRuleSet:
        """获取或等待该域名的规则，保证每个域名只请求一次"""
        cached = self._cache.get(robots_url)
        if cached is not None:
            return cached

        task = self._pending.get(robots_url)
        if task is None:
            task = asyncio.ensure_future(self._fetch_robots(robots_url))
            self._pending[robots_url] = task
            task.add_done_callback(lambda _t: self._pending.pop(robots_url, None))

        return await asyncio.shield(task)

    async def _fetch_robots(self, robots_url: str) -> RobotsRuleSet:
        """下载并解析 robots.txt；任何失败都缓存为全部允许"""
        try:
            response = await self._http.get(robots_url)
            if not response.is_success:
                logger.info(f"robots.txt 不可用 ({response.error_message}): {robots_url}")
                rules = RobotsRuleSet.permissive()
            else:
                rules = self.parse_robots(response.content)
        except Exception as e:
            error_logger.warning(f"无法获取robots.txt from {robots_url}: {str(e)}", extra={
                'url': robots_url,
                'component': 'RobotsTxtParserImpl'
            })
            rules = RobotsRuleSet.permissive()

        self._cache[robots_url] = rules
        return rules

# -------------------- 解析与匹配 --------------------

    @staticmethod
    def parse_robots(text: str) -> RobotsRuleSet:
        """
        解析 robots.txt 文本
        规则只挂在最近一次声明的 User-agent 上
        """
        groups: Dict[str, AgentRules] = {}
        current_agent: Optional[str] = None

        for raw_line in text.split('\n'):
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue

            directive, _, value = line.partition(':')
            directive = directive.lower()
            value = value.strip()

            if directive == 'user-agent':
                current_agent = value.lower()
                groups.setdefault(current_agent, AgentRules())
            elif current_agent is not None and directive in ('allow', 'disallow'):
                getattr(groups[current_agent], directive).append(value)

        return RobotsRuleSet(groups=groups)

    @classmethod
    def check_rules(cls, path: str, rules: RobotsRuleSet, user_agent: str = "*") -> bool:
        """按“第一个命中的 Disallow + Allow 覆盖”判断路径是否允许"""
        agent_rules = rules.groups.get(user_agent.lower()) or rules.groups.get('*')
        if agent_rules is None:
            return True

        for disallow_pattern in agent_rules.disallow:
            if disallow_pattern == '':
                continue  # 空 Disallow = 不限制

            if cls.matches_pattern(path, disallow_pattern):
                return any(cls.matches_pattern(path, allow) for allow in agent_rules.allow)

        return True

    @staticmethod
    def matches_pattern(path: str, pattern: str) -> bool:
        """路径是否匹配 robots 模式（从开头匹配）"""
        if pattern == '/':
            return path == '/'

        anchored = pattern.endswith('$')
        body = pattern[:-1] if anchored else pattern
        regex = '.*'.join(re.escape(part) for part in body.split('*'))
        if anchored:
            regex += '$'

        return re.match(regex, path) is not None
