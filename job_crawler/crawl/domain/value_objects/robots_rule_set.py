from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class AgentRules:
    """单个 user-agent 下的规则，保持声明顺序"""
    allow: List[str] = field(default_factory=list)
    disallow: List[str] = field(default_factory=list)


@dataclass
class RobotsRuleSet:
    """
    一个域名的 robots.txt 解析结果
    groups: 小写 user-agent -> AgentRules
    is_permissive: True 表示 robots.txt 不可用（获取失败/非2xx），全部允许
    """
    groups: Dict[str, AgentRules] = field(default_factory=dict)
    is_permissive: bool = False

    @classmethod
    def permissive(cls) -> "RobotsRuleSet":
        return cls(groups={}, is_permissive=True)
