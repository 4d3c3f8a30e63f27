import os
from dataclasses import dataclass
from typing import Mapping, Optional
from ..exceptions import ConfigError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    """解析整数环境变量，缺失或非法时使用默认值"""
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


@dataclass
class CrawlConfig:
    start_url: str = "https://www.profesia.sk/"
    concurrency: int = 2
    max_pages: int = 4
    max_requests_per_minute: int = 100  # 列表页请求速率上限
    max_request_retries: int = 3
    request_handler_timeout_secs: int = 60
    output_dir: str = "output"
    database_url: str = "sqlite:///jobs.db"
    log_dir: str = "logs"
    stop_file: Optional[str] = "stop.txt"
    user_agent: str = DEFAULT_USER_AGENT
    robots_user_agent: str = "*"
    verbose: bool = False

    def __post_init__(self):
        """
        数据清洗与验证
        """
        self.start_url = (self.start_url or "").strip()
        if not self.start_url:
            raise ConfigError("start_url 不能为空")

        for name in ("concurrency", "max_pages", "max_requests_per_minute", "request_handler_timeout_secs"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} 必须为正整数, 当前值: {getattr(self, name)}")

        if self.max_request_retries < 0:
            raise ConfigError(f"max_request_retries 不能为负数, 当前值: {self.max_request_retries}")

        if self.stop_file is not None and not self.stop_file.strip():
            self.stop_file = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CrawlConfig":
        """
        从环境变量构造配置（.env 由调用方通过 python-dotenv 加载）

        支持的变量:
            START_URL, CONCURRENCY, MAX_PAGES, OUTPUT_DIR, MAX_REQUESTS_PER_MINUTE,
            MAX_REQUEST_RETRIES, REQUEST_HANDLER_TIMEOUT_SECS, DATABASE_URL, LOG_DIR,
            STOP_FILE, USER_AGENT, VERBOSE
        """
        env = os.environ if env is None else env
        defaults = cls.__dataclass_fields__

        return cls(
            start_url=env.get("START_URL") or defaults["start_url"].default,
            concurrency=_int_env(env, "CONCURRENCY", defaults["concurrency"].default),
            max_pages=_int_env(env, "MAX_PAGES", defaults["max_pages"].default),
            max_requests_per_minute=_int_env(
                env, "MAX_REQUESTS_PER_MINUTE", defaults["max_requests_per_minute"].default
            ),
            max_request_retries=_int_env(env, "MAX_REQUEST_RETRIES", defaults["max_request_retries"].default),
            request_handler_timeout_secs=_int_env(
                env, "REQUEST_HANDLER_TIMEOUT_SECS", defaults["request_handler_timeout_secs"].default
            ),
            output_dir=env.get("OUTPUT_DIR") or defaults["output_dir"].default,
            database_url=env.get("DATABASE_URL") or defaults["database_url"].default,
            log_dir=env.get("LOG_DIR") or defaults["log_dir"].default,
            stop_file=env.get("STOP_FILE", defaults["stop_file"].default),
            user_agent=env.get("USER_AGENT") or DEFAULT_USER_AGENT,
            verbose=env.get("VERBOSE", "").strip().lower() == "true",
        )
