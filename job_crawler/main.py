import asyncio
import logging
import sys

from dotenv import load_dotenv

from job_crawler import create_crawler_service
from job_crawler.crawl.domain.domain_service.stats_aggregator import render_summary
from job_crawler.crawl.domain.exceptions import CrawlError
from job_crawler.crawl.domain.value_objects.crawl_config import CrawlConfig
from job_crawler.shared.event_bus import EventBus
from job_crawler.shared.event_handlers.logging_handler import LoggingEventHandler
from job_crawler.shared.logging_config import setup_logging


def main() -> int:
    """命令行入口，返回进程退出码"""
    load_dotenv()

    try:
        config = CrawlConfig.from_env()
    except CrawlError as e:
        print(f"配置错误: {e.message}", file=sys.stderr)
        return 1

    setup_logging(log_dir=config.log_dir, verbose=config.verbose)
    logger = logging.getLogger('domain.run_lifecycle')

    # 创建事件总线并注册业务日志EventHandler
    event_bus = EventBus()
    logging_handler = LoggingEventHandler()
    event_bus.subscribe_to_all(logging_handler.handle)

    try:
        service = create_crawler_service(config, event_bus=event_bus)
        summary = asyncio.run(service.run())
    except CrawlError as e:
        logger.error(f"爬取终止: {e.message}")
        return 1
    except KeyboardInterrupt:
        logger.warning("收到中断信号，爬取终止")
        return 1
    except Exception as e:
        logger.error(f"爬取失败: {e}", exc_info=True)
        return 1

    print(render_summary(summary))
    return 0


if __name__ == '__main__':
    sys.exit(main())
