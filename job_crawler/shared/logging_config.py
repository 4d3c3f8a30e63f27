# job_crawler/shared/logging_config.py
"""
日志配置模块
统一管理4类日志：
1. run_lifecycle/ - 爬取运行生命周期日志（事件驱动）
2. crawl_process/ - 爬取过程日志（事件驱动：职位保存/重复/失败、分页入队）
3. error/ - 错误日志（Infrastructure层直接调用）
4. performance/ - 性能监控日志（Infrastructure层直接调用）

文件命名格式：{日期}_{日志类型}.log
例如：2025-11-30_run_lifecycle.log
"""

import logging.config
import logging.handlers
from pathlib import Path
from datetime import datetime
from typing import Optional, Union


LOGGER_FILES = {
    'domain.run_lifecycle': 'run_lifecycle',
    'domain.crawl_process': 'crawl_process',
    'infrastructure.error': 'error',
    'infrastructure.perf': 'performance',
}


def setup_logging(log_dir: Optional[Union[str, Path]] = None, verbose: bool = False) -> None:
    """
    初始化并配置所有logger
    应在爬取运行开始前调用：setup_logging(config.log_dir, config.verbose)

    参数:
        log_dir: 日志根目录，默认当前目录下的 logs/
        verbose: True 时控制台输出 DEBUG 级别（对应 VERBOSE=true）
    """
    log_root_dir = Path(log_dir) if log_dir else Path.cwd() / 'logs'

    # 确保所有子目录存在
    for sub_dir in LOGGER_FILES.values():
        (log_root_dir / sub_dir).mkdir(parents=True, exist_ok=True)

    # 当前日期（用于初始文件名）
    today = datetime.now().strftime('%Y-%m-%d')
    console_level = 'DEBUG' if verbose else 'INFO'

    def _file_handler(log_type: str, backup_count: int) -> dict:
        return {
            'class': 'logging.handlers.TimedRotatingFileHandler',
            'filename': str(log_root_dir / log_type / f'{today}_{log_type}.log'),
            'when': 'MIDNIGHT',         # 每天午夜切换
            'interval': 1,              # 间隔1天
            'backupCount': backup_count,
            'encoding': 'utf-8',
            'formatter': 'json'
        }

    LOGGING_CONFIG = {
        'version': 1,
        'disable_existing_loggers': False,

        # ==================== 格式化器 ====================
        'formatters': {
            'json': {
                '()': 'pythonjsonlogger.jsonlogger.JsonFormatter',
                'format': '%(asctime)s %(name)s %(levelname)s %(message)s',
                'timestamp': True
            },
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },

        # ==================== 处理器 ====================
        'handlers': {
            # ---------- 业务日志处理器 ----------
            'run_lifecycle_file': _file_handler('run_lifecycle', 30),
            'crawl_process_file': _file_handler('crawl_process', 30),

            # ---------- 技术日志处理器 ----------
            'error_file': _file_handler('error', 30),
            'performance_file': _file_handler('performance', 7),   # 性能日志保留7天

            # ---------- 控制台输出 ----------
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'level': console_level
            }
        },

        # ==================== Logger配置 ====================
        'loggers': {
            # ---------- 业务日志Logger（由EventHandler使用） ----------
            'domain.run_lifecycle': {
                'handlers': ['run_lifecycle_file', 'console'],
                'level': 'INFO',
                'propagate': False
            },

            'domain.crawl_process': {
                'handlers': ['crawl_process_file', 'console'],
                'level': 'DEBUG',
                'propagate': False
            },

            # ---------- 技术日志Logger（Infrastructure层直接使用） ----------
            'infrastructure.error': {
                'handlers': ['error_file', 'console'],
                'level': 'WARNING',
                'propagate': False
            },

            'infrastructure.perf': {
                'handlers': ['performance_file'],
                'level': 'INFO',
                'propagate': False
            }
        },

        # ==================== 根Logger（兜底） ====================
        'root': {
            'level': 'INFO',
            'handlers': ['console']
        }
    }

    # 应用配置
    logging.config.dictConfig(LOGGING_CONFIG)

    # 自定义文件命名（实现日期前缀命名）
    _setup_custom_namer()

    logger = get_run_lifecycle_logger()
    logger.info("日志系统初始化完成", extra={
        'log_root_dir': str(log_root_dir),
        'verbose': verbose
    })


def custom_namer(default_name: str) -> str:
    """
    将TimedRotatingFileHandler的默认命名转换为日期前缀格式

    default_name示例：
    /path/to/logs/crawl_process/2025-11-30_crawl_process.log.2025-11-29

    转换为：
    /path/to/logs/crawl_process/2025-11-29_crawl_process.log
    """
    path = Path(default_name)
    dir_name = path.parent
    base_name = path.name

    # 格式：2025-11-30_crawl_process.log.2025-11-29
    parts = base_name.split('.')
    if len(parts) == 3 and parts[1] == 'log' and '_' in parts[0]:
        log_type = parts[0].split('_', 1)[1]
        date_suffix = parts[2]
        return str(dir_name / f"{date_suffix}_{log_type}.log")

    return default_name


def _setup_custom_namer():
    """为所有TimedRotatingFileHandler设置自定义命名规则"""
    for logger_name in LOGGER_FILES:
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers:
            if isinstance(handler, logging.handlers.TimedRotatingFileHandler):
                handler.namer = custom_namer


# ==================== 便捷获取Logger的函数 ====================

def get_run_lifecycle_logger() -> logging.Logger:
    """获取运行生命周期日志Logger（EventHandler使用）"""
    return logging.getLogger('domain.run_lifecycle')


def get_crawl_process_logger() -> logging.Logger:
    """获取爬取过程日志Logger（EventHandler使用）"""
    return logging.getLogger('domain.crawl_process')


def get_error_logger() -> logging.Logger:
    """获取错误日志Logger（Infrastructure层使用）"""
    return logging.getLogger('infrastructure.error')


def get_performance_logger() -> logging.Logger:
    """获取性能监控日志Logger（Infrastructure层使用）"""
    return logging.getLogger('infrastructure.perf')
