"""
日志配置

基于 structlog 的结构化日志：
- 开发环境：彩色控制台输出
- 生产环境（LOG_JSON=true）：JSON 行输出
"""

import logging
import sys
from typing import Optional

import structlog

from kriya.core.config import settings


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """初始化 structlog 与标准库 logging"""
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    use_json = settings.LOG_JSON if json_output is None else json_output

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取 logger"""
    return structlog.get_logger(name)
