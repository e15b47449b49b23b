"""
日志模块

使用 loguru 输出下载与校验过程。日志写到 stderr，stdout 只留给命令行的结果输出
（版本列表、已保存的文件名），便于在脚本中直接使用。
"""

import os
import sys
from typing import Optional

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


def _stderr_sink(message) -> None:
    # 每次写入时再取 sys.stderr，重定向后依然有效
    sys.stderr.write(message)


def resolve_level(debug: bool = False, quiet: bool = False) -> str:
    """
    决定日志级别

    优先级: --debug > --quiet > ALPAC_LOG_LEVEL > ALPAC_DEBUG=1 > INFO
    """
    if debug:
        return "DEBUG"
    if quiet:
        return "WARNING"
    level = os.environ.get("ALPAC_LOG_LEVEL")
    if level:
        return level.upper()
    return "DEBUG" if os.environ.get("ALPAC_DEBUG", "0") == "1" else "INFO"


def setup_logger(
    debug: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
) -> str:
    """
    设置日志记录器

    Args:
        debug: 输出调试信息
        quiet: 只输出警告和错误
        log_file: 额外写入的日志文件，按 DEBUG 级别完整记录每次校验结果

    Returns:
        控制台日志级别
    """
    level = resolve_level(debug, quiet)
    verbose = level == "DEBUG"

    logger.remove()
    logger.add(
        sink=_stderr_sink,
        format=_FORMAT,
        level=level,
        colorize=sys.stderr.isatty(),
        backtrace=verbose,
        diagnose=verbose,
    )
    if log_file:
        logger.add(
            log_file,
            format=_FORMAT,
            level="DEBUG",
            encoding="utf-8",
            rotation="10 MB",
        )

    if verbose:
        logger.debug("DEBUG 模式已启用")
    return level


__all__ = ["logger", "setup_logger", "resolve_level"]
