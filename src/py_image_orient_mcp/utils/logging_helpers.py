"""日志工具模块。

所有模块通过 get_logger() 获取以模块名命名的日志记录器。
"""

import inspect
import logging


def get_logger(name: str | None = None) -> logging.Logger:
    """获取以调用模块命名的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 日志记录器
    """
    if name is None:
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging(level: str, fmt: str) -> None:
    """按应用配置初始化根日志记录器（仅用于服务入口）"""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=fmt)
