"""处理编排模块。

包含请求构建、批量处理与并发执行。
"""

from .batch import BatchProcessor, BatchSource
from .concurrent_executor import ConcurrentExecutor
from .config import RequestBuilder


__all__ = [
    "BatchProcessor",
    "BatchSource",
    "ConcurrentExecutor",
    "RequestBuilder",
]
