"""图片方向修正库。

按 EXIF 方向与手动旋转修正图片，可选调整尺寸，并在字节上限内重新编码。
"""

__version__ = "0.1.0"
__description__ = "基于 Pillow 的图片方向修正与大小受限编码"

from .core.pipeline import process
from .fixer import ImageOrientationFixer
from .models import (
    BatchItemResult,
    BatchResult,
    Orientation,
    OutputFormat,
    ProcessedResult,
    ProcessingRequest,
    ResizeMode,
    ResizePolicy,
)


__all__ = [
    "BatchItemResult",
    "BatchResult",
    "ImageOrientationFixer",
    "Orientation",
    "OutputFormat",
    "ProcessedResult",
    "ProcessingRequest",
    "ResizeMode",
    "ResizePolicy",
    "get_version",
    "process",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
