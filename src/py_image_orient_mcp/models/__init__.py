"""数据模型包。

定义方向修正处理的请求、结果与常量。
"""

from .constants import (
    ArchiveDefaults,
    ImageFormats,
    OrientationDefaults,
    QualityDefaults,
    get_extension,
    get_format_alias,
    get_mime_type,
    supports_quality,
)
from .processing_request import (
    Orientation,
    OutputFormat,
    ProcessingRequest,
    ResizeMode,
    ResizePolicy,
    resolve_output_format,
)
from .processing_result import BatchItemResult, BatchResult, ProcessedResult


__all__ = [
    "ArchiveDefaults",
    "BatchItemResult",
    "BatchResult",
    "ImageFormats",
    "Orientation",
    "OrientationDefaults",
    "OutputFormat",
    "ProcessedResult",
    "ProcessingRequest",
    "QualityDefaults",
    "ResizeMode",
    "ResizePolicy",
    "get_extension",
    "get_format_alias",
    "get_mime_type",
    "resolve_output_format",
    "supports_quality",
]
