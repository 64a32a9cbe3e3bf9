"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .archive_helpers import build_zip_archive, package_outputs
from .file_helpers import find_image_files, read_source
from .logging_helpers import configure_logging, get_logger
from .message_formatter import MessageFormatter, format_validation_error
from .naming_helpers import FileNamingStrategy, PathResolver, deduplicate_names


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "PathResolver",
    "build_zip_archive",
    "configure_logging",
    "deduplicate_names",
    "find_image_files",
    "format_validation_error",
    "get_logger",
    "package_outputs",
    "read_source",
]
