"""文件工具模块。

查找目录中的图像文件并读取源数据。
"""

from collections.abc import Iterator
from pathlib import Path

from PIL import Image

from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def find_image_files(
    directory: str | Path,
    recursive: bool = False,
    exclude_dirs: list[str] | None = None,
) -> Iterator[Path]:
    """按名称排序查找目录中的图像文件

    Args:
        directory: 搜索目录
        recursive: 是否递归搜索子目录
        exclude_dirs: 要排除的目录名列表

    Yields:
        Path: 图像文件路径
    """
    directory = Path(directory)
    exclude_dirs = exclude_dirs or []

    if not directory.is_dir():
        logger.warning(MessageFormatter.path_not_directory(directory))
        return

    pattern = "**/*" if recursive else "*"
    supported_extensions = set(Image.registered_extensions().keys())

    for file_path in sorted(directory.glob(pattern)):
        if (
            file_path.is_file()
            and file_path.suffix.lower() in supported_extensions
            and not any(part in exclude_dirs for part in file_path.parts)
        ):
            yield file_path


def read_source(file_path: str | Path) -> bytes:
    """读取源文件数据

    Raises:
        FileNotFoundError: 文件不存在
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(MessageFormatter.file_not_found(file_path))
    return file_path.read_bytes()
