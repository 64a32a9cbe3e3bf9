"""打包工具模块。

单个结果直接交付，多个结果打包为内存中的 ZIP 归档。
"""

import zipfile
from collections.abc import Sequence
from io import BytesIO

from ..models.constants import ArchiveDefaults
from .logging_helpers import get_logger


logger = get_logger()


def build_zip_archive(entries: Sequence[tuple[str, bytes]]) -> bytes:
    """将 (文件名, 数据) 列表打包为 ZIP

    图片数据已是压缩格式，使用 ZIP_STORED 避免重复压缩。
    """
    with BytesIO() as buffer:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
            for name, data in entries:
                archive.writestr(name, data)
        return buffer.getvalue()


def package_outputs(entries: Sequence[tuple[str, bytes]]) -> tuple[str, bytes] | None:
    """打包输出

    Returns:
        tuple | None: 单个条目时原样返回，多个时返回 (归档名, ZIP 数据)，无条目时返回 None
    """
    if not entries:
        return None
    if len(entries) == 1:
        return entries[0]

    logger.debug(f"打包 {len(entries)} 个文件为 {ArchiveDefaults.ARCHIVE_NAME}")
    return ArchiveDefaults.ARCHIVE_NAME, build_zip_archive(entries)
