"""图像处理相关常量定义。

输出格式、MIME 类型与质量搜索的固定参数。
"""

from typing import Final


class ImageFormats:
    """输出格式与 Pillow 格式名的映射"""

    # 用户友好的别名
    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
    }

    MIME_TYPES: Final[dict[str, str]] = {
        "JPEG": "image/jpeg",
        "PNG": "image/png",
    }

    PREFERRED_EXTENSIONS: Final[dict[str, str]] = {
        "JPEG": ".jpg",
        "PNG": ".png",
    }

    # 仅 JPEG 具备连续的质量参数
    QUALITY_FORMATS: Final[set[str]] = {"JPEG"}


class QualityDefaults:
    """Pillow 质量映射边界，连续质量的搜索区间见 config.EncodingDefaults"""

    # Pillow 的 JPEG 质量为整数 1-100
    PILLOW_MIN: Final[int] = 1
    PILLOW_MAX: Final[int] = 100


class OrientationDefaults:
    """方向读取相关默认值"""

    # EXIF Orientation 标签
    EXIF_TAG: Final[int] = 0x0112

    DEFAULT_CODE: Final[int] = 1


class ArchiveDefaults:
    """输出命名与打包默认值"""

    OUTPUT_SUFFIX: Final[str] = "_fixed"
    ARCHIVE_NAME: Final[str] = "images_fixed.zip"

    # 批量处理时的默认排除目录
    EXCLUDE_DIRS: Final[list[str]] = [
        "__pycache__",
        ".git",
        "node_modules",
    ]


def get_format_alias(format_str: str) -> str:
    """获取格式的标准名称"""
    format_upper = format_str.upper()
    return ImageFormats.ALIASES.get(format_upper, format_upper)


def get_mime_type(format_str: str) -> str:
    """获取格式的MIME类型"""
    standard_format = get_format_alias(format_str)
    return ImageFormats.MIME_TYPES.get(
        standard_format, f"image/{standard_format.lower()}"
    )


def get_extension(format_str: str) -> str:
    """获取格式的首选扩展名"""
    standard_format = get_format_alias(format_str)
    return ImageFormats.PREFERRED_EXTENSIONS.get(
        standard_format, f".{standard_format.lower()}"
    )


def supports_quality(format_str: str) -> bool:
    """检查格式是否支持连续质量参数"""
    return get_format_alias(format_str) in ImageFormats.QUALITY_FORMATS
