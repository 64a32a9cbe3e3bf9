"""图像处理异常模块。

定义统一的异常类型、异常转换装饰器以及批量条目的错误结果构建。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.processing_result import BatchItemResult
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


class ImageProcessingError(Exception):
    """图像处理错误基类"""

    def __init__(self, message: str, input_path: Path | str | None = None):
        super().__init__(message)
        self.message = message
        self.input_path = input_path


class ValidationError(ImageProcessingError):
    """参数验证错误"""

    pass


class InvalidResizeTargetError(ValidationError):
    """尺寸调整模式已启用但目标尺寸缺失或非正数"""

    pass


class UnsupportedFormatError(ValidationError):
    """不支持的输出格式"""

    pass


class MetadataReadError(ImageProcessingError):
    """方向元数据解析失败（内部使用，总是回落到方向 1）"""

    pass


class MetadataReadTimeoutError(MetadataReadError):
    """方向元数据解析超时（内部使用，总是回落到方向 1）"""

    pass


class DecodeError(ImageProcessingError):
    """源数据无法解码为像素"""

    pass


class EncodeError(ImageProcessingError):
    """编码器无法在给定质量下输出数据"""

    def __init__(
        self,
        message: str,
        input_path: Path | str | None = None,
        quality: float | None = None,
    ):
        super().__init__(message, input_path)
        self.quality = quality


def handle_image_errors(
    operation_name: str = "图像处理",
    error_class: type[ImageProcessingError] = DecodeError,
):
    """将 Pillow 抛出的异常统一转换为指定的处理异常

    Args:
        operation_name: 操作名称，用于日志记录
        error_class: 转换后的异常类型
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ImageProcessingError:
                raise
            except UnidentifiedImageError as e:
                logger.error(f"{operation_name} - 无法识别图像格式: {e}")
                raise error_class(f"无法识别图像格式: {e}") from e
            except DecompressionBombError as e:
                logger.error(f"{operation_name} - 图像过大: {e}")
                raise error_class(f"图像尺寸过大，可能存在安全风险: {e}") from e
            except (OSError, ValueError, SyntaxError) as e:
                logger.error(f"{operation_name} - 数据损坏或不完整: {e}")
                raise error_class(f"{operation_name}失败: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """批量条目错误处理器

    将单张图片的异常转换为失败的条目结果，不影响其他条目。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path | str, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录"""
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def _create_error_item(
        index: int, source_name: str, error_msg: str
    ) -> BatchItemResult:
        return BatchItemResult(
            index=index,
            source_name=source_name,
            output_name=None,
            success=False,
            error=error_msg,
            result=None,
        )

    @staticmethod
    def handle_with_context(
        error: Exception,
        index: int,
        source_name: str,
        operation: str = "图像处理",
        log_level: str = "error",
    ) -> BatchItemResult:
        """记录日志并创建失败的条目结果"""
        ErrorHandler._log_error(operation, source_name, error, log_level)
        return ErrorHandler._create_error_item(
            index, source_name, f"{operation}: {error}"
        )

    @staticmethod
    def handle_item_error(
        error: Exception, index: int, source_name: str, operation: str = "方向修正"
    ) -> BatchItemResult:
        """按异常类型分发的条目错误处理"""
        match error:
            case ValidationError() as ve:
                return ErrorHandler.handle_with_context(
                    ve, index, source_name, f"{operation} - 参数验证", "warning"
                )
            case DecodeError() as de:
                return ErrorHandler.handle_with_context(
                    de, index, source_name, f"{operation} - 解码", "warning"
                )
            case EncodeError() as ee:
                return ErrorHandler.handle_with_context(
                    ee, index, source_name, f"{operation} - 编码", "error"
                )
            case FileNotFoundError() | PermissionError() as fe:
                return ErrorHandler.handle_with_context(
                    fe, index, source_name, f"{operation} - 文件读取", "warning"
                )
            case _:
                return ErrorHandler.handle_with_context(
                    error, index, source_name, operation, "error"
                )
