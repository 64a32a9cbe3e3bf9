"""消息格式化工具模块。

统一的错误消息和处理摘要格式。
"""

from pathlib import Path
from typing import Any

from humanize import naturalsize


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def path_not_directory(path: str | Path) -> str:
        """路径不是目录错误消息"""
        return f"路径不是目录: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def validation_error(field: str, value: Any, reason: str | None = None) -> str:
        """参数验证错误消息"""
        msg = f"参数验证失败 - {field}: {value}"
        if reason:
            msg += f" ({reason})"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"

    @staticmethod
    def size_against_ceiling(label: str, size: int, ceiling: int) -> str:
        """编码大小与目标上限的对比消息"""
        return (
            f"{label}: {naturalsize(size, binary=True)} "
            f"(目标: {naturalsize(ceiling, binary=True)})"
        )


def format_validation_error(field: str, value: Any, expected: str | None = None) -> str:
    """格式化验证错误消息"""
    reason = f"期望: {expected}" if expected else None
    return MessageFormatter.validation_error(field, value, reason)
