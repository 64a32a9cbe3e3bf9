"""请求构建器模块。

将界面层的扁平参数转换为经过校验的 ProcessingRequest。
"""

import logging
import math

from pydantic import ValidationError as PydanticValidationError

from ..core.orientation import OrientationReader
from ..exceptions import UnsupportedFormatError
from ..exceptions import ValidationError as CustomValidationError
from ..models.constants import get_format_alias
from ..models.processing_request import (
    Orientation,
    OutputFormat,
    ProcessingRequest,
    ResizeMode,
    ResizePolicy,
)
from ..utils.message_formatter import format_validation_error


logger = logging.getLogger(__name__)


class RequestBuilder:
    """处理请求构建器

    负责自动修正开关、KB 上限换算与参数校验；尺寸目标在这里即被检查，
    保证无效请求在任何解码和渲染之前失败。
    """

    def __init__(self, reader: OrientationReader | None = None):
        self.reader = reader or OrientationReader()

    def build(
        self,
        source_name: str | None = None,
        data: bytes | None = None,
        auto_fix: bool = True,
        orientation: int | None = None,
        rotation: int = 0,
        resize_mode: str | ResizeMode = ResizeMode.NONE,
        target_width: int | None = None,
        target_height: int | None = None,
        max_size_kb: float | None = None,
        max_size_bytes: int | None = None,
        format: str | OutputFormat = OutputFormat.AUTO,
    ) -> ProcessingRequest:
        """构建处理请求

        Args:
            source_name: 源文件名
            data: 源数据，自动修正且未给出 orientation 时用于读取方向
            auto_fix: 是否按 EXIF 方向自动修正，关闭时方向固定为 1
            orientation: 已读取的方向码
            rotation: 手动顺时针旋转角度（90 的倍数）
            resize_mode: 尺寸调整模式
            target_width: 目标宽度
            target_height: 目标高度
            max_size_kb: 输出大小上限（KB），非正数表示不限
            max_size_bytes: 输出大小上限（字节），优先于 max_size_kb
            format: 输出格式 png/jpeg/auto

        Returns:
            ProcessingRequest: 校验后的请求

        Raises:
            CustomValidationError: 参数验证失败
        """
        try:
            policy = ResizePolicy(
                mode=self._parse_resize_mode(resize_mode),
                target_width=target_width,
                target_height=target_height,
            )
            policy.check_targets()

            request = ProcessingRequest(
                source_name=source_name,
                orientation=self._resolve_orientation(
                    auto_fix, orientation, data, source_name
                ),
                manual_rotation=rotation,
                resize_policy=policy,
                size_ceiling_bytes=self._resolve_ceiling(max_size_kb, max_size_bytes),
                output_format=self._parse_format(format),
            )

        except PydanticValidationError as e:
            raise CustomValidationError(
                self._format_validation_error(e), source_name
            ) from e

        logger.debug(
            f"构建请求: 方向={int(request.orientation)} 旋转={request.manual_rotation}° "
            f"调整={request.resize_policy.mode.value} 上限={request.size_ceiling_bytes}"
        )
        return request

    def _resolve_orientation(
        self,
        auto_fix: bool,
        orientation: int | None,
        data: bytes | None,
        source_name: str | None,
    ) -> Orientation:
        if not auto_fix:
            return Orientation.TOP_LEFT
        if orientation is not None:
            try:
                return Orientation(orientation)
            except ValueError as e:
                raise CustomValidationError(
                    format_validation_error("orientation", orientation, "1-8"),
                    source_name,
                ) from e
        if data is not None:
            return self.reader.read(data, source_name)
        return Orientation.TOP_LEFT

    @staticmethod
    def _resolve_ceiling(
        max_size_kb: float | None, max_size_bytes: int | None
    ) -> int | None:
        """KB 按 floor(kb * 1024) 换算，非正数视为不限"""
        if max_size_bytes is not None:
            return max_size_bytes if max_size_bytes > 0 else None
        if max_size_kb is not None and max_size_kb > 0:
            return max(1, math.floor(max_size_kb * 1024))
        return None

    @staticmethod
    def _parse_resize_mode(value: str | ResizeMode) -> ResizeMode:
        if isinstance(value, ResizeMode):
            return value
        try:
            return ResizeMode(str(value).strip().lower())
        except ValueError as e:
            valid = ", ".join(m.value for m in ResizeMode)
            raise CustomValidationError(
                format_validation_error("resize_mode", value, valid)
            ) from e

    @staticmethod
    def _parse_format(value: str | OutputFormat) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        normalized = get_format_alias(str(value).strip()).lower()
        try:
            return OutputFormat(normalized)
        except ValueError as e:
            valid = ", ".join(f.value for f in OutputFormat)
            raise UnsupportedFormatError(
                format_validation_error("format", value, valid)
            ) from e

    def _format_validation_error(self, error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)
