"""处理请求模型。

定义单张图片方向修正、尺寸调整与编码的请求参数。
"""

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import OrientationDefaults


class Orientation(IntEnum):
    """EXIF 方向码（1-8）

    镜像方向（2、4、5、7）只做识别，不做翻转，旋转角度按 0 处理。
    """

    TOP_LEFT = 1
    TOP_RIGHT = 2  # 水平镜像
    BOTTOM_RIGHT = 3  # 旋转 180°
    BOTTOM_LEFT = 4  # 垂直镜像
    LEFT_TOP = 5  # 镜像 + 旋转
    RIGHT_TOP = 6  # 顺时针 90°
    RIGHT_BOTTOM = 7  # 镜像 + 旋转
    LEFT_BOTTOM = 8  # 顺时针 270°

    @property
    def rotation(self) -> int:
        """修正所需的顺时针旋转角度"""
        match self:
            case Orientation.BOTTOM_RIGHT:
                return 180
            case Orientation.RIGHT_TOP:
                return 90
            case Orientation.LEFT_BOTTOM:
                return 270
            case _:
                return 0

    @property
    def is_mirrored(self) -> bool:
        return self in (
            Orientation.TOP_RIGHT,
            Orientation.BOTTOM_LEFT,
            Orientation.LEFT_TOP,
            Orientation.RIGHT_BOTTOM,
        )

    @property
    def swaps_dimensions(self) -> bool:
        """方向码 5-8 的像素数据宽高与显示宽高相反"""
        return self >= Orientation.LEFT_TOP

    @classmethod
    def from_value(cls, value: object) -> "Orientation":
        """宽松解析方向值，无效值回落到 1"""
        try:
            return cls(int(value))  # type: ignore[call-overload]
        except (TypeError, ValueError):
            return cls(OrientationDefaults.DEFAULT_CODE)


class ResizeMode(str, Enum):
    """尺寸调整模式"""

    NONE = "none"
    FIT_WIDTH = "width"  # 固定宽度，保持宽高比
    FIT_HEIGHT = "height"  # 固定高度，保持宽高比
    FIT_BOX = "both-fit"  # 等比缩放至框内
    FORCE_BOX = "both-force"  # 强制拉伸到框尺寸


class OutputFormat(str, Enum):
    """输出格式"""

    PNG = "png"
    JPEG = "jpeg"
    AUTO = "auto"


class ResizePolicy(BaseModel):
    """尺寸调整策略，每个请求只有一种模式生效"""

    mode: ResizeMode = Field(ResizeMode.NONE, description="调整模式")
    target_width: int | None = Field(None, description="目标宽度")
    target_height: int | None = Field(None, description="目标高度")

    @property
    def required_targets(self) -> tuple[str, ...]:
        """当前模式必须提供的目标字段"""
        match self.mode:
            case ResizeMode.FIT_WIDTH:
                return ("target_width",)
            case ResizeMode.FIT_HEIGHT:
                return ("target_height",)
            case ResizeMode.FIT_BOX | ResizeMode.FORCE_BOX:
                return ("target_width", "target_height")
            case _:
                return ()

    def check_targets(self) -> None:
        """校验当前模式所需的目标尺寸

        Raises:
            InvalidResizeTargetError: 目标缺失或非正整数
        """
        from ..exceptions import InvalidResizeTargetError

        for field_name in self.required_targets:
            value = getattr(self, field_name)
            if value is None:
                raise InvalidResizeTargetError(
                    f"调整模式 {self.mode.value} 需要 {field_name}"
                )
            if isinstance(value, bool) or value <= 0:
                raise InvalidResizeTargetError(
                    f"{field_name} 必须是正整数，当前值: {value}"
                )

    @classmethod
    def none(cls) -> "ResizePolicy":
        return cls(mode=ResizeMode.NONE)

    @classmethod
    def fit_width(cls, width: int) -> "ResizePolicy":
        return cls(mode=ResizeMode.FIT_WIDTH, target_width=width)

    @classmethod
    def fit_height(cls, height: int) -> "ResizePolicy":
        return cls(mode=ResizeMode.FIT_HEIGHT, target_height=height)

    @classmethod
    def fit_box(cls, width: int, height: int) -> "ResizePolicy":
        return cls(mode=ResizeMode.FIT_BOX, target_width=width, target_height=height)

    @classmethod
    def force_box(cls, width: int, height: int) -> "ResizePolicy":
        return cls(
            mode=ResizeMode.FORCE_BOX, target_width=width, target_height=height
        )


class ProcessingRequest(BaseModel):
    """单张图片的处理请求，处理期间不可变"""

    model_config = ConfigDict(frozen=True)

    source_name: str | None = Field(None, description="源文件名，仅用于日志和命名")
    orientation: Orientation = Field(Orientation.TOP_LEFT, description="EXIF 方向码")
    manual_rotation: int = Field(0, description="手动顺时针旋转角度")
    resize_policy: ResizePolicy = Field(
        default_factory=ResizePolicy.none, description="尺寸调整策略"
    )
    size_ceiling_bytes: int | None = Field(None, gt=0, description="输出大小上限")
    output_format: OutputFormat = Field(OutputFormat.AUTO, description="输出格式")

    @field_validator("manual_rotation")
    @classmethod
    def validate_manual_rotation(cls, v: int) -> int:
        if v % 90 != 0:
            raise ValueError(f"手动旋转必须是 90 的倍数，当前值: {v}")
        return v % 360

    @property
    def has_size_ceiling(self) -> bool:
        return self.size_ceiling_bytes is not None


def resolve_output_format(
    output_format: OutputFormat, source_format: str | None, has_ceiling: bool
) -> str:
    """解析实际输出格式（Pillow 格式名）

    Auto 模式下：设置了大小上限时强制 JPEG，否则 PNG 保持 PNG，其余转为 JPEG。
    """
    match output_format:
        case OutputFormat.PNG:
            return "PNG"
        case OutputFormat.JPEG:
            return "JPEG"
        case _:
            if has_ceiling:
                return "JPEG"
            return "PNG" if (source_format or "").upper() == "PNG" else "JPEG"
