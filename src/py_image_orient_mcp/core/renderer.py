"""渲染模块。

将源像素按净旋转角度与独立的 X/Y 缩放绘制到输出尺寸的新画布上。
"""

from dataclasses import dataclass

from PIL import Image

from ..config import get_config
from ..utils.logging_helpers import get_logger
from .geometry import is_quarter_turn


logger = get_logger()

# Pillow 的 ROTATE_* 为逆时针方向
_CLOCKWISE_TRANSPOSE: dict[int, Image.Transpose] = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}

# 可直接缩放的色彩模式
_RENDERABLE_MODES = {"L", "LA", "RGB", "RGBA"}


@dataclass(frozen=True)
class CanvasTransform:
    """以画布中心为原点的变换：先按源坐标轴缩放，再顺时针旋转

    旋转 90°/270° 时源图宽度轴落在画布高度轴上，因此
    scale_x = 画布高 / 源宽，scale_y = 画布宽 / 源高。
    """

    net_rotation: int
    scale_x: float
    scale_y: float
    source_size: tuple[int, int]
    target_size: tuple[int, int]

    @classmethod
    def build(
        cls,
        source_size: tuple[int, int],
        target_size: tuple[int, int],
        net_rotation: int,
    ) -> "CanvasTransform":
        source_width, source_height = source_size
        final_width, final_height = target_size
        rotation = net_rotation % 360

        if is_quarter_turn(rotation):
            scale_x = final_height / source_width
            scale_y = final_width / source_height
        else:
            scale_x = final_width / source_width
            scale_y = final_height / source_height

        return cls(rotation, scale_x, scale_y, source_size, target_size)

    @property
    def scaled_source_size(self) -> tuple[int, int]:
        """缩放后、旋转前的源图尺寸"""
        final_width, final_height = self.target_size
        if is_quarter_turn(self.net_rotation):
            return (final_height, final_width)
        return (final_width, final_height)

    @property
    def is_uniform(self) -> bool:
        return abs(self.scale_x - self.scale_y) < 1e-9


class Renderer:
    """纯函数式渲染器

    每次调用都生成新的目标图像，不与调用方或其他调用共享画布。
    """

    def __init__(self, resample: Image.Resampling | None = None):
        if resample is None:
            resample = Image.Resampling[get_config().processing.RESAMPLE]
        self.resample = resample

    def render(
        self,
        source: Image.Image,
        target_size: tuple[int, int],
        net_rotation: int = 0,
    ) -> Image.Image:
        """渲染旋转并缩放后的图像

        Args:
            source: 源图像（未做任何方向修正）
            target_size: 输出尺寸 (宽, 高)
            net_rotation: 净顺时针旋转角度（0/90/180/270）

        Returns:
            Image.Image: 尺寸恰为 target_size 的新图像
        """
        transform = CanvasTransform.build(source.size, target_size, net_rotation)
        if transform.net_rotation not in (0, *_CLOCKWISE_TRANSPOSE):
            raise ValueError(f"不支持的旋转角度: {net_rotation}")

        img = self._normalize_mode(source)

        if not transform.is_uniform:
            logger.debug(
                f"非等比缩放: scale_x={transform.scale_x:.4f}, "
                f"scale_y={transform.scale_y:.4f}"
            )

        # 在源坐标系中完成缩放，再整体旋转到画布方向
        scaled_size = transform.scaled_source_size
        if img.size != scaled_size:
            img = img.resize(scaled_size, self.resample)

        if transform.net_rotation:
            img = img.transpose(_CLOCKWISE_TRANSPOSE[transform.net_rotation])

        # 保证返回的画布与源图互不共享
        if img is source:
            img = img.copy()

        return img

    def _normalize_mode(self, img: Image.Image) -> Image.Image:
        """转换为可进行高质量缩放的色彩模式"""
        if img.mode in _RENDERABLE_MODES:
            return img

        if img.mode == "P":
            return img.convert("RGBA" if "transparency" in img.info else "RGB")
        if img.mode == "PA":
            return img.convert("RGBA")
        if img.mode == "1":
            return img.convert("L")

        # CMYK、YCbCr、I;16 等
        return img.convert("RGB")
