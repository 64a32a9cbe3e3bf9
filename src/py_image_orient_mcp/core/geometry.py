"""几何计算模块。

根据源尺寸、方向码、手动旋转与尺寸调整策略，计算输出尺寸和净旋转角度。
"""

import math
from dataclasses import dataclass

from ..models.processing_request import Orientation, ResizeMode, ResizePolicy


VALID_ROTATIONS = (0, 90, 180, 270)


def _round_half_up(value: float) -> int:
    """四舍五入取整（.5 向上），最小为 1"""
    return max(1, math.floor(value + 0.5))


def rotate_clockwise(degrees: int) -> int:
    """顺时针步进 90°"""
    return (degrees + 90) % 360


def rotate_counterclockwise(degrees: int) -> int:
    """逆时针步进 90°"""
    return (degrees - 90 + 360) % 360


def compose_rotation(orientation: Orientation | int, manual_rotation: int) -> int:
    """合成方向码旋转与手动旋转，返回 [0, 360) 内的顺时针角度"""
    return (Orientation(orientation).rotation + manual_rotation) % 360


def is_quarter_turn(degrees: int) -> bool:
    """90° 或 270° 旋转会交换宽高"""
    return degrees in (90, 270)


@dataclass(frozen=True)
class Geometry:
    """几何计算结果"""

    final_width: int
    final_height: int
    net_rotation: int
    upright_width: int
    upright_height: int

    @property
    def size(self) -> tuple[int, int]:
        return (self.final_width, self.final_height)

    @property
    def swaps_dimensions(self) -> bool:
        return is_quarter_turn(self.net_rotation)


class GeometryResolver:
    """输出尺寸解析器

    调用前需保证尺寸调整目标已通过 ResizePolicy.check_targets() 校验。
    """

    def resolve(
        self,
        source_width: int,
        source_height: int,
        orientation: Orientation | int = Orientation.TOP_LEFT,
        manual_rotation: int = 0,
        resize_policy: ResizePolicy | None = None,
    ) -> Geometry:
        """计算输出尺寸与净旋转

        Args:
            source_width: 源像素宽度（修正前）
            source_height: 源像素高度（修正前）
            orientation: EXIF 方向码
            manual_rotation: 手动顺时针旋转角度
            resize_policy: 尺寸调整策略

        Returns:
            Geometry: 输出尺寸与净旋转
        """
        orientation = Orientation(orientation)
        policy = resize_policy or ResizePolicy.none()

        # 方向码 5-8 的显示宽高与像素宽高相反
        if orientation.swaps_dimensions:
            width, height = source_height, source_width
        else:
            width, height = source_width, source_height

        net_rotation = compose_rotation(orientation, manual_rotation)
        if is_quarter_turn(net_rotation):
            width, height = height, width

        final_width, final_height = self._apply_policy(width, height, policy)

        return Geometry(
            final_width=_round_half_up(final_width),
            final_height=_round_half_up(final_height),
            net_rotation=net_rotation,
            upright_width=width,
            upright_height=height,
        )

    def _apply_policy(
        self, width: int, height: int, policy: ResizePolicy
    ) -> tuple[float, float]:
        """按策略计算浮点尺寸"""
        target_w = policy.target_width
        target_h = policy.target_height

        match policy.mode:
            case ResizeMode.FIT_WIDTH if target_w:
                return target_w, height * target_w / width
            case ResizeMode.FIT_HEIGHT if target_h:
                return width * target_h / height, target_h
            case ResizeMode.FIT_BOX if target_w and target_h:
                scale = min(target_w / width, target_h / height)
                return width * scale, height * scale
            case ResizeMode.FORCE_BOX if target_w and target_h:
                return target_w, target_h
            case _:
                return width, height


def resolve_geometry(
    source_width: int,
    source_height: int,
    orientation: Orientation | int = Orientation.TOP_LEFT,
    manual_rotation: int = 0,
    resize_policy: ResizePolicy | None = None,
) -> Geometry:
    """便捷函数：计算输出尺寸与净旋转"""
    return GeometryResolver().resolve(
        source_width, source_height, orientation, manual_rotation, resize_policy
    )
