"""核心模块包。

方向读取、几何计算、渲染与大小受限编码。
"""

from .encoder import EncodedImage, SizeConstrainedEncoder
from .formats import FormatProcessor, to_pillow_quality
from .geometry import (
    Geometry,
    GeometryResolver,
    compose_rotation,
    resolve_geometry,
    rotate_clockwise,
    rotate_counterclockwise,
)
from .orientation import OrientationReader, parse_orientation, read_orientation
from .pipeline import ImagePipeline, decode_image, process
from .renderer import CanvasTransform, Renderer


__all__ = [
    "CanvasTransform",
    "EncodedImage",
    "FormatProcessor",
    "Geometry",
    "GeometryResolver",
    "ImagePipeline",
    "OrientationReader",
    "Renderer",
    "SizeConstrainedEncoder",
    "compose_rotation",
    "decode_image",
    "parse_orientation",
    "process",
    "read_orientation",
    "resolve_geometry",
    "rotate_clockwise",
    "rotate_counterclockwise",
    "to_pillow_quality",
]
