"""格式处理模块。

为目标格式准备色彩模式，并生成 Pillow 保存参数。
"""

import logging
from typing import Any

from PIL import Image

from ..config import EncodingDefaults, get_config
from ..models.constants import QualityDefaults


logger = logging.getLogger(__name__)


def to_pillow_quality(quality: float) -> int:
    """将 [0, 1] 的连续质量映射为 Pillow 的 1-100 整数质量"""
    return max(
        QualityDefaults.PILLOW_MIN,
        min(QualityDefaults.PILLOW_MAX, round(quality * 100)),
    )


class FormatProcessor:
    """输出格式处理器"""

    def __init__(self, encoding: EncodingDefaults | None = None) -> None:
        self.encoding = encoding or get_config().encoding

    def prepare_for_format(self, img: Image.Image, target_format: str) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            target_format: 目标格式（JPEG/PNG）

        Returns:
            Image.Image: 处理后的图片对象
        """
        match target_format:
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case _:
                logger.warning(f"不支持的输出格式: {target_format}，按JPEG处理")
                return self._prepare_for_jpeg(img)

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG不支持透明度，透明区域合成到背景色上"""
        if img.mode == "P":
            img = img.convert("RGBA" if "transparency" in img.info else "RGB")

        if img.mode in ("RGBA", "LA"):
            if img.mode == "LA":
                img = img.convert("RGBA")
            background = Image.new("RGB", img.size, self.encoding.JPEG_BACKGROUND)
            background.paste(img, mask=img.split()[-1])
            return background

        if img.mode in ("RGB", "L"):
            return img

        # CMYK、1 位等其他模式
        return img.convert("RGB")

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """PNG支持大多数模式，只转换不兼容的模式"""
        if img.mode == "CMYK":
            return img.convert("RGB")
        if img.mode == "P" and "transparency" in img.info:
            return img.convert("RGBA")
        return img

    def get_save_parameters(
        self,
        target_format: str,
        quality: float | None = None,
        subsampling: int | None = None,
    ) -> dict[str, Any]:
        """获取保存参数

        Args:
            target_format: 目标格式
            quality: [0, 1] 质量值，PNG忽略
            subsampling: 固定的 JPEG 色度子采样，None 时按质量选择

        Returns:
            dict: Pillow save() 参数（包含 format）
        """
        match target_format:
            case "PNG":
                return self.get_png_params()
            case _:
                return self.get_jpeg_params(
                    quality if quality is not None else self.encoding.MAX_QUALITY,
                    subsampling,
                )

    def get_jpeg_params(
        self, quality: float, subsampling: int | None = None
    ) -> dict[str, Any]:
        """获取JPEG保存参数

        - optimize: 额外处理以找到最优哈夫曼表
        - subsampling: 未指定时高质量使用 4:2:2，其余使用 4:2:0
        """
        jpeg_quality = to_pillow_quality(quality)
        if subsampling is None:
            subsampling = 1 if jpeg_quality >= 85 else 2
        return {
            "format": "JPEG",
            "quality": jpeg_quality,
            "optimize": self.encoding.JPEG_OPTIMIZE,
            "progressive": self.encoding.JPEG_PROGRESSIVE,
            "subsampling": subsampling,
        }

    def get_png_params(self) -> dict[str, Any]:
        """获取PNG保存参数，PNG始终无损"""
        return {
            "format": "PNG",
            "optimize": False,
            "compress_level": self.encoding.PNG_COMPRESS_LEVEL,
        }
