"""大小受限编码模块。

将渲染后的图像编码为目标格式；设置了字节上限时，对 JPEG 质量做固定
次数的二分搜索，取满足上限的最高质量结果。
"""

from dataclasses import dataclass
from io import BytesIO

from PIL import Image

from ..config import EncodingDefaults, get_config
from ..exceptions import EncodeError
from ..models.constants import supports_quality
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .formats import FormatProcessor


logger = get_logger()


@dataclass(frozen=True)
class EncodedImage:
    """一次编码的结果"""

    data: bytes
    format: str
    quality: float | None

    @property
    def size(self) -> int:
        return len(self.data)


class SizeConstrainedEncoder:
    """大小受限编码器

    搜索只在质量上收敛，不保证找到上限内的真实最高质量；
    所有候选都不满足上限时返回最低质量编码（尽力而为，不视为失败）。
    """

    def __init__(
        self,
        format_processor: FormatProcessor | None = None,
        encoding: EncodingDefaults | None = None,
    ):
        self.encoding = encoding or get_config().encoding
        self.format_processor = format_processor or FormatProcessor(self.encoding)

    def encode(
        self,
        img: Image.Image,
        target_format: str,
        size_ceiling: int | None = None,
    ) -> EncodedImage:
        """编码图像

        Args:
            img: 渲染后的图像
            target_format: 目标格式（JPEG/PNG）
            size_ceiling: 字节上限，None 表示不限

        Returns:
            EncodedImage: 编码结果

        Raises:
            EncodeError: 最高质量或最低质量编码失败
        """
        prepared = self.format_processor.prepare_for_format(img, target_format)
        try:
            return self._encode_prepared(prepared, target_format, size_ceiling)
        finally:
            # 格式准备可能生成新图像（如透明图合成到背景色）
            if prepared is not img:
                prepared.close()

    def _encode_prepared(
        self, prepared: Image.Image, target_format: str, size_ceiling: int | None
    ) -> EncodedImage:
        # PNG 没有连续的质量参数，无法控制大小
        if size_ceiling is None or not supports_quality(target_format):
            if size_ceiling is not None:
                logger.info(f"{target_format} 不支持大小控制，忽略大小上限")
            return self._encode_at(prepared, target_format, self.encoding.MAX_QUALITY)

        best = self._encode_at(prepared, target_format, self.encoding.MAX_QUALITY)
        logger.info(
            MessageFormatter.size_against_ceiling("最高质量初始大小", best.size, size_ceiling)
        )
        if best.size <= size_ceiling:
            return best

        candidate = self._search(prepared, target_format, size_ceiling)
        if candidate is not None:
            logger.info(
                MessageFormatter.size_against_ceiling(
                    f"已满足大小上限 (质量 {candidate.quality:.3f})",
                    candidate.size,
                    size_ceiling,
                )
            )
            return candidate

        fallback = self._encode_at(
            prepared,
            target_format,
            self.encoding.MIN_QUALITY,
            self.encoding.JPEG_SEARCH_SUBSAMPLING,
        )
        logger.info(
            MessageFormatter.size_against_ceiling(
                "无法满足大小上限，返回最低质量版本", fallback.size, size_ceiling
            )
        )
        return fallback

    def _search(
        self, img: Image.Image, target_format: str, size_ceiling: int
    ) -> EncodedImage | None:
        """固定迭代次数的质量二分搜索，返回最后记录的候选"""
        low = self.encoding.MIN_QUALITY
        high = self.encoding.MAX_QUALITY
        best: EncodedImage | None = None

        for _ in range(self.encoding.SEARCH_ITERATIONS):
            mid = (low + high) / 2
            try:
                encoded = self._encode_at(
                    img, target_format, mid, self.encoding.JPEG_SEARCH_SUBSAMPLING
                )
            except EncodeError as e:
                logger.debug(f"质量 {mid:.3f} 编码失败，按超出上限处理: {e}")
                high = mid
                continue

            if encoded.size <= size_ceiling:
                best = encoded
                low = mid
            else:
                high = mid

        return best

    def _encode_at(
        self,
        img: Image.Image,
        target_format: str,
        quality: float,
        subsampling: int | None = None,
    ) -> EncodedImage:
        """在指定质量下编码一次，缓冲区在取出数据后立即释放"""
        params = self.format_processor.get_save_parameters(
            target_format, quality, subsampling
        )
        used_quality = quality if supports_quality(target_format) else None
        try:
            with BytesIO() as buffer:
                img.save(buffer, **params)
                data = buffer.getvalue()
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(
                f"{target_format} 编码失败 (质量 {quality:.3f}): {e}", quality=quality
            ) from e

        return EncodedImage(data=data, format=target_format, quality=used_quality)
