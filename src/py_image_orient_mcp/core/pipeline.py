"""方向修正处理管线。

process(数据, 请求) 是核心对外的唯一操作：尺寸校验 → 解码 → 几何计算
→ 渲染 → 编码，各阶段严格顺序执行，任一阶段失败即抛出异常，不返回部分结果。
"""

from io import BytesIO

from PIL import Image

from ..exceptions import DecodeError, handle_image_errors
from ..models.constants import get_mime_type
from ..models.processing_request import ProcessingRequest, resolve_output_format
from ..models.processing_result import ProcessedResult
from ..utils.logging_helpers import get_logger
from .encoder import SizeConstrainedEncoder
from .geometry import GeometryResolver
from .renderer import Renderer


logger = get_logger()


@handle_image_errors("图像解码", DecodeError)
def decode_image(data: bytes) -> Image.Image:
    """解码源数据，调用方负责关闭返回的图像"""
    if not data:
        raise DecodeError("源数据为空")

    img = Image.open(BytesIO(data))
    try:
        img.load()
    except BaseException:
        img.close()
        raise
    return img


class ImagePipeline:
    """单张图片的处理管线，组件均无状态，可在线程间独立使用"""

    def __init__(
        self,
        resolver: GeometryResolver | None = None,
        renderer: Renderer | None = None,
        encoder: SizeConstrainedEncoder | None = None,
    ):
        self.resolver = resolver or GeometryResolver()
        self.renderer = renderer or Renderer()
        self.encoder = encoder or SizeConstrainedEncoder()

    def process(self, data: bytes, request: ProcessingRequest) -> ProcessedResult:
        """处理单张图片

        Args:
            data: 源图片数据
            request: 处理请求

        Returns:
            ProcessedResult: 编码后的结果

        Raises:
            InvalidResizeTargetError: 尺寸调整目标无效（解码前检查）
            DecodeError: 源数据无法解码
            EncodeError: 必需的编码失败
        """
        name = request.source_name or "<bytes>"

        # 在分配任何画布前校验尺寸目标
        request.resize_policy.check_targets()

        with decode_image(data) as source:
            source_format = source.format
            geometry = self.resolver.resolve(
                source.width,
                source.height,
                request.orientation,
                request.manual_rotation,
                request.resize_policy,
            )
            logger.debug(
                f"{name}: {source.width}x{source.height} 方向={int(request.orientation)} "
                f"手动={request.manual_rotation}° → {geometry.final_width}x"
                f"{geometry.final_height} 净旋转={geometry.net_rotation}°"
            )

            rendered = self.renderer.render(source, geometry.size, geometry.net_rotation)

        if request.orientation.is_mirrored:
            logger.info(f"{name}: 镜像方向 {int(request.orientation)} 不做翻转")

        target_format = resolve_output_format(
            request.output_format, source_format, request.has_size_ceiling
        )
        try:
            encoded = self.encoder.encode(
                rendered, target_format, request.size_ceiling_bytes
            )
        finally:
            rendered.close()

        return ProcessedResult(
            encoded_bytes=encoded.data,
            final_width=geometry.final_width,
            final_height=geometry.final_height,
            mime_type=get_mime_type(encoded.format),
            format_used=encoded.format,
            quality_used=encoded.quality,
            net_rotation=geometry.net_rotation,
            original_size=len(data),
            size_ceiling_bytes=request.size_ceiling_bytes,
        )


def process(data: bytes, request: ProcessingRequest) -> ProcessedResult:
    """处理单张图片，每次调用使用独立的管线实例"""
    return ImagePipeline().process(data, request)
