"""图片方向修正 MCP 服务器。

提供方向修正与方向读取两个工具。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .core.orientation import OrientationReader
from .exceptions import ImageProcessingError
from .fixer import ImageOrientationFixer
from .utils.file_helpers import read_source
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter


MCPResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> MCPResponse:
        """构建错误结果"""
        result: MCPResponse = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str, field: str | None = None) -> MCPResponse:
        details = {"field": field} if field else None
        return MCPResponseBuilder.error(message, "validation", details)

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> MCPResponse:
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(message, "file", details)

    @staticmethod
    def processing_error(message: str, operation: str | None = None) -> MCPResponse:
        details = {"operation": operation} if operation else None
        return MCPResponseBuilder.error(message, "processing", details)


logging_config = get_config().logging
configure_logging(logging_config.LOG_LEVEL, logging_config.LOG_FORMAT)
logger = get_logger(__name__)

mcp: FastMCP[Any] = FastMCP("图片方向修正服务")

fixer = ImageOrientationFixer()


@mcp.tool()
def fix_image_orientation(
    input_path: str,
    output_path: str | None = None,
    auto_fix: bool = True,
    rotation: int = 0,
    resize_mode: str = "none",
    target_width: int | None = None,
    target_height: int | None = None,
    max_size_kb: float | None = None,
    format: str = "auto",
    recursive: bool = False,
) -> MCPResponse:
    """修正图片方向，可选调整尺寸并限制输出大小

    单个文件输出 {stem}_fixed.{ext}，目录中多张图片输出 images_fixed.zip。

    Args:
        input_path: 输入路径（文件或目录）
        output_path: 输出目录（可选，默认与输入同级）
        auto_fix: 是否按 EXIF 方向自动修正
        rotation: 额外的顺时针旋转角度（0/90/180/270）
        resize_mode: none / width / height / both-fit / both-force
        target_width: 目标宽度
        target_height: 目标高度
        max_size_kb: 输出大小上限（KB），仅对 JPEG 生效
        format: 输出格式 auto / jpeg / png
        recursive: 目录处理时是否递归子目录

    Returns:
        dict: 处理结果
    """
    try:
        if not Path(input_path).exists():
            return MCPResponseBuilder.file_error(
                MessageFormatter.file_not_found(input_path), input_path
            )

        # 参数在处理任何图片前统一校验
        fixer.request_builder.build(
            auto_fix=False,
            rotation=rotation,
            resize_mode=resize_mode,
            target_width=target_width,
            target_height=target_height,
            max_size_kb=max_size_kb,
            format=format,
        )

        delivery = fixer.fix_universal(
            input_path,
            output=output_path,
            recursive=recursive,
            auto_fix=auto_fix,
            rotation=rotation,
            resize_mode=resize_mode,
            target_width=target_width,
            target_height=target_height,
            max_size_kb=max_size_kb,
            format=format,
        )

        return {
            "success": delivery["success"],
            "output_path": str(delivery["output_path"])
            if delivery["output_path"]
            else None,
            "result": delivery["result"].to_dict(),
            "error": delivery["error"],
        }

    except ImageProcessingError as e:
        logger.warning(MessageFormatter.operation_failed("参数校验", input_path, e))
        return MCPResponseBuilder.validation_error(e.message)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("方向修正", input_path, e))
        return MCPResponseBuilder.processing_error(
            MessageFormatter.operation_failed("方向修正", input_path, e), "方向修正"
        )


@mcp.tool()
def get_image_orientation(input_path: str) -> MCPResponse:
    """读取图片的 EXIF 方向码（1-8），无法读取时返回 1

    Args:
        input_path: 输入图像文件路径

    Returns:
        dict: 方向码、对应的顺时针旋转角度以及是否为镜像方向
    """
    try:
        orientation = OrientationReader().read(
            read_source(input_path), Path(input_path).name
        )
        return {
            "success": True,
            "file_path": input_path,
            "orientation": int(orientation),
            "rotation": orientation.rotation,
            "is_mirrored": orientation.is_mirrored,
        }
    except FileNotFoundError as e:
        return MCPResponseBuilder.file_error(str(e), input_path)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("读取方向", input_path, e))
        return MCPResponseBuilder.processing_error(str(e), "读取方向")


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动图片方向修正 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
