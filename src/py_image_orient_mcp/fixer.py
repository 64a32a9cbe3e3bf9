"""图片方向修正器接口。

基于核心处理管线的用户接口：单张数据处理、文件处理与批量导出。
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any, TypedDict

from .config import get_config
from .core.pipeline import ImagePipeline
from .engine.batch import BatchProcessor
from .engine.config import RequestBuilder
from .exceptions import ValidationError
from .models import BatchResult, ProcessedResult
from .utils.file_helpers import read_source
from .utils.logging_helpers import get_logger
from .utils.naming_helpers import FileNamingStrategy, PathResolver


logger = get_logger()


class DeliveryResult(TypedDict):
    """写出结果的统一返回类型"""

    success: bool
    output_path: Path | None
    result: BatchResult
    error: str | None


class ImageOrientationFixer:
    """图片方向修正器

    提供单张与批量处理接口；批量时各图片独立处理，失败条目不影响其他条目。
    """

    def __init__(self, max_workers: int | None = None):
        """初始化修正器

        Args:
            max_workers: 批量处理时的最大并发数，默认读取配置
        """
        max_workers = (
            max_workers
            if max_workers is not None
            else get_config().processing.MAX_WORKERS
        )
        if max_workers <= 0:
            raise ValidationError("max_workers 必须大于 0")

        self.max_workers = max_workers
        self.request_builder = RequestBuilder()
        self.batch_processor = BatchProcessor(
            max_workers=max_workers, request_builder=self.request_builder
        )

        logger.debug("初始化方向修正器")

    def fix_bytes(
        self, data: bytes, source_name: str | None = None, **options: Any
    ) -> ProcessedResult:
        """处理单张图片数据

        Args:
            data: 源图片数据
            source_name: 源文件名
            **options: RequestBuilder.build 的处理选项（auto_fix、rotation、
                resize_mode、target_width、target_height、max_size_kb、format）

        Returns:
            ProcessedResult: 处理结果

        Examples:
            >>> fixer = ImageOrientationFixer()
            >>> result = fixer.fix_bytes(data, rotation=90, format="jpeg")
            >>> print(result.get_summary())
        """
        request = self.request_builder.build(
            source_name=source_name, data=data, **options
        )
        return ImagePipeline().process(data, request)

    def fix_file(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        **options: Any,
    ) -> tuple[Path, ProcessedResult]:
        """处理单个文件并写出 {stem}_fixed{ext}

        Returns:
            tuple: (输出路径, 处理结果)
        """
        input_path = Path(input_path)
        result = self.fix_bytes(read_source(input_path), input_path.name, **options)

        if output_path is None:
            output_path = PathResolver.ensure_unique_path(
                input_path.parent
                / FileNamingStrategy.generate_output_name(
                    input_path.name, result.format_used
                )
            )
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.encoded_bytes)
        return output_path, result

    def fix_batch(
        self, files: Sequence[str | Path], **options: Any
    ) -> BatchResult:
        """按顺序批量处理文件"""
        return self.batch_processor.process_files(files, **options)

    def fix_universal(
        self,
        input_path: str | Path,
        output: str | Path | None = None,
        recursive: bool = False,
        **options: Any,
    ) -> DeliveryResult:
        """通用处理入口，自动识别文件或目录

        单个成功结果直接写出图片，多个结果写出 images_fixed.zip。

        Args:
            input_path: 输入路径（文件或目录）
            output: 输出目录，默认与输入同级
            recursive: 目录时是否递归
            **options: 处理选项

        Returns:
            DeliveryResult: 写出结果
        """
        input_path = Path(input_path)

        match input_path:
            case path if path.is_file():
                batch = self.fix_batch([path], **options)
                default_dir = path.parent
            case path if path.is_dir():
                batch = self.batch_processor.process_directory(
                    path, recursive=recursive, **options
                )
                default_dir = path
            case _:
                batch = BatchResult(error=f"输入路径不存在: {input_path}")
                default_dir = None

        packaged = BatchProcessor.package(batch)
        if packaged is None or default_dir is None:
            return {
                "success": False,
                "output_path": None,
                "result": batch,
                "error": batch.error or "没有成功处理的图片",
            }

        name, data = packaged
        output_dir = Path(output) if output else default_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = PathResolver.ensure_unique_path(output_dir / name)
        output_path.write_bytes(data)
        logger.info(f"已写出 {output_path}: {batch.get_summary()}")

        return {
            "success": batch.success,
            "output_path": output_path,
            "result": batch,
            "error": None,
        }
