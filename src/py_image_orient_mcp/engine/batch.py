"""批量处理器模块。

按输入顺序处理一组图片，每个条目独立成败，结果可打包交付。
"""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..core.pipeline import ImagePipeline
from ..exceptions import ErrorHandler
from ..models.constants import ArchiveDefaults
from ..models.processing_result import BatchItemResult, BatchResult
from ..utils.archive_helpers import package_outputs
from ..utils.file_helpers import find_image_files, read_source
from ..utils.logging_helpers import get_logger
from ..utils.naming_helpers import FileNamingStrategy, deduplicate_names
from .concurrent_executor import ConcurrentExecutor
from .config import RequestBuilder


logger = get_logger()


@dataclass(frozen=True)
class BatchSource:
    """批量处理的输入条目，数据或路径二选一"""

    name: str
    data: bytes | None = None
    path: Path | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> "BatchSource":
        path = Path(path)
        return cls(name=path.name, path=path)

    def load(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise FileNotFoundError(f"条目没有数据也没有路径: {self.name}")
        return read_source(self.path)


class BatchProcessor:
    """批量图像处理器

    所有条目共用同一组处理选项；每个条目使用独立的管线实例。
    """

    def __init__(
        self,
        max_workers: int = 1,
        request_builder: RequestBuilder | None = None,
    ):
        """初始化批量处理器

        Args:
            max_workers: 最大并发数，默认顺序处理
            request_builder: 请求构建器实例
        """
        self.max_workers = max_workers
        self.request_builder = request_builder or RequestBuilder()
        self.concurrent_executor: ConcurrentExecutor[BatchSource] = (
            ConcurrentExecutor(max_workers)
        )

    def process_sources(
        self, sources: list[BatchSource], **options: Any
    ) -> BatchResult:
        """处理条目列表

        Args:
            sources: 输入条目
            **options: 传给 RequestBuilder.build 的处理选项

        Returns:
            BatchResult: 与输入顺序一致的批量结果
        """
        items = self.concurrent_executor.execute_tasks(
            tasks=sources,
            task_function=lambda index, source: self._process_one(
                index, source, options
            ),
            describe=lambda source: source.name,
        )
        return BatchResult(items=self._assign_unique_names(items))

    def process_files(
        self, files: Sequence[str | Path], **options: Any
    ) -> BatchResult:
        """处理文件列表"""
        return self.process_sources([BatchSource.from_path(f) for f in files], **options)

    def process_directory(
        self,
        input_dir: str | Path,
        recursive: bool = False,
        exclude_dirs: list[str] | None = None,
        **options: Any,
    ) -> BatchResult:
        """处理目录中的所有图像文件"""
        input_dir = Path(input_dir)
        if not input_dir.is_dir():
            return BatchResult(input_dir=input_dir, error=f"不是目录: {input_dir}")

        files = list(
            find_image_files(
                input_dir,
                recursive=recursive,
                exclude_dirs=exclude_dirs or ArchiveDefaults.EXCLUDE_DIRS,
            )
        )
        if not files:
            return BatchResult(input_dir=input_dir, error="未找到图像文件")

        result = self.process_files(files, **options)
        return result.model_copy(update={"input_dir": input_dir})

    @staticmethod
    def package(result: BatchResult) -> tuple[str, bytes] | None:
        """打包成功条目：单个文件原样交付，多个文件打包为 ZIP"""
        entries = [
            (item.output_name, item.result.encoded_bytes)
            for item in result.get_successful_items()
            if item.output_name and item.result
        ]
        return package_outputs(entries)

    def _process_one(
        self, index: int, source: BatchSource, options: dict[str, Any]
    ) -> BatchItemResult:
        try:
            data = source.load()
            request = self.request_builder.build(
                source_name=source.name, data=data, **options
            )
            processed = ImagePipeline().process(data, request)
        except Exception as e:
            return ErrorHandler.handle_item_error(e, index, source.name)

        logger.info(f"{source.name}: {processed.get_summary()}")
        return BatchItemResult(
            index=index,
            source_name=source.name,
            output_name=FileNamingStrategy.generate_output_name(
                source.name, processed.format_used
            ),
            success=True,
            result=processed,
        )

    @staticmethod
    def _assign_unique_names(items: list[BatchItemResult]) -> list[BatchItemResult]:
        """保证归档内文件名唯一"""
        named = [i for i in items if i.output_name]
        unique = deduplicate_names([i.output_name for i in named if i.output_name])
        renamed = {
            id(item): name
            for item, name in zip(named, unique, strict=True)
            if name != item.output_name
        }
        return [
            item.model_copy(update={"output_name": renamed[id(item)]})
            if id(item) in renamed
            else item
            for item in items
        ]
