"""处理结果模型。

定义单张图片处理结果与批量处理结果的数据结构。
"""

from pathlib import Path
from typing import Any

from humanize import naturalsize
from pydantic import BaseModel, Field


class ProcessedResult(BaseModel):
    """单张图片的处理结果，返回后调用方独占"""

    encoded_bytes: bytes = Field(description="编码后的图片数据", repr=False)
    final_width: int = Field(gt=0, description="输出宽度")
    final_height: int = Field(gt=0, description="输出高度")
    mime_type: str = Field(description="输出 MIME 类型")

    # 诊断信息
    format_used: str = Field(description="使用的格式")
    quality_used: float | None = Field(None, description="使用的质量值（0-1）")
    net_rotation: int = Field(0, description="实际应用的顺时针旋转角度")
    original_size: int = Field(0, description="源数据大小（字节）")
    size_ceiling_bytes: int | None = Field(None, description="请求的大小上限")

    @property
    def encoded_size(self) -> int:
        return len(self.encoded_bytes)

    @property
    def final_dimensions(self) -> tuple[int, int]:
        return (self.final_width, self.final_height)

    @property
    def ceiling_met(self) -> bool | None:
        """是否满足大小上限，未设置上限时为 None"""
        if self.size_ceiling_bytes is None:
            return None
        return self.encoded_size <= self.size_ceiling_bytes

    def get_summary(self) -> str:
        """处理结果摘要"""
        summary = (
            f"{self.final_width}x{self.final_height} {self.format_used}, "
            f"{naturalsize(self.original_size, binary=True)} → "
            f"{naturalsize(self.encoded_size, binary=True)}"
        )
        if self.quality_used is not None:
            summary += f" (质量 {self.quality_used:.2f})"
        if self.ceiling_met is False:
            summary += "，未达到大小上限"
        return summary


class BatchItemResult(BaseModel):
    """批量处理中单个条目的结果，各条目独立成败"""

    index: int = Field(description="在输入序列中的位置")
    source_name: str = Field(description="源文件名")
    output_name: str | None = Field(None, description="输出文件名")
    success: bool = Field(description="是否成功")
    error: str | None = Field(None, description="错误信息")
    result: ProcessedResult | None = Field(None, description="处理结果")

    def is_successful(self) -> bool:
        return self.success and self.error is None and self.result is not None


class BatchResult(BaseModel):
    """批量处理结果，条目顺序与输入顺序一致"""

    items: list[BatchItemResult] = Field(default_factory=list, description="条目结果")
    input_dir: Path | None = Field(None, description="输入目录")
    error: str | None = Field(None, description="批量级错误")

    @property
    def success(self) -> bool:
        return self.error is None and any(i.is_successful() for i in self.items)

    def get_successful_items(self) -> list[BatchItemResult]:
        return [i for i in self.items if i.is_successful()]

    def get_failed_items(self) -> list[BatchItemResult]:
        return [i for i in self.items if not i.is_successful()]

    def get_total_count(self) -> int:
        return len(self.items)

    def get_success_count(self) -> int:
        return len(self.get_successful_items())

    def get_failure_count(self) -> int:
        return len(self.get_failed_items())

    def get_success_rate(self) -> float:
        """获取成功率（百分比）"""
        total = self.get_total_count()
        if total == 0:
            return 0.0
        return (self.get_success_count() / total) * 100

    def get_total_encoded_size(self) -> int:
        return sum(i.result.encoded_size for i in self.get_successful_items() if i.result)

    def get_summary(self) -> str:
        """批量处理摘要"""
        if self.error:
            return f"批量处理失败: {self.error}"

        return (
            f"处理 {self.get_success_count()}/{self.get_total_count()} 个文件 "
            f"(成功率 {self.get_success_rate():.1f}%), "
            f"输出 {naturalsize(self.get_total_encoded_size(), binary=True)}"
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为不含图片数据的字典，用于 MCP 响应"""
        return {
            "total_files": self.get_total_count(),
            "successful_files": self.get_success_count(),
            "failed_files": self.get_failure_count(),
            "success_rate": self.get_success_rate(),
            "summary": self.get_summary(),
            "items": [
                {
                    "source_name": i.source_name,
                    "output_name": i.output_name,
                    "success": i.success,
                    "error": i.error,
                    "summary": i.result.get_summary() if i.result else None,
                }
                for i in self.items
            ],
        }
