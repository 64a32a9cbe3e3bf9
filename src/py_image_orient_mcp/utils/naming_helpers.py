"""文件命名工具模块。

处理结果的输出文件名与唯一路径生成。
"""

import itertools
from pathlib import Path

from ..models.constants import ArchiveDefaults, get_extension


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def generate_output_name(
        source_name: str | Path,
        target_format: str | None = None,
        suffix: str = ArchiveDefaults.OUTPUT_SUFFIX,
    ) -> str:
        """生成输出文件名 {stem}_fixed{ext}

        Args:
            source_name: 源文件名或路径
            target_format: 实际输出格式，决定扩展名；None 时保留源扩展名
            suffix: 文件名后缀

        Returns:
            str: 生成的文件名（不含路径）
        """
        source = Path(source_name)
        ext = get_extension(target_format) if target_format else source.suffix
        return f"{source.stem}{suffix}{ext}"


class PathResolver:
    """路径解析器"""

    @staticmethod
    def ensure_unique_path(path: Path) -> Path:
        """确保路径唯一，如果文件已存在则添加数字后缀"""
        if not path.exists():
            return path

        base = path.stem
        suffix = path.suffix
        parent = path.parent

        for counter in itertools.count(1):
            new_path = parent / f"{base}_{counter}{suffix}"
            if not new_path.exists():
                return new_path

        return path  # pragma: no cover


def deduplicate_names(names: list[str]) -> list[str]:
    """为重复的文件名追加数字后缀，保持顺序"""
    seen: dict[str, int] = {}
    result = []
    for name in names:
        if name not in seen:
            seen[name] = 0
            result.append(name)
            continue

        path = Path(name)
        for counter in itertools.count(seen[name] + 1):
            candidate = f"{path.stem}_{counter}{path.suffix}"
            if candidate not in seen:
                seen[name] = counter
                seen[candidate] = 0
                result.append(candidate)
                break
    return result
