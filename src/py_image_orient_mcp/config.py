"""统一配置管理模块。

提供应用程序的全局配置，包括默认值与环境变量覆盖。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessingDefaults:
    """处理相关的默认配置"""

    # 方向读取超时（秒）
    ORIENTATION_TIMEOUT: float = 1.5

    # 并发设置
    MAX_WORKERS: int = 4

    # 渲染时使用的重采样滤镜名称（Pillow Image.Resampling）
    RESAMPLE: str = "LANCZOS"


@dataclass(frozen=True)
class EncodingDefaults:
    """编码相关的默认配置"""

    # 质量搜索
    MIN_QUALITY: float = 0.01
    MAX_QUALITY: float = 1.0
    SEARCH_ITERATIONS: int = 10

    # JPEG
    JPEG_OPTIMIZE: bool = True
    JPEG_PROGRESSIVE: bool = False
    JPEG_BACKGROUND: tuple[int, int, int] = (255, 255, 255)
    # 大小搜索与最低质量回退使用的固定色度子采样（4:2:0）
    JPEG_SEARCH_SUBSAMPLING: int = 2

    # PNG
    PNG_COMPRESS_LEVEL: int = 9


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.processing = ProcessingDefaults()
        self.encoding = EncodingDefaults()
        self.logging = LoggingDefaults()

        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if timeout := os.getenv("IMGFIX_ORIENTATION_TIMEOUT"):
            object.__setattr__(
                self.processing, "ORIENTATION_TIMEOUT", float(timeout)
            )

        if max_workers := os.getenv("IMGFIX_MAX_WORKERS"):
            object.__setattr__(self.processing, "MAX_WORKERS", int(max_workers))

        if iterations := os.getenv("IMGFIX_SEARCH_ITERATIONS"):
            object.__setattr__(self.encoding, "SEARCH_ITERATIONS", int(iterations))

        if progressive := os.getenv("IMGFIX_JPEG_PROGRESSIVE"):
            object.__setattr__(
                self.encoding,
                "JPEG_PROGRESSIVE",
                progressive.lower() in ("true", "1", "yes"),
            )

        if log_level := os.getenv("IMGFIX_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
