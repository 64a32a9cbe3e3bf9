"""方向元数据读取模块。

从图片容器的 EXIF 中读取 Orientation 标签。读取过程有时间上限：
解析成功、解析失败、超时三者中最先完成的结果生效，其余结果被丢弃。
"""

from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from io import BytesIO

from PIL import Image

from ..config import get_config
from ..exceptions import MetadataReadError, MetadataReadTimeoutError
from ..models.constants import OrientationDefaults
from ..models.processing_request import Orientation
from ..utils.logging_helpers import get_logger


logger = get_logger()


def parse_orientation(data: bytes) -> Orientation:
    """同步解析方向标签，不处理超时

    Raises:
        MetadataReadError: 数据无法解析
    """
    try:
        with Image.open(BytesIO(data)) as img:
            value = img.getexif().get(OrientationDefaults.EXIF_TAG)
    except Exception as e:
        raise MetadataReadError(f"EXIF 解析失败: {e}") from e

    if value is None:
        return Orientation.TOP_LEFT

    orientation = Orientation.from_value(value)
    if orientation is Orientation.TOP_LEFT and value != 1:
        logger.debug(f"无效的方向值 {value!r}，按 1 处理")
    return orientation


class OrientationReader:
    """带超时的方向读取器

    每次读取使用独立的单线程执行器，结果通过单次赋值的 Future 传递；
    超时后 Future 被取消，后台解析即使完成也不会再影响结果。
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = (
            timeout
            if timeout is not None
            else get_config().processing.ORIENTATION_TIMEOUT
        )

    def read(self, data: bytes, source_name: str | None = None) -> Orientation:
        """读取方向码，失败或超时均返回 1

        Args:
            data: 原始图片数据
            source_name: 源文件名，仅用于日志

        Returns:
            Orientation: 方向码
        """
        name = source_name or "<bytes>"
        try:
            return self._read_with_timeout(data)
        except MetadataReadTimeoutError as e:
            logger.warning(f"EXIF 解析超时: {name} ({e})")
        except MetadataReadError as e:
            logger.warning(f"EXIF 解析失败: {name} ({e})")
        return Orientation(OrientationDefaults.DEFAULT_CODE)

    def _read_with_timeout(self, data: bytes) -> Orientation:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="orientation")
        future: Future[Orientation] = executor.submit(parse_orientation, data)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            raise MetadataReadTimeoutError(f"超过 {self.timeout:.1f} 秒") from e
        finally:
            future.cancel()
            executor.shutdown(wait=False)


def read_orientation(
    data: bytes, timeout: float | None = None, source_name: str | None = None
) -> Orientation:
    """便捷函数：读取方向码"""
    return OrientationReader(timeout).read(data, source_name)
