"""测试配置文件。

提供测试所需的fixtures和图片构造工具，所有图片在内存中生成。
"""

from io import BytesIO

import pytest
from PIL import Image, ImageDraw

from py_image_orient_mcp.config import reset_config


ORIENTATION_TAG = 0x0112


def encode_image(img: Image.Image, fmt: str = "JPEG", **params) -> bytes:
    """将图片编码为字节"""
    with BytesIO() as buffer:
        img.save(buffer, format=fmt, **params)
        return buffer.getvalue()


def make_jpeg_with_orientation(
    orientation: int, size: tuple[int, int] = (64, 48)
) -> bytes:
    """生成带 EXIF 方向标签的 JPEG"""
    img = Image.new("RGB", size, color=(200, 120, 40))
    exif = Image.Exif()
    exif[ORIENTATION_TAG] = orientation
    return encode_image(img, "JPEG", exif=exif.tobytes())


def make_marker_image(size: tuple[int, int] = (40, 20)) -> Image.Image:
    """左上角为红色方块、其余为蓝色的标记图"""
    img = Image.new("RGB", size, color=(0, 0, 255))
    draw = ImageDraw.Draw(img)
    draw.rectangle([0, 0, 9, 9], fill=(255, 0, 0))
    return img


def make_noisy_image(size: tuple[int, int] = (256, 256)) -> Image.Image:
    """高频噪声图，JPEG 大小随质量明显变化"""
    bands = [Image.effect_noise(size, sigma) for sigma in (60, 80, 100)]
    return Image.merge("RGB", bands)


def read_pixels(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img


@pytest.fixture(autouse=True)
def fresh_config():
    """每个测试使用默认配置"""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def noisy_image() -> Image.Image:
    return make_noisy_image()


@pytest.fixture
def png_bytes() -> bytes:
    img = Image.new("RGBA", (60, 40), color=(10, 200, 30, 128))
    return encode_image(img, "PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return encode_image(make_marker_image((80, 60)), "JPEG", quality=90)


@pytest.fixture
def image_dir(tmp_path):
    """包含两张可处理图片和一个损坏文件的目录"""
    (tmp_path / "a.jpg").write_bytes(make_jpeg_with_orientation(6, (40, 30)))
    (tmp_path / "b.png").write_bytes(
        encode_image(Image.new("RGB", (30, 20), color="green"), "PNG")
    )
    (tmp_path / "c.jpg").write_bytes(b"not an image")
    return tmp_path
