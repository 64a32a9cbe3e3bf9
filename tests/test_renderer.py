"""渲染器测试。"""

import pytest
from PIL import Image

from py_image_orient_mcp.core.renderer import CanvasTransform, Renderer
from tests.conftest import make_marker_image


RED = (255, 0, 0)


def is_red(pixel) -> bool:
    r, g, b = pixel[:3]
    return r > 200 and g < 60 and b < 60


class TestCanvasTransform:
    """画布变换测试"""

    def test_scale_without_quarter_turn(self):
        transform = CanvasTransform.build((400, 200), (200, 50), 180)
        assert transform.scale_x == pytest.approx(0.5)
        assert transform.scale_y == pytest.approx(0.25)
        assert transform.scaled_source_size == (200, 50)

    def test_scale_with_quarter_turn(self):
        """旋转 90° 时源宽映射到画布高"""
        transform = CanvasTransform.build((400, 200), (100, 200), 90)
        assert transform.scale_x == pytest.approx(200 / 400)
        assert transform.scale_y == pytest.approx(100 / 200)
        assert transform.is_uniform
        assert transform.scaled_source_size == (200, 100)


class TestRenderer:
    """渲染器测试"""

    @pytest.fixture
    def renderer(self):
        return Renderer()

    @pytest.mark.parametrize(
        "rotation,corner",
        [
            (0, (2, 2)),  # 左上
            (90, (17, 2)),  # 顺时针 90° 后位于右上
            (180, (37, 17)),  # 右下
            (270, (2, 37)),  # 左下
        ],
    )
    def test_rotation_is_clockwise(self, renderer, rotation, corner):
        source = make_marker_image((40, 20))
        target = (20, 40) if rotation in (90, 270) else (40, 20)

        result = renderer.render(source, target, rotation)

        assert result.size == target
        assert is_red(result.getpixel(corner))

    @pytest.mark.parametrize(
        "target,rotation",
        [((10, 10), 0), ((123, 45), 90), ((7, 300), 270), ((80, 40), 180)],
    )
    def test_output_size_exact(self, renderer, target, rotation):
        """强制尺寸允许非等比缩放，输出尺寸严格等于目标"""
        result = renderer.render(make_marker_image((64, 48)), target, rotation)
        assert result.size == target

    def test_returns_isolated_buffer(self, renderer):
        source = make_marker_image((40, 20))

        first = renderer.render(source, (40, 20), 0)
        first.paste((0, 255, 0), (0, 0, 40, 20))
        second = renderer.render(source, (40, 20), 0)

        assert first is not source
        assert is_red(source.getpixel((2, 2)))
        assert is_red(second.getpixel((2, 2)))

    def test_palette_with_transparency_keeps_alpha(self, renderer):
        source = Image.new("P", (20, 10))
        source.info["transparency"] = 0

        result = renderer.render(source, (10, 20), 90)
        assert result.mode == "RGBA"

    def test_cmyk_converted(self, renderer):
        source = Image.new("CMYK", (20, 10))
        assert renderer.render(source, (10, 5), 0).mode == "RGB"

    def test_invalid_rotation(self, renderer):
        with pytest.raises(ValueError):
            renderer.render(make_marker_image(), (40, 20), 45)
