"""大小受限编码测试。"""

import pytest
from PIL import Image

from py_image_orient_mcp.core.encoder import EncodedImage, SizeConstrainedEncoder
from py_image_orient_mcp.core.formats import FormatProcessor, to_pillow_quality
from py_image_orient_mcp.exceptions import EncodeError
from tests.conftest import read_pixels


class RecordingEncoder(SizeConstrainedEncoder):
    """编码大小与质量成正比的假编码器，记录每次调用的质量"""

    def __init__(self, fail_between: tuple[float, float] | None = None):
        super().__init__()
        self.calls: list[float] = []
        self.subsamplings: list[int | None] = []
        self.fail_between = fail_between

    def _encode_at(self, img, target_format, quality, subsampling=None):
        self.calls.append(quality)
        self.subsamplings.append(subsampling)
        if self.fail_between and self.fail_between[0] <= quality <= self.fail_between[1]:
            raise EncodeError("模拟编码失败", quality=quality)
        return EncodedImage(
            data=b"x" * int(quality * 1000), format=target_format, quality=quality
        )


class TestQualityMapping:
    @pytest.mark.parametrize(
        "quality,expected",
        [(1.0, 100), (0.01, 1), (0.0, 1), (0.5, 50), (0.854, 85), (1.5, 100)],
    )
    def test_to_pillow_quality(self, quality, expected):
        assert to_pillow_quality(quality) == expected

    def test_jpeg_params(self):
        params = FormatProcessor().get_jpeg_params(0.9)
        assert params["format"] == "JPEG"
        assert params["quality"] == 90
        assert params["subsampling"] == 1


class TrackingFormatProcessor(FormatProcessor):
    """记录格式准备产生的新图像是否被关闭"""

    def __init__(self):
        super().__init__()
        self.closed: list[bool] = []

    def prepare_for_format(self, img, target_format):
        prepared = super().prepare_for_format(img, target_format)
        if prepared is not img:
            prepared.close = lambda: self.closed.append(True)
        return prepared


class TestSizeConstrainedEncoder:
    """编码器行为测试"""

    def test_no_ceiling_single_max_quality_encode(self, noisy_image):
        encoder = RecordingEncoder()
        result = encoder.encode(noisy_image, "JPEG")

        assert encoder.calls == [1.0]
        assert result.quality == 1.0

    def test_png_ignores_ceiling(self, noisy_image):
        encoder = SizeConstrainedEncoder()
        result = encoder.encode(noisy_image, "PNG", size_ceiling=100)

        assert result.format == "PNG"
        assert result.quality is None
        assert result.size > 100
        assert read_pixels(result.data).format == "PNG"

    def test_large_ceiling_returns_max_quality_bytes(self, noisy_image):
        encoder = SizeConstrainedEncoder()
        unconstrained = encoder.encode(noisy_image, "JPEG")
        constrained = encoder.encode(
            noisy_image, "JPEG", size_ceiling=unconstrained.size + 1
        )

        assert constrained.data == unconstrained.data
        assert constrained.quality == 1.0

    def test_achievable_ceiling_respected(self, noisy_image):
        encoder = SizeConstrainedEncoder()
        largest = encoder.encode(noisy_image, "JPEG").size
        ceiling = largest // 3

        first = encoder.encode(noisy_image, "JPEG", size_ceiling=ceiling)
        second = encoder.encode(noisy_image, "JPEG", size_ceiling=ceiling)

        assert first.size <= ceiling
        assert 0.01 < first.quality < 1.0
        assert first.data == second.data

    def test_unreachable_ceiling_falls_back_to_min_quality(self, noisy_image):
        encoder = SizeConstrainedEncoder()
        result = encoder.encode(noisy_image, "JPEG", size_ceiling=1)

        assert result.quality == pytest.approx(0.01)
        assert result.size > 1
        assert read_pixels(result.data).size == noisy_image.size

    def test_search_keeps_highest_fitting_candidate(self):
        encoder = RecordingEncoder()
        result = encoder.encode(Image.new("RGB", (8, 8)), "JPEG", size_ceiling=500)

        # 1 次最高质量尝试 + 10 次二分
        assert len(encoder.calls) == 11
        fitting = [q for q in encoder.calls if int(q * 1000) <= 500]
        assert result.quality == max(fitting)
        assert 0.49 < result.quality < 0.502

    def test_search_failure_counts_as_too_large(self):
        encoder = RecordingEncoder(fail_between=(0.4, 0.6))
        result = encoder.encode(Image.new("RGB", (8, 8)), "JPEG", size_ceiling=500)

        assert result.quality is not None
        assert result.quality < 0.4
        assert result.size <= 500

    def test_max_quality_failure_raises(self):
        encoder = RecordingEncoder(fail_between=(0.0, 1.0))
        with pytest.raises(EncodeError):
            encoder.encode(Image.new("RGB", (8, 8)), "JPEG", size_ceiling=500)

    def test_min_quality_failure_raises(self):
        """最低质量回退编码失败时向上抛出"""
        encoder = RecordingEncoder(fail_between=(0.0, 0.02))
        with pytest.raises(EncodeError):
            encoder.encode(Image.new("RGB", (8, 8)), "JPEG", size_ceiling=10)

        assert encoder.calls[-1] == pytest.approx(0.01)

    def test_search_uses_fixed_subsampling(self):
        encoder = RecordingEncoder()
        encoder.encode(Image.new("RGB", (8, 8)), "JPEG", size_ceiling=500)

        assert encoder.subsamplings[0] is None
        assert set(encoder.subsamplings[1:]) == {2}

    def test_fixed_subsampling_param(self):
        processor = FormatProcessor()
        assert processor.get_save_parameters("JPEG", 0.95)["subsampling"] == 1
        assert processor.get_save_parameters("JPEG", 0.95, 2)["subsampling"] == 2

    def test_flattened_image_closed(self):
        processor = TrackingFormatProcessor()
        encoder = SizeConstrainedEncoder(format_processor=processor)

        encoder.encode(Image.new("RGBA", (16, 16)), "JPEG", size_ceiling=1)
        assert processor.closed == [True]

    def test_source_image_not_closed(self, noisy_image):
        processor = TrackingFormatProcessor()
        SizeConstrainedEncoder(format_processor=processor).encode(noisy_image, "JPEG")

        assert processor.closed == []
        assert noisy_image.getpixel((0, 0)) is not None

    def test_rgba_flattened_for_jpeg(self):
        img = Image.new("RGBA", (16, 16), color=(0, 0, 0, 0))
        result = SizeConstrainedEncoder().encode(img, "JPEG")

        decoded = read_pixels(result.data)
        assert decoded.mode == "RGB"
        assert decoded.getpixel((8, 8))[0] > 240
