"""请求构建、批量处理与交付测试。"""

import zipfile
from io import BytesIO

import pytest
from PIL import Image

from py_image_orient_mcp import ImageOrientationFixer
from py_image_orient_mcp.engine import BatchProcessor, BatchSource, RequestBuilder
from py_image_orient_mcp.exceptions import (
    InvalidResizeTargetError,
    UnsupportedFormatError,
    ValidationError,
)
from py_image_orient_mcp.models import Orientation, OutputFormat, ResizeMode
from py_image_orient_mcp.utils import (
    FileNamingStrategy,
    deduplicate_names,
    package_outputs,
)
from tests.conftest import encode_image, make_jpeg_with_orientation, read_pixels


class TestRequestBuilder:
    """请求构建器测试"""

    @pytest.fixture
    def builder(self):
        return RequestBuilder()

    def test_reads_orientation_from_data(self, builder):
        request = builder.build(data=make_jpeg_with_orientation(8))
        assert request.orientation == Orientation.LEFT_BOTTOM

    def test_auto_fix_disabled_ignores_metadata(self, builder):
        request = builder.build(data=make_jpeg_with_orientation(8), auto_fix=False)
        assert request.orientation == Orientation.TOP_LEFT

    def test_invalid_explicit_orientation(self, builder):
        with pytest.raises(ValidationError):
            builder.build(orientation=12)

    @pytest.mark.parametrize(
        "kb,expected",
        [(1, 1024), (1.5, 1536), (0.0005, 1), (0, None), (-5, None), (None, None)],
    )
    def test_kilobyte_ceiling(self, builder, kb, expected):
        assert builder.build(max_size_kb=kb).size_ceiling_bytes == expected

    def test_byte_ceiling_takes_precedence(self, builder):
        request = builder.build(max_size_kb=10, max_size_bytes=500)
        assert request.size_ceiling_bytes == 500

    def test_rotation_normalized(self, builder):
        assert builder.build(rotation=-90).manual_rotation == 270
        assert builder.build(rotation=450).manual_rotation == 90

    def test_rotation_not_quarter_turn(self, builder):
        with pytest.raises(ValidationError):
            builder.build(rotation=45)

    def test_format_alias(self, builder):
        assert builder.build(format="JPG").output_format == OutputFormat.JPEG

    def test_unknown_format(self, builder):
        with pytest.raises(UnsupportedFormatError):
            builder.build(format="webp")

    def test_resize_mode_parsed(self, builder):
        request = builder.build(resize_mode="Both-Fit", target_width=10, target_height=5)
        assert request.resize_policy.mode == ResizeMode.FIT_BOX

    def test_unknown_resize_mode(self, builder):
        with pytest.raises(ValidationError):
            builder.build(resize_mode="stretch")

    def test_missing_target(self, builder):
        with pytest.raises(InvalidResizeTargetError):
            builder.build(resize_mode="height")


class TestNaming:
    @pytest.mark.parametrize(
        "name,fmt,expected",
        [
            ("photo.jpeg", "JPEG", "photo_fixed.jpg"),
            ("scan.png", "JPEG", "scan_fixed.jpg"),
            ("icon.png", "PNG", "icon_fixed.png"),
            ("holiday.heic", None, "holiday_fixed.heic"),
        ],
    )
    def test_output_name(self, name, fmt, expected):
        assert FileNamingStrategy.generate_output_name(name, fmt) == expected

    def test_deduplicate_names(self):
        names = ["a_fixed.jpg", "a_fixed.jpg", "b_fixed.png", "a_fixed.jpg"]
        assert deduplicate_names(names) == [
            "a_fixed.jpg",
            "a_fixed_1.jpg",
            "b_fixed.png",
            "a_fixed_2.jpg",
        ]


class TestPackaging:
    def test_nothing_to_package(self):
        assert package_outputs([]) is None

    def test_single_entry_delivered_as_is(self):
        assert package_outputs([("a.jpg", b"abc")]) == ("a.jpg", b"abc")

    def test_multiple_entries_zipped(self):
        name, data = package_outputs([("a.jpg", b"abc"), ("b.png", b"def")])

        assert name == "images_fixed.zip"
        with zipfile.ZipFile(BytesIO(data)) as archive:
            assert archive.namelist() == ["a.jpg", "b.png"]
            assert archive.read("b.png") == b"def"
            assert all(
                info.compress_type == zipfile.ZIP_STORED for info in archive.infolist()
            )


class TestBatchProcessor:
    """批量处理测试"""

    def test_order_and_independent_failure(self, image_dir):
        result = BatchProcessor().process_directory(image_dir)

        assert [i.source_name for i in result.items] == ["a.jpg", "b.png", "c.jpg"]
        assert [i.success for i in result.items] == [True, True, False]
        assert [i.output_name for i in result.items[:2]] == [
            "a_fixed.jpg",
            "b_fixed.png",
        ]
        assert result.items[2].error
        assert result.success
        assert result.input_dir == image_dir

    @pytest.mark.parametrize("workers", [1, 3])
    def test_concurrent_keeps_order(self, workers):
        sources = [
            BatchSource(
                name=f"img{i}.png",
                data=encode_image(Image.new("RGB", (10 + i, 10)), "PNG"),
            )
            for i in range(6)
        ]
        result = BatchProcessor(max_workers=workers).process_sources(sources)

        assert [i.index for i in result.items] == list(range(6))
        assert [i.result.final_width for i in result.items] == [10 + i for i in range(6)]

    def test_duplicate_names_made_unique(self, jpeg_bytes):
        sources = [
            BatchSource(name="same.jpg", data=jpeg_bytes),
            BatchSource(name="same.jpg", data=jpeg_bytes),
        ]
        result = BatchProcessor().process_sources(sources)

        assert [i.output_name for i in result.items] == [
            "same_fixed.jpg",
            "same_fixed_1.jpg",
        ]

    def test_options_shared_by_all_items(self, image_dir):
        result = BatchProcessor().process_directory(
            image_dir, resize_mode="width", target_width=12
        )
        widths = [i.result.final_width for i in result.get_successful_items()]
        assert widths == [12, 12]

    def test_invalid_options_fail_each_item(self, image_dir):
        result = BatchProcessor().process_directory(image_dir, resize_mode="width")

        assert not result.success
        assert result.get_failure_count() == 3

    def test_missing_directory(self, tmp_path):
        result = BatchProcessor().process_directory(tmp_path / "missing")
        assert result.error
        assert not result.success

    def test_empty_directory(self, tmp_path):
        result = BatchProcessor().process_directory(tmp_path)
        assert result.error == "未找到图像文件"

    def test_to_dict_omits_image_data(self, image_dir):
        summary = BatchProcessor().process_directory(image_dir).to_dict()

        assert summary["total_files"] == 3
        assert summary["successful_files"] == 2
        assert "encoded_bytes" not in str(summary)


class TestImageOrientationFixer:
    """修正器交付测试"""

    def test_invalid_worker_count(self):
        with pytest.raises(ValidationError):
            ImageOrientationFixer(max_workers=0)

    def test_fix_file_writes_fixed_name(self, tmp_path):
        source = tmp_path / "portrait.jpg"
        source.write_bytes(make_jpeg_with_orientation(6, (40, 30)))

        output_path, result = ImageOrientationFixer().fix_file(source)

        assert output_path == tmp_path / "portrait_fixed.jpg"
        assert read_pixels(output_path.read_bytes()).size == result.final_dimensions

    def test_universal_single_file(self, tmp_path, png_bytes):
        source = tmp_path / "logo.png"
        source.write_bytes(png_bytes)
        out_dir = tmp_path / "out"

        delivery = ImageOrientationFixer().fix_universal(source, output=out_dir)

        assert delivery["success"]
        assert delivery["output_path"] == out_dir / "logo_fixed.png"
        assert delivery["output_path"].exists()

    def test_universal_directory_writes_zip(self, image_dir, tmp_path):
        out_dir = tmp_path / "delivery"
        delivery = ImageOrientationFixer(max_workers=2).fix_universal(
            image_dir, output=out_dir
        )

        assert delivery["success"]
        assert delivery["output_path"] == out_dir / "images_fixed.zip"
        with zipfile.ZipFile(delivery["output_path"]) as archive:
            assert archive.namelist() == ["a_fixed.jpg", "b_fixed.png"]

    def test_universal_missing_path(self, tmp_path):
        delivery = ImageOrientationFixer().fix_universal(tmp_path / "nope.jpg")

        assert not delivery["success"]
        assert delivery["output_path"] is None
        assert delivery["error"]


class TestMCPServer:
    def test_server_importable(self):
        from py_image_orient_mcp import mcp_server

        assert mcp_server.mcp is not None
        assert mcp_server.fixer is not None

    def test_tools_registered(self):
        from py_image_orient_mcp.mcp_server import (
            fix_image_orientation,
            get_image_orientation,
        )

        assert fix_image_orientation.name == "fix_image_orientation"
        assert get_image_orientation.name == "get_image_orientation"

    def test_fix_directory_writes_zip(self, image_dir, tmp_path):
        from py_image_orient_mcp.mcp_server import fix_image_orientation

        out_dir = tmp_path / "mcp_out"
        response = fix_image_orientation.fn(
            str(image_dir), output_path=str(out_dir), rotation=90
        )

        assert response["success"]
        assert response["output_path"] == str(out_dir / "images_fixed.zip")
        assert response["result"]["successful_files"] == 2
        assert response["result"]["failed_files"] == 1
        with zipfile.ZipFile(response["output_path"]) as archive:
            assert archive.namelist() == ["a_fixed.jpg", "b_fixed.png"]

    def test_fix_missing_target_is_validation_error(self, image_dir):
        from py_image_orient_mcp.mcp_server import fix_image_orientation

        response = fix_image_orientation.fn(str(image_dir), resize_mode="width")

        assert not response["success"]
        assert response["error_type"] == "validation"
        assert not (image_dir / "images_fixed.zip").exists()

    def test_fix_missing_input(self, tmp_path):
        from py_image_orient_mcp.mcp_server import fix_image_orientation

        response = fix_image_orientation.fn(str(tmp_path / "nope.jpg"))
        assert response["error_type"] == "file"

    def test_get_orientation(self, image_dir):
        from py_image_orient_mcp.mcp_server import get_image_orientation

        response = get_image_orientation.fn(str(image_dir / "a.jpg"))

        assert response["success"]
        assert response["orientation"] == 6
        assert response["rotation"] == 90
        assert response["is_mirrored"] is False

    def test_response_builder(self):
        from py_image_orient_mcp.mcp_server import MCPResponseBuilder

        response = MCPResponseBuilder.validation_error("bad", "rotation")
        assert response == {
            "success": False,
            "error": "bad",
            "error_type": "validation",
            "details": {"field": "rotation"},
        }
