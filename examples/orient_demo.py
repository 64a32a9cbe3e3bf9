#!/usr/bin/env python3
"""图片方向修正演示脚本。

展示 py_image_orient_mcp 库的核心功能，包括：
- 按 EXIF 方向自动修正
- 手动旋转与尺寸调整
- 输出大小上限
- 目录批量处理并打包
"""

from io import BytesIO
from pathlib import Path

from PIL import Image

from py_image_orient_mcp import ImageOrientationFixer
from py_image_orient_mcp.core.orientation import read_orientation


ORIENTATION_TAG = 0x0112


def make_sample(orientation: int, size: tuple[int, int] = (1200, 900)) -> bytes:
    """生成带方向标签的渐变 JPEG 素材"""
    width, height = size
    img = Image.linear_gradient("L").resize(size).convert("RGB")
    img.paste((220, 40, 40), (0, 0, width // 6, height // 6))

    exif = Image.Exif()
    exif[ORIENTATION_TAG] = orientation
    with BytesIO() as buffer:
        img.save(buffer, format="JPEG", quality=95, exif=exif.tobytes())
        return buffer.getvalue()


def get_output_dir(subdir: str = "") -> Path:
    """获取输出目录 - 使用项目的 tmp 目录"""
    project_root = Path(__file__).parent.parent
    output_dir = project_root / "tmp" / "examples"
    if subdir:
        output_dir = output_dir / subdir
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def demo_single_image(fixer: ImageOrientationFixer):
    """单张图片修正演示"""
    print("=== 单张图片修正 ===")

    data = make_sample(6)
    print(f"📐 读取到方向码: {int(read_orientation(data, source_name='sample.jpg'))}")

    result = fixer.fix_bytes(data, "sample.jpg")
    print(f"自动修正: {result.get_summary()}")

    result = fixer.fix_bytes(
        data, "sample.jpg", rotation=90, resize_mode="width", target_width=400
    )
    print(f"额外旋转 90° 并固定宽度: {result.get_summary()}")

    result = fixer.fix_bytes(data, "sample.jpg", auto_fix=False, format="png")
    print(f"关闭自动修正并输出 PNG: {result.get_summary()}")


def demo_size_ceiling(fixer: ImageOrientationFixer):
    """输出大小上限演示"""
    print("\n=== 输出大小上限 ===")

    data = make_sample(3)
    for max_size_kb in (200, 40, 0.5):
        result = fixer.fix_bytes(data, "sample.jpg", max_size_kb=max_size_kb)
        status = "✅" if result.ceiling_met else "⚠️"
        print(f"{status} 上限 {max_size_kb} KB: {result.get_summary()}")


def demo_batch(fixer: ImageOrientationFixer):
    """目录批量处理演示"""
    print("\n=== 目录批量处理 ===")

    input_dir = get_output_dir("batch_input")
    for code in (1, 3, 6, 8):
        (input_dir / f"orientation_{code}.jpg").write_bytes(make_sample(code))

    delivery = fixer.fix_universal(
        input_dir,
        output=get_output_dir("batch_output"),
        resize_mode="both-fit",
        target_width=600,
        target_height=600,
    )
    print(f"批量处理: {delivery['result'].get_summary()}")
    if delivery["success"]:
        print(f"📦 输出: {delivery['output_path']}")
    else:
        print(f"❌ 失败: {delivery['error']}")


def main():
    """主函数"""
    print("🖼️  图片方向修正演示")
    print("=" * 50)

    fixer = ImageOrientationFixer(max_workers=2)
    demo_single_image(fixer)
    demo_size_ceiling(fixer)
    demo_batch(fixer)

    print("\n✅ 所有演示完成！")


if __name__ == "__main__":
    main()
