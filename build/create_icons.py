#!/usr/bin/env python3
"""Generate application icons (png, ico, icns) into assets/."""

import subprocess
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

BACKGROUND = (226, 64, 52)  # notebook red
PAGE = (255, 255, 255)
ACCENT = (124, 58, 237)  # vault purple

ICO_SIZES = [(16, 16), (32, 32), (48, 48), (64, 64), (128, 128), (256, 256)]
ICONSET = [
    (16, "icon_16x16.png"), (32, "icon_16x16@2x.png"),
    (32, "icon_32x32.png"), (64, "icon_32x32@2x.png"),
    (128, "icon_128x128.png"), (256, "icon_128x128@2x.png"),
    (256, "icon_256x256.png"), (512, "icon_256x256@2x.png"),
    (512, "icon_512x512.png"), (1024, "icon_512x512@2x.png"),
]


def load_font(size: int) -> ImageFont.ImageFont:
    for font_name in ['Arial Bold', 'Helvetica Bold', 'DejaVuSans-Bold']:
        try:
            return ImageFont.truetype(font_name, size)
        except OSError:
            continue
    return ImageFont.load_default()


def create_icon_image(size: int) -> Image.Image:
    """Draw a note page with a folded corner, a "Z" and an arrow into a purple "md"."""
    img = Image.new('RGBA', (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)

    padding = size // 16
    draw.rounded_rectangle(
        [padding, padding, size - padding, size - padding],
        radius=size // 5,
        fill=BACKGROUND
    )

    # Page with folded top-right corner
    left, top = size // 4, size // 5
    right, bottom = size - size // 4, size - size // 5
    fold = size // 8
    draw.polygon([
        (left, top), (right - fold, top), (right, top + fold),
        (right, bottom), (left, bottom)
    ], fill=PAGE)
    draw.polygon([(right - fold, top), (right - fold, top + fold), (right, top + fold)], fill=(220, 220, 220))

    font = load_font(size // 4)
    center_x = size // 2
    draw.text((center_x, top + (bottom - top) // 3), "Z", fill=BACKGROUND, font=font, anchor='mm')

    # Arrow down to the markdown label
    arrow_y = top + (bottom - top) // 2 + size // 32
    arrow_size = size // 14
    draw.polygon([
        (center_x - arrow_size, arrow_y),
        (center_x + arrow_size, arrow_y),
        (center_x, arrow_y + arrow_size)
    ], fill=ACCENT)

    label_font = load_font(size // 7)
    draw.text((center_x, bottom - size // 10), "md", fill=ACCENT, font=label_font, anchor='mm')

    return img


def create_ico(png_path: Path, ico_path: Path):
    """Create Windows .ico file."""
    img = Image.open(png_path)
    images = [img.resize(size, Image.Resampling.LANCZOS) for size in ICO_SIZES]
    images[0].save(ico_path, format='ICO', sizes=ICO_SIZES, append_images=images[1:])
    print(f"Created: {ico_path}")


def create_icns(png_path: Path, icns_path: Path):
    """Create macOS .icns file (needs iconutil, otherwise the iconset is left behind)."""
    iconset_dir = png_path.parent / "icon.iconset"
    iconset_dir.mkdir(exist_ok=True)
    img = Image.open(png_path)

    for size, filename in ICONSET:
        img.resize((size, size), Image.Resampling.LANCZOS).save(iconset_dir / filename, 'PNG')

    try:
        subprocess.run(['iconutil', '-c', 'icns', str(iconset_dir), '-o', str(icns_path)],
                       check=True, capture_output=True)
    except (subprocess.CalledProcessError, FileNotFoundError):
        print(f"Note: iconutil not available, iconset at: {iconset_dir}")
        return

    print(f"Created: {icns_path}")
    for f in iconset_dir.iterdir():
        f.unlink()
    iconset_dir.rmdir()


def main():
    assets_dir = Path(__file__).parent.parent / "assets"
    assets_dir.mkdir(exist_ok=True)

    print("Generating icons...")
    png_path = assets_dir / "icon.png"
    create_icon_image(1024).save(png_path, 'PNG')
    print(f"Created: {png_path}")

    create_ico(png_path, assets_dir / "icon.ico")
    create_icns(png_path, assets_dir / "icon.icns")
    print("Done!")


if __name__ == "__main__":
    main()
