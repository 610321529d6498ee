"""
Preview image rendering.

A small still of the first scene, letterboxed onto a black canvas with a caption
band. Falls back to a text-only card when the image is missing or unreadable.
"""

from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from shared.logging import get_logger

logger = get_logger("packager")

PREVIEW_FILENAME = "preview.jpg"
CAPTION_BAND_HEIGHT = 30
CAPTION_TEXT = "Preview - Download for full story"
FALLBACK_TITLE = "Story Preview"
FALLBACK_SUBTITLE = "Download to view full presentation"
JPEG_QUALITY = 90

FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
    "DejaVuSans-Bold.ttf",
)


def _load_font(size: int):
    for candidate in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default()


def _draw_centered(draw: ImageDraw.ImageDraw, text: str, center: Tuple[int, int], font, fill) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = center[0] - (right - left) / 2 - left
    y = center[1] - (bottom - top) / 2 - top
    draw.text((x, y), text, font=font, fill=fill)


def fit_within(source: Tuple[int, int], bounds: Tuple[int, int]) -> Tuple[int, int, int, int]:
    """
    Largest aspect-preserving size of `source` inside `bounds`, centred.

    Returns:
        (x, y, width, height) of the placed image
    """
    src_w, src_h = source
    width, height = bounds
    if src_w / src_h > width / height:
        draw_w, draw_h = width, max(1, round(width * src_h / src_w))
    else:
        draw_w, draw_h = max(1, round(height * src_w / src_h)), height
    return (width - draw_w) // 2, (height - draw_h) // 2, draw_w, draw_h


def render_scene_preview(image_path: Path, output_path: Path, size: Tuple[int, int]) -> None:
    """Letterboxed still with the caption band. Raises on unreadable input."""
    width, height = size
    canvas = Image.new("RGB", size, "black")

    with Image.open(image_path) as source:
        source = source.convert("RGB")
        x, y, draw_w, draw_h = fit_within(source.size, size)
        canvas.paste(source.resize((draw_w, draw_h), Image.LANCZOS), (x, y))

    band = Image.new("RGBA", (width, CAPTION_BAND_HEIGHT), (0, 0, 0, 178))
    canvas.paste(band, (0, height - CAPTION_BAND_HEIGHT), band)

    draw = ImageDraw.Draw(canvas)
    _draw_centered(draw, CAPTION_TEXT, (width // 2, height - CAPTION_BAND_HEIGHT // 2), _load_font(16), "white")
    canvas.save(output_path, "JPEG", quality=JPEG_QUALITY)


def render_placeholder(output_path: Path, size: Tuple[int, int]) -> None:
    width, height = size
    canvas = Image.new("RGB", size, "black")
    draw = ImageDraw.Draw(canvas)
    _draw_centered(draw, FALLBACK_TITLE, (width // 2, height // 2 - 20), _load_font(20), "white")
    _draw_centered(draw, FALLBACK_SUBTITLE, (width // 2, height // 2 + 20), _load_font(14), "white")
    canvas.save(output_path, "JPEG", quality=JPEG_QUALITY)


def create_preview(image_path: Optional[Path], output_dir: Path, size: Tuple[int, int] = (320, 180)) -> Optional[Path]:
    """
    Write `preview.jpg` into `output_dir`.

    Never raises: a missing or broken source image yields the placeholder card,
    and if even that cannot be written the error is logged and None returned.

    Args:
        image_path: First scene's image, if any
        output_dir: Workspace directory
        size: Canvas (width, height)

    Returns:
        Path of the preview, or None
    """
    output_path = output_dir / PREVIEW_FILENAME

    if image_path is not None and image_path.exists():
        try:
            render_scene_preview(image_path, output_path, size)
            return output_path
        except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
            logger.warning(f"Preview from {image_path.name} failed, using placeholder: {e}")
    else:
        logger.info("No first-scene image, using placeholder preview")

    try:
        render_placeholder(output_path, size)
        return output_path
    except (OSError, ValueError) as e:
        logger.error(f"Placeholder preview failed: {e}", exc_info=True)
        return None
