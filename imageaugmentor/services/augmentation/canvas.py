"""
Working canvas bookkeeping.

Geometric transforms run on a canvas padded by max(width, height) on every side,
so rotation, shear and translation never push source pixels off the raster. The
final extractor cuts the original-sized center back out.
"""

from typing import Tuple

from PIL import Image, ImageOps

from imageaugmentor.schemas import BackgroundColor
from imageaugmentor.utils import get_resample


def canvas_padding(size: Tuple[int, int]) -> int:
    """Padding added on each side of the source image."""
    return max(size)


def expand_canvas(image: Image.Image, background: BackgroundColor) -> Image.Image:
    """
    Composites the source image at the center of a background-filled working canvas.

    Args:
        image: RGB or RGBA source image
        background: Fill color for every pixel not covered by the source

    Returns:
        Canvas of size (w + 2p, h + 2p) with the source at offset (p, p), p = max(w, h)
    """
    width, height = image.size
    padding = canvas_padding(image.size)
    canvas = Image.new(image.mode, (width + 2 * padding, height + 2 * padding), background.as_fill(image.mode))
    # No mask: source pixels, alpha included, are copied as-is
    canvas.paste(image, (padding, padding))
    return canvas


def center_box(size: Tuple[int, int], target: Tuple[int, int]) -> Tuple[int, int, int, int]:
    """
    Box of the centered target-sized region inside an image of the given size.

    Returns:
        (left, top, right, bottom) with left and top clamped to 0
    """
    width, height = size
    target_width, target_height = target
    left = max(0, width // 2 - target_width // 2)
    top = max(0, height // 2 - target_height // 2)
    return left, top, left + target_width, top + target_height


def center_crop(image: Image.Image, target: Tuple[int, int]) -> Image.Image:
    if image.size == tuple(target):
        return image
    return image.crop(center_box(image.size, target))


def cover_fit(image: Image.Image, target: Tuple[int, int]) -> Image.Image:
    """
    Resizes an image to cover the target box, keeping its aspect ratio, then
    center-crops it to exactly the target size.
    """
    if image.size == tuple(target):
        return image
    return ImageOps.fit(image, target, method=get_resample(), centering=(0.5, 0.5))


def extract_center(canvas: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """
    Cuts the original-sized center region out of the working canvas.

    Args:
        canvas: Transformed working canvas
        size: Original (width, height)

    Returns:
        Image of exactly the original size, stretched if the region differs
    """
    region = canvas.crop(center_box(canvas.size, size))
    return region.resize(size, get_resample())
