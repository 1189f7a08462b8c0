"""
Photometric stage: blur, sharpen, brightness, saturation and contrast.

These operate per pixel (or per neighbourhood) and never change the image size.
The modulations keep the alpha channel as is. Blur and sharpen filter RGBA
images in premultiplied form so transparent pixels do not bleed color.
"""

from typing import Optional, Tuple

from PIL import Image, ImageEnhance, ImageFilter, ImageStat

# Unsharp mask strength and threshold used for every sharpen call
SHARPEN_PERCENT = 150
SHARPEN_THRESHOLD = 0


def _filter(image: Image.Image, image_filter: ImageFilter.Filter) -> Image.Image:
    if image.mode == "RGBA":
        return image.convert("RGBa").filter(image_filter).convert("RGBA")
    return image.filter(image_filter)


def blur(image: Image.Image, sigma: float) -> Image.Image:
    """Gaussian blur with the given standard deviation."""
    return _filter(image, ImageFilter.GaussianBlur(radius=sigma))


def sharpen(image: Image.Image, sigma: float) -> Image.Image:
    """Unsharp mask using a Gaussian of the given sigma."""
    return _filter(
        image, ImageFilter.UnsharpMask(radius=sigma, percent=SHARPEN_PERCENT, threshold=SHARPEN_THRESHOLD)
    )


def modulation_factor(delta: float) -> float:
    """Multiplier 1 + delta, floored at 0."""
    return max(0.0, 1.0 + delta)


def adjust_brightness(image: Image.Image, delta: float) -> Image.Image:
    return ImageEnhance.Brightness(image).enhance(modulation_factor(delta))


def adjust_saturation(image: Image.Image, delta: float) -> Image.Image:
    return ImageEnhance.Color(image).enhance(modulation_factor(delta))


def adjust_contrast(
    image: Image.Image, delta: float, region: Optional[Tuple[int, int, int, int]] = None
) -> Image.Image:
    """
    Scales the distance of every pixel from the mean gray level by 1 + delta.

    Args:
        image: RGB or RGBA image
        delta: Sampled contrast delta
        region: Box the mean gray level is measured over, the source region when
                working on the padded canvas. Defaults to the whole image.

    Returns:
        Adjusted image with the alpha channel unchanged
    """
    gray = image.convert("L")
    if region is not None:
        gray = gray.crop(region)
    mean = int(ImageStat.Stat(gray).mean[0] + 0.5)

    degenerate = Image.new("L", image.size, mean).convert(image.mode)
    if image.mode == "RGBA":
        degenerate.putalpha(image.getchannel("A"))
    return Image.blend(degenerate, image, modulation_factor(delta))
