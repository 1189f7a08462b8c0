from io import BytesIO
from typing import Optional

import bittensor as bt
from PIL import Image, UnidentifiedImageError

from imageaugmentor import settings
from imageaugmentor.exceptions import InvalidImage, TransformFailure
from imageaugmentor.schemas import BackgroundColor, ImageMetadata

# Encoders that cannot store an alpha channel
ALPHA_LESS_FORMATS = {"JPEG", "MPO", "PPM", "PCX", "EPS"}


def get_resample() -> Image.Resampling:
    """Resampling filter shared by every resize, rotate and affine step."""
    try:
        return Image.Resampling[settings.RESAMPLE_FILTER]
    except KeyError:
        bt.logging.warning(f"Unknown resample filter {settings.RESAMPLE_FILTER!r}, using BICUBIC")
        return Image.Resampling.BICUBIC


def get_transform_resample() -> Image.Resampling:
    """Resampling filter for rotate and affine, which only support the first-order filters."""
    resample = get_resample()
    if resample not in (Image.Resampling.NEAREST, Image.Resampling.BILINEAR, Image.Resampling.BICUBIC):
        return Image.Resampling.BICUBIC
    return resample


def bytes_to_image(image_bytes: bytes) -> Image.Image:
    """
    Converts bytes to a fully decoded PIL Image object

    Args:
        image_bytes: Byte representation of an image

    Returns:
        Image.Image: PIL Image object

    Raises:
        InvalidImage: If the bytes cannot be decoded or the image is empty
    """
    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        bt.logging.error(f"Failed to decode image bytes: {e}")
        raise InvalidImage(f"Could not decode image: {e}", details={"size": len(image_bytes)}) from e

    if image.width == 0 or image.height == 0:
        raise InvalidImage("Image has a zero dimension", details={"width": image.width, "height": image.height})

    return image


def image_to_bytes(image: Image.Image, format: str = "PNG", background: Optional[BackgroundColor] = None) -> bytes:
    """
    Converts PIL Image object to bytes

    Args:
        image: PIL Image object
        format: Image format (PNG, JPEG, etc.)
        background: Color to flatten onto when the format has no alpha channel

    Returns:
        bytes: Byte representation of the image
    """
    format = format.upper()
    if format in ALPHA_LESS_FORMATS and image.mode == "RGBA":
        image = flatten(image, background or BackgroundColor())

    buffer = BytesIO()
    try:
        image.save(buffer, format=format)
    except (OSError, ValueError, KeyError) as e:
        bt.logging.error(f"Failed to encode image as {format}: {e}")
        raise TransformFailure(f"Could not encode image as {format}: {e}", details={"format": format}) from e
    return buffer.getvalue()


def describe(image: Image.Image) -> ImageMetadata:
    """Metadata of a decoded image."""
    return ImageMetadata(width=image.width, height=image.height, format=image.format, mode=image.mode)


def has_alpha(image: Image.Image) -> bool:
    return "A" in image.getbands() or "transparency" in image.info


def normalize_mode(image: Image.Image) -> Image.Image:
    """
    Converts an image to the working mode of the pipeline.

    Images carrying transparency become RGBA, everything else RGB.
    """
    mode = "RGBA" if has_alpha(image) else "RGB"
    if image.mode == mode:
        return image.copy()
    return image.convert(mode)


def flatten(image: Image.Image, background: BackgroundColor) -> Image.Image:
    """
    Composites an image over an opaque background and drops its alpha channel.

    Args:
        image: RGB or RGBA image
        background: Color shown through transparent pixels

    Returns:
        RGB image
    """
    if image.mode != "RGBA":
        return image.convert("RGB")
    base = Image.new("RGBA", image.size, (background.r, background.g, background.b, 255))
    return Image.alpha_composite(base, image).convert("RGB")
