"""
Geometric stage: shear, rotation, transpose and zoom on the working canvas.

Every function takes a canvas-sized image and returns a new image of the same
size, so the stages compose in any subset without drifting the canvas size.
"""

import math
from typing import Tuple

import numpy as np
from PIL import Image

from imageaugmentor.exceptions import TransformFailure
from imageaugmentor.schemas import BackgroundColor
from imageaugmentor.services.augmentation.canvas import center_crop, cover_fit
from imageaugmentor.utils import get_resample, get_transform_resample

# Determinants closer to zero than this are treated as singular
SINGULAR_EPSILON = 1e-6


def shear(image: Image.Image, shear_x: float, shear_y: float, background: BackgroundColor) -> Image.Image:
    """
    Applies the affine matrix [[1, shear_x], [shear_y, 1]] and fits the result back to the canvas.

    The affine output covers the full bounding box of the transformed canvas, with
    exposed pixels set to the background color.

    Raises:
        TransformFailure: If the matrix is singular
    """
    size = image.size
    matrix = np.array([[1.0, shear_x], [shear_y, 1.0]])
    determinant = float(np.linalg.det(matrix))
    if abs(determinant) < SINGULAR_EPSILON:
        raise TransformFailure(
            "Shear matrix is not invertible", details={"shear_x": shear_x, "shear_y": shear_y}
        )

    width, height = size
    corners = np.array([[0, 0], [width, 0], [0, height], [width, height]], dtype=np.float64)
    mapped = corners @ matrix.T
    min_x, min_y = mapped.min(axis=0)
    max_x, max_y = mapped.max(axis=0)
    out_size = (max(1, math.ceil(max_x - min_x)), max(1, math.ceil(max_y - min_y)))

    # PIL maps output pixels back to input pixels, so it needs the inverse matrix
    # with the bounding-box offset folded into the translation terms.
    inverse = np.linalg.inv(matrix)
    offset = inverse @ np.array([min_x, min_y])
    data = (
        inverse[0, 0],
        inverse[0, 1],
        offset[0],
        inverse[1, 0],
        inverse[1, 1],
        offset[1],
    )
    sheared = image.transform(
        out_size,
        Image.Transform.AFFINE,
        data=tuple(float(value) for value in data),
        resample=get_transform_resample(),
        fillcolor=background.as_fill(image.mode),
    )
    return cover_fit(sheared, size)


def rotate(image: Image.Image, angle: float, background: BackgroundColor) -> Image.Image:
    """
    Rotates the canvas about its center and fits the grown bounding box back to the canvas.

    Args:
        image: Working canvas
        angle: Degrees, positive is clockwise
        background: Fill for the exposed corners
    """
    size = image.size
    rotated = image.rotate(
        -angle,
        resample=get_transform_resample(),
        expand=True,
        fillcolor=background.as_fill(image.mode),
    )
    return cover_fit(rotated, size)


def transpose(image: Image.Image, offset_x: int, offset_y: int, background: BackgroundColor) -> Image.Image:
    """
    Translates the canvas content by (-offset_x, -offset_y).

    A positive offset_x drops the left offset_x columns and extends the background on
    the right; a negative one extends on the left and drops from the right. The y
    axis behaves the same way, independently.
    """
    size = image.size
    width, height = size
    offset_x = max(-width, min(offset_x, width))
    offset_y = max(-height, min(offset_y, height))

    shifted = Image.new(image.mode, size, background.as_fill(image.mode))
    shifted.paste(image, (-offset_x, -offset_y))
    return center_crop(shifted, size)


def zoom(
    image: Image.Image,
    factor: float,
    scale: float,
    background: BackgroundColor,
    min_size: Tuple[int, int] = (1, 1),
) -> Image.Image:
    """
    Scales the whole canvas and renormalizes it to the canvas size.

    Args:
        image: Working canvas
        factor: Sampled zoom factor; non-negative zooms in, negative zooms out
        scale: Magnification (zoom-in) or reduction divisor (zoom-out), never below 1
        background: Fill for the border exposed by zooming out
        min_size: Smallest size the canvas may shrink to when zooming out. The shrink keeps
                  the canvas aspect ratio, so the first axis to reach its floor limits both.

    Returns:
        Zoomed canvas of the original canvas size
    """
    size = image.size
    width, height = size
    scale = max(1.0, scale)
    resample = get_resample()

    if factor >= 0:
        zoomed_size = (max(width, round(width * scale)), max(height, round(height * scale)))
        zoomed = image.resize(zoomed_size, resample)
        return center_crop(zoomed, size)

    # One divisor for both axes, lowered until neither side drops below its floor
    min_width, min_height = max(1, min_size[0]), max(1, min_size[1])
    scale = max(1.0, min(scale, width / min_width, height / min_height))
    shrunk_size = (
        min(width, max(1, round(width / scale))),
        min(height, max(1, round(height / scale))),
    )
    shrunk = image.resize(shrunk_size, resample)
    padded = Image.new(image.mode, size, background.as_fill(image.mode))
    padded.paste(shrunk, ((width - shrunk_size[0]) // 2, (height - shrunk_size[1]) // 2))
    return padded
