import random
from typing import Optional, Tuple

# Blur sigma bounds. Below ~0.3 a Gaussian kernel has no visible effect.
MIN_BLUR_SIGMA = 0.3
MAX_BLUR_SIGMA = 1000.0
BLUR_SCALING_FACTOR = 10

MIN_SHARPEN_SIGMA = 0.000001
MAX_SHARPEN_SIGMA = 10.0
SHARPEN_SCALING_FACTOR = 999999


class ParameterSampler:
    """
    Draws concrete effect parameters from configured ranges.

    Every method is a pure function of its range and the random source. Callers
    are expected to skip disabled (zero) ranges instead of sampling them.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source. A fresh, OS-seeded generator is created when omitted.
        """
        self.rng = rng if rng is not None else random.Random()

    def sample(self, value_range: float) -> float:
        """Uniform value in [-range, +range]."""
        return self.rng.uniform(-value_range, value_range)

    def sample_blur_sigma(self, blur_range: float) -> float:
        """Gaussian blur sigma in [0.3, min(range * 10, 1000)]."""
        max_sigma = min(blur_range * BLUR_SCALING_FACTOR, MAX_BLUR_SIGMA)
        sigma = self.rng.uniform(MIN_BLUR_SIGMA, max_sigma)
        return max(MIN_BLUR_SIGMA, min(sigma, MAX_BLUR_SIGMA))

    def sample_sharpen_sigma(self, sharpen_range: float) -> float:
        """Sharpen sigma in [1e-6, min(range * 999999, 10)]."""
        max_sigma = min(sharpen_range * SHARPEN_SCALING_FACTOR, MAX_SHARPEN_SIGMA)
        sigma = self.rng.uniform(MIN_SHARPEN_SIGMA, max_sigma)
        return max(MIN_SHARPEN_SIGMA, min(sigma, MAX_SHARPEN_SIGMA))

    def sample_zoom(self, zoom_range: float) -> Tuple[float, float]:
        """
        Samples a zoom factor and the scale derived from it.

        Args:
            zoom_range: Maximum magnitude of the zoom factor

        Returns:
            Tuple (factor, scale). A non-negative factor zooms in by scale = 1 + factor,
            a negative one zooms out by 1 / scale with scale = 1 + |factor|. The scale
            is never below 1.
        """
        factor = self.sample(zoom_range)
        scale = 1.0 + abs(factor)
        return factor, scale

    def sample_transpose(self, transpose_range: float, canvas_size: Tuple[int, int]) -> Tuple[int, int]:
        """
        Samples an integer (dx, dy) offset.

        Each axis is drawn independently and capped to the canvas dimension of that axis.
        """
        canvas_width, canvas_height = canvas_size
        dx = round(self.sample(transpose_range))
        dy = round(self.sample(transpose_range))
        dx = max(-canvas_width, min(dx, canvas_width))
        dy = max(-canvas_height, min(dy, canvas_height))
        return dx, dy
