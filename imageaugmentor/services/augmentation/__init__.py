"""
Randomized image augmentation pipeline.

Pads the source into a working canvas, applies the enabled photometric and
geometric effects and extracts an image of the original size.
"""

from .augmentation_service import AugmentationService
from .sampler import ParameterSampler

__all__ = ["AugmentationService", "ParameterSampler"]
