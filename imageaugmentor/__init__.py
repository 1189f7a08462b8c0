from .exceptions import AugmentationError, InvalidConfiguration, InvalidImage, TransformFailure
from .factory import create_augmentor
from .schemas import BackgroundColor, TransformationConfig

__all__ = [
    "AugmentationError",
    "BackgroundColor",
    "InvalidConfiguration",
    "InvalidImage",
    "TransformFailure",
    "TransformationConfig",
    "create_augmentor",
]
