import random
from typing import Awaitable, Callable, Optional

import bittensor as bt

from imageaugmentor.exceptions import InvalidConfiguration
from imageaugmentor.schemas import ConfigInput
from imageaugmentor.services.augmentation import AugmentationService

Augmentor = Callable[[bytes], Awaitable[bytes]]


def create_augmentor(config: ConfigInput = None, *, rng: Optional[random.Random] = None) -> Augmentor:
    """
    Builds an awaitable augmentation function from a configuration.

    The configuration is validated here, but a rejected configuration is reported
    through the returned function: every awaited call fails with InvalidConfiguration,
    the same way image and transform errors surface.

    Args:
        config: TransformationConfig, a mapping of its fields (snake_case or camelCase) or None
        rng: Optional random source. Inject a seeded random.Random to make results repeatable in tests.

    Returns:
        Coroutine function taking encoded image bytes and returning the augmented image bytes
    """
    try:
        service = AugmentationService(config, rng=rng)
    except InvalidConfiguration as e:
        bt.logging.error(f"Rejected augmentor configuration: {e.message}")
        error = e

        async def reject(image_bytes: bytes) -> bytes:
            raise InvalidConfiguration(error.message, details=error.details) from error

        return reject

    bt.logging.debug(f"Created augmentor with configuration: {service.config.model_dump()}")

    async def augment(image_bytes: bytes) -> bytes:
        return await service.augment(image_bytes)

    return augment
