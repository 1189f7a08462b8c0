import asyncio
import random
from typing import Any, Callable, Dict, Optional, Tuple, Union

import bittensor as bt
from PIL import Image

from imageaugmentor.exceptions import AugmentationError, InvalidImage, TransformFailure
from imageaugmentor.schemas import ConfigInput, TransformationConfig, load_config
from imageaugmentor.services.augmentation import geometric, photometric
from imageaugmentor.services.augmentation.canvas import canvas_padding, expand_canvas, extract_center
from imageaugmentor.services.augmentation.sampler import ParameterSampler
from imageaugmentor.utils import bytes_to_image, describe, flatten, image_to_bytes, normalize_mode


class AugmentationService:
    """
    Service for applying randomized geometric and photometric transformations to an image.

    The configuration is captured once; parameters are sampled afresh on every call.
    The output always has the dimensions of the input.
    """

    def __init__(self, config: ConfigInput = None, rng: Optional[random.Random] = None):
        """
        Initialize the augmentation service.

        Args:
            config: TransformationConfig, a mapping of its fields (snake_case or camelCase) or None
                    for an all-disabled configuration
            rng: Random source shared by every call. When omitted each call draws from a
                 fresh generator.

        Raises:
            InvalidConfiguration: If the configuration does not validate
        """
        self.config: TransformationConfig = load_config(config)
        self.rng = rng

    def apply_transforms(
        self,
        image: Union[Image.Image, bytes, str],
        output_bytes: bool = False,
        format: Optional[str] = None,
    ) -> Union[Tuple[Image.Image, Dict[str, Any]], Tuple[bytes, Dict[str, Any]]]:
        """
        Applies the configured random transformations to an image.

        Args:
            image: Input image (PIL Image, encoded bytes, or path to image file)
            output_bytes: Whether to return bytes (True) or PIL Image (False)
            format: Image format when returning bytes. Defaults to the configured
                    output format, then the source format.

        Returns:
            If output_bytes is False and the input is not bytes:
                Tuple (transformed PIL Image, sampled parameters)
            Otherwise:
                Tuple (transformed image bytes, sampled parameters)

        Raises:
            InvalidImage: If the input cannot be decoded or is empty
            TransformFailure: If a transformation stage or the encoder fails
        """
        is_bytes = isinstance(image, bytes)
        is_path = isinstance(image, str)

        # Convert input to PIL Image
        if is_path:
            try:
                pil_image = Image.open(image)
                pil_image.load()
            except (OSError, ValueError) as e:
                bt.logging.error(f"Failed to open image file: {e}")
                raise InvalidImage(f"Could not open image file: {image}", details={"path": image}) from e
        elif is_bytes:
            pil_image = bytes_to_image(image)
        else:
            pil_image = image

        if not isinstance(pil_image, Image.Image):
            bt.logging.error(f"Expected PIL Image but got {type(pil_image)}")
            raise TypeError(f"Expected PIL Image but got {type(pil_image)}")

        if pil_image.width == 0 or pil_image.height == 0:
            raise InvalidImage(
                "Image has a zero dimension", details={"width": pil_image.width, "height": pil_image.height}
            )

        metadata = describe(pil_image)
        sampler = ParameterSampler(self.rng)
        transform_params: Dict[str, Any] = {"source": metadata.model_dump()}

        bt.logging.info(
            f"Augmenting {metadata.width}x{metadata.height} {metadata.format or 'raster'} image ({metadata.mode})"
        )

        img = normalize_mode(pil_image)
        if self.config.flatten:
            img = flatten(img, self.config.background_color)
        transform_params["flattened"] = self.config.flatten

        original_size = img.size
        canvas = expand_canvas(img, self.config.background_color)
        transform_params["canvas_size"] = canvas.size

        canvas = self._apply_photometric(canvas, sampler, original_size, transform_params)
        canvas = self._apply_geometric(canvas, sampler, original_size, transform_params)

        result = self._run_stage("extract", extract_center, canvas, original_size)

        if output_bytes or is_bytes:
            output_format = format.upper() if format else self.config.resolve_output_format(metadata.format)
            transform_params["output_format"] = output_format
            bt.logging.debug(f"Encoding augmented image as {output_format}")
            output = image_to_bytes(result, format=output_format, background=self.config.background_color)
            return output, transform_params

        return result, transform_params

    def augment_bytes(self, image_bytes: bytes) -> bytes:
        """Runs the pipeline on encoded bytes and returns encoded bytes."""
        result, _ = self.apply_transforms(image_bytes, output_bytes=True)
        return result

    async def augment(self, image_bytes: bytes) -> bytes:
        """
        Awaitable variant of augment_bytes.

        The pipeline runs in a worker thread so the event loop is free while Pillow works.
        """
        return await asyncio.to_thread(self.augment_bytes, image_bytes)

    def _apply_photometric(
        self,
        canvas: Image.Image,
        sampler: ParameterSampler,
        original_size: Tuple[int, int],
        transform_params: Dict[str, Any],
    ) -> Image.Image:
        """
        Apply the enabled blur, sharpen, brightness, saturation and contrast effects.

        Args:
            canvas: Working canvas
            sampler: Parameter source for this call
            original_size: Size of the source image, whose region on the canvas sets the contrast mean
            transform_params: Dictionary the sampled values are recorded in

        Returns:
            Canvas of unchanged size
        """
        config = self.config

        if config.blur_range:
            sigma = sampler.sample_blur_sigma(config.blur_range)
            transform_params["blur_sigma"] = sigma
            canvas = self._run_stage("blur", photometric.blur, canvas, sigma)

        if config.sharpen_range:
            sigma = sampler.sample_sharpen_sigma(config.sharpen_range)
            transform_params["sharpen_sigma"] = sigma
            canvas = self._run_stage("sharpen", photometric.sharpen, canvas, sigma)

        if config.brightness_range:
            delta = sampler.sample(config.brightness_range)
            transform_params["brightness"] = delta
            canvas = self._run_stage("brightness", photometric.adjust_brightness, canvas, delta)

        if config.saturation_range:
            delta = sampler.sample(config.saturation_range)
            transform_params["saturation"] = delta
            canvas = self._run_stage("saturation", photometric.adjust_saturation, canvas, delta)

        if config.contrast_range:
            delta = sampler.sample(config.contrast_range)
            transform_params["contrast"] = delta
            padding = canvas_padding(original_size)
            source_region = (padding, padding, padding + original_size[0], padding + original_size[1])
            canvas = self._run_stage("contrast", photometric.adjust_contrast, canvas, delta, source_region)

        return canvas

    def _apply_geometric(
        self,
        canvas: Image.Image,
        sampler: ParameterSampler,
        original_size: Tuple[int, int],
        transform_params: Dict[str, Any],
    ) -> Image.Image:
        """
        Apply shear, rotation, transpose and zoom, in that order.

        Each enabled stage leaves the canvas at its working size.

        Args:
            canvas: Working canvas
            sampler: Parameter source for this call
            original_size: Size of the source image, the floor for zooming out
            transform_params: Dictionary the sampled values are recorded in

        Returns:
            Canvas of unchanged size
        """
        config = self.config
        background = config.background_color

        if config.shear_range:
            shear_x = sampler.sample(config.shear_range)
            shear_y = sampler.sample(config.shear_range)
            transform_params["shear_x"] = shear_x
            transform_params["shear_y"] = shear_y
            canvas = self._run_stage("shear", geometric.shear, canvas, shear_x, shear_y, background)

        if config.rotation_range:
            angle = sampler.sample(config.rotation_range)
            transform_params["rotation_angle"] = angle
            canvas = self._run_stage("rotate", geometric.rotate, canvas, angle, background)

        if config.transpose_range:
            offset_x, offset_y = sampler.sample_transpose(config.transpose_range, canvas.size)
            transform_params["transpose_x"] = offset_x
            transform_params["transpose_y"] = offset_y
            canvas = self._run_stage("transpose", geometric.transpose, canvas, offset_x, offset_y, background)

        if config.zoom_range:
            factor, scale = sampler.sample_zoom(config.zoom_range)
            transform_params["zoom_factor"] = factor
            transform_params["zoom_scale"] = scale
            canvas = self._run_stage("zoom", geometric.zoom, canvas, factor, scale, background, original_size)

        return canvas

    def _run_stage(
        self, name: str, stage: Callable[..., Image.Image], image: Image.Image, *args: Any
    ) -> Image.Image:
        """
        Runs one stage, converting Pillow errors into TransformFailure.

        Raises:
            TransformFailure: If the stage fails
        """
        bt.logging.debug(f"Applying {name} with parameters {args}")
        try:
            return stage(image, *args)
        except AugmentationError:
            raise
        except Exception as e:
            bt.logging.error(f"Error applying {name} transform: {e!s}")
            raise TransformFailure(f"{name} transform failed: {e!s}", details={"stage": name}) from e
