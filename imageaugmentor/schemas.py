from typing import Any, Mapping, Optional, Tuple, Union

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from imageaugmentor import settings
from imageaugmentor.exceptions import InvalidConfiguration

# Fill value accepted by PIL.Image.new / rotate / transform
FillColor = Union[Tuple[int, int, int], Tuple[int, int, int, int]]


class BackgroundColor(BaseModel):
    """Color used for every pixel exposed by a geometric transform"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    r: int = Field(255, ge=0, le=255)
    g: int = Field(255, ge=0, le=255)
    b: int = Field(255, ge=0, le=255)
    alpha: float = Field(1.0, ge=0.0, le=1.0)

    @model_validator(mode="before")
    @classmethod
    def _from_sequence(cls, value: Any) -> Any:
        """Accept (r, g, b) and (r, g, b, a) sequences besides mappings."""
        if isinstance(value, (tuple, list)):
            if len(value) not in (3, 4):
                raise ValueError(f"Background color needs 3 or 4 channels, got {len(value)}")
            data = {"r": value[0], "g": value[1], "b": value[2]}
            if len(value) == 4:
                alpha = value[3]
                # 0-255 alpha is read as an 8-bit channel
                data["alpha"] = alpha / 255 if alpha > 1 else alpha
            return data
        return value

    def as_fill(self, mode: str) -> FillColor:
        """
        Returns the Pillow fill value for an image mode.

        Args:
            mode: "RGB" or "RGBA"

        Returns:
            Tuple of channel values matching the mode
        """
        if mode == "RGBA":
            return (self.r, self.g, self.b, round(self.alpha * 255))
        return (self.r, self.g, self.b)


class TransformationConfig(BaseModel):
    """
    Ranges bounding the random parameters of each effect.

    A range of 0 (or None) disables the effect entirely.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid", allow_inf_nan=False)

    shear_range: float = Field(0.0, ge=0.0, alias="shearRange")
    rotation_range: float = Field(0.0, ge=0.0, alias="rotationRange")
    blur_range: float = Field(0.0, ge=0.0, alias="blurRange")
    zoom_range: float = Field(0.0, ge=0.0, alias="zoomRange")
    sharpen_range: float = Field(0.0, ge=0.0, alias="sharpenRange")
    brightness_range: float = Field(0.0, ge=0.0, alias="brightnessRange")
    saturation_range: float = Field(0.0, ge=0.0, alias="saturationRange")
    contrast_range: float = Field(0.0, ge=0.0, alias="contrastRange")
    transpose_range: float = Field(0.0, ge=0.0, alias="transposeRange")
    background_color: BackgroundColor = Field(default_factory=BackgroundColor, alias="backgroundColor")

    output_format: Optional[str] = Field(None, alias="outputFormat")
    flatten: bool = False

    @field_validator(
        "shear_range",
        "rotation_range",
        "blur_range",
        "zoom_range",
        "sharpen_range",
        "brightness_range",
        "saturation_range",
        "contrast_range",
        "transpose_range",
        mode="before",
    )
    @classmethod
    def _none_disables(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("output_format")
    @classmethod
    def _known_format(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        Image.init()
        value = value.upper()
        if value not in Image.SAVE:
            raise ValueError(f"Pillow cannot encode format {value!r}")
        return value

    def resolve_output_format(self, source_format: Optional[str]) -> str:
        """Configured format, else the source image's format, else the process default."""
        if self.output_format:
            return self.output_format
        Image.init()
        if source_format and source_format.upper() in Image.SAVE:
            return source_format.upper()
        return settings.DEFAULT_OUTPUT_FORMAT


class ImageMetadata(BaseModel):
    """Metadata for the decoded source image"""

    width: int
    height: int
    format: Optional[str] = None
    mode: str


ConfigInput = Union[TransformationConfig, Mapping[str, Any], None]


def load_config(config: ConfigInput = None) -> TransformationConfig:
    """
    Validates a transformation configuration.

    Args:
        config: TransformationConfig, a mapping of its fields or None for the defaults

    Returns:
        TransformationConfig

    Raises:
        InvalidConfiguration: If a range is negative, the background color is malformed,
                              a value is infinite or NaN, the output format is unknown or a field
                              is not recognised
    """
    if isinstance(config, TransformationConfig):
        return config
    try:
        return TransformationConfig.model_validate(dict(config or {}))
    except (ValidationError, TypeError) as e:
        raise InvalidConfiguration(f"Invalid transformation configuration: {e}", details={"config": config}) from e
