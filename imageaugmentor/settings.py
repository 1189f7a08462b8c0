import ast
from contextlib import suppress
from os import getenv


def get_env(name: str, default=None, *, required=True, is_list=False):
    value = getenv(name, default)

    if value is None and required:
        raise ValueError(f"Environment variable {name} is not set and has no default value")

    with suppress(Exception):
        value = ast.literal_eval(value)

    if is_list and isinstance(value, str):
        value = value.split(",")

    return value


# Encoder used when neither the configuration nor the source image names a format.
DEFAULT_OUTPUT_FORMAT = str(get_env("IMAGEAUGMENTOR_OUTPUT_FORMAT", "PNG")).upper()

# Name of a PIL.Image.Resampling member used by every resize, rotate and affine step.
RESAMPLE_FILTER = str(get_env("IMAGEAUGMENTOR_RESAMPLE", "BICUBIC")).upper()
