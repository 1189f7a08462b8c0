import random
from io import BytesIO
from unittest.mock import Mock

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def sample_rgb_image():
    """Create a sample RGB PIL Image for testing."""
    # Create a 96x64 RGB image with gradient pattern
    width, height = 96, 64
    image_array = np.zeros((height, width, 3), dtype=np.uint8)
    rows = np.arange(height)[:, None]
    cols = np.arange(width)[None, :]
    image_array[..., 0] = (rows * 4) % 256
    image_array[..., 1] = (cols * 2) % 256
    image_array[..., 2] = (rows + cols) % 256

    return Image.fromarray(image_array, "RGB")


@pytest.fixture
def sample_rgba_image():
    """Create a sample RGBA PIL Image with a transparent left half."""
    image_array = np.full((40, 40, 4), (10, 200, 30, 255), dtype=np.uint8)
    image_array[:, :20, 3] = 0
    return Image.fromarray(image_array, "RGBA")


@pytest.fixture
def edge_image():
    """100x100 image with a hard vertical edge between black and white halves."""
    image_array = np.zeros((100, 100, 3), dtype=np.uint8)
    image_array[:, 50:] = 255
    return Image.fromarray(image_array, "RGB")


@pytest.fixture
def image_bytes_rgb(sample_rgb_image):
    """Convert sample RGB image to PNG bytes for testing."""
    buffer = BytesIO()
    sample_rgb_image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def image_bytes_jpeg(sample_rgb_image):
    """Convert sample RGB image to JPEG bytes for testing."""
    buffer = BytesIO()
    sample_rgb_image.save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def image_bytes_rgba(sample_rgba_image):
    """Convert sample RGBA image to PNG bytes for testing."""
    buffer = BytesIO()
    sample_rgba_image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def seeded_rng():
    """Deterministic random source."""
    return random.Random(1234)


@pytest.fixture
def scripted_rng():
    """
    Random source whose uniform() returns queued values.

    Set ``scripted_rng.uniform.side_effect`` to the values each draw should return.
    """
    rng = Mock(spec=random.Random)
    rng.uniform.side_effect = AssertionError("no scripted values queued")
    return rng


# Test markers configuration
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests that test individual components")
    config.addinivalue_line("markers", "integration: Integration tests that test component interactions")
    config.addinivalue_line("markers", "slow: Tests that take longer than 5 seconds to run")
