import numpy as np
import pytest
from PIL import Image

from imageaugmentor.services.augmentation import photometric


class TestBlurAndSharpen:
    """Tests for convolution effects."""

    def test_blur_softens_edge(self, edge_image):
        """Test pixels next to a hard edge take intermediate values after blurring."""
        result = photometric.blur(edge_image, 2.0)
        pixels = np.array(result)

        assert result.size == edge_image.size
        assert 0 < pixels[50, 49, 0] < 255
        assert 0 < pixels[50, 50, 0] < 255

    def test_sharpen_increases_edge_contrast(self):
        """Test sharpening pushes the darker side of a soft edge further down."""
        image_array = np.full((40, 40, 3), 100, dtype=np.uint8)
        image_array[:, 20:] = 160
        img = Image.fromarray(image_array, "RGB")

        result = photometric.sharpen(img, 2.0)
        pixels = np.array(result)

        assert result.size == img.size
        assert pixels[20, 19, 0] < 100
        assert pixels[20, 20, 0] > 160

    def test_tiny_sharpen_sigma_is_accepted(self, sample_rgb_image):
        """Test the minimum sharpen sigma runs without error."""
        result = photometric.sharpen(sample_rgb_image, 0.000001)

        assert result.size == sample_rgb_image.size


class TestModulation:
    """Tests for brightness, saturation and contrast."""

    @pytest.mark.parametrize("delta,expected", [(-0.5, 0.5), (0.0, 1.0), (0.25, 1.25), (-3.0, 0.0)])
    def test_modulation_factor(self, delta, expected):
        """Test the multiplier is 1 + delta, floored at 0."""
        assert photometric.modulation_factor(delta) == expected

    def test_brightness_scales_channels(self):
        """Test a -0.5 brightness delta halves channel values."""
        img = Image.new("RGB", (8, 8), color=(200, 100, 50))

        result = photometric.adjust_brightness(img, -0.5)

        assert tuple(np.array(result)[0, 0]) == (100, 50, 25)

    def test_saturation_minus_one_is_grayscale(self):
        """Test fully desaturating gives equal channels."""
        img = Image.new("RGB", (8, 8), color=(200, 40, 10))

        result = photometric.adjust_saturation(img, -1.0)
        r, g, b = np.array(result)[0, 0]

        assert r == g == b

    def test_contrast_minus_one_is_flat(self, edge_image):
        """Test zero contrast collapses the image to one gray level."""
        result = photometric.adjust_contrast(edge_image, -1.0)

        assert len(np.unique(np.array(result))) == 1

    @pytest.mark.parametrize(
        "effect",
        [photometric.adjust_brightness, photometric.adjust_saturation, photometric.adjust_contrast],
    )
    def test_modulation_keeps_alpha(self, sample_rgba_image, effect):
        """Test brightness, saturation and contrast leave alpha untouched."""
        result = effect(sample_rgba_image, 0.4)

        assert result.mode == "RGBA"
        assert np.array_equal(np.array(result)[..., 3], np.array(sample_rgba_image)[..., 3])

    def test_contrast_pivots_on_mean_gray(self):
        """Test a -0.5 contrast delta halves each pixel's distance from the mean gray level."""
        image_array = np.zeros((40, 40, 3), dtype=np.uint8)
        image_array[:, 20:] = 100
        img = Image.fromarray(image_array, "RGB")

        pixels = np.array(photometric.adjust_contrast(img, -0.5))

        assert tuple(pixels[10, 5]) == (25, 25, 25)
        assert tuple(pixels[10, 30]) == (75, 75, 75)

    def test_contrast_mean_taken_from_region(self):
        """Test padding outside the region does not move the contrast pivot."""
        image_array = np.zeros((40, 40, 3), dtype=np.uint8)
        image_array[:, 20:] = 100
        img = Image.fromarray(image_array, "RGB")
        canvas = Image.new("RGB", (120, 120), color=(255, 255, 255))
        canvas.paste(img, (40, 40))

        result = photometric.adjust_contrast(canvas, -0.5, (40, 40, 80, 80))

        expected = np.array(photometric.adjust_contrast(img, -0.5))
        assert np.array_equal(np.array(result.crop((40, 40, 80, 80))), expected)


class TestAlphaFiltering:
    """Tests for blur and sharpen on images with transparency."""

    @pytest.fixture
    def half_transparent_image(self):
        """Transparent red left half next to an opaque green right half."""
        image_array = np.zeros((40, 40, 4), dtype=np.uint8)
        image_array[:, :20] = (255, 0, 0, 0)
        image_array[:, 20:] = (0, 255, 0, 255)
        return Image.fromarray(image_array, "RGBA")

    @pytest.mark.parametrize("effect", [photometric.blur, photometric.sharpen])
    def test_transparent_color_does_not_bleed(self, half_transparent_image, effect):
        """Test color hidden under zero alpha never shows up in visible pixels."""
        result = effect(half_transparent_image, 2.0)
        pixels = np.array(result)
        visible = pixels[..., 3] > 0

        assert result.mode == "RGBA"
        assert visible.any()
        assert np.all(pixels[visible][:, 0] == 0)

    def test_blur_softens_alpha_edge(self, half_transparent_image):
        """Test blurring still feathers the alpha channel."""
        pixels = np.array(photometric.blur(half_transparent_image, 2.0))

        assert 0 < pixels[20, 19, 3] < 255
