"""Tests for image statistics and the gray-world estimate."""
import warnings

import numpy as np
import pytest

from photog_colorengine import rgb2xyz
from photog_errors import ShapeError
from photog_stats import gray_world_illuminant, image_mean


class TestImageMean:
    """Tests for per-channel means."""

    def test_reference_image_u8(self):
        """Test red/green/blue/gray-120 averages to 93.75 per channel."""
        rgb = np.array([
            255, 0, 0,
            0, 255, 0,
            0, 0, 255,
            120, 120, 120,
        ], dtype=np.uint8).reshape(4, 1, 3)
        np.testing.assert_allclose(image_mean(rgb), [93.75, 93.75, 93.75])

    def test_constant_image(self):
        """Test a constant image averages to its color."""
        c = np.array([0.2, 0.55, 0.9])
        image = np.broadcast_to(c, (37, 53, 3))
        np.testing.assert_allclose(image_mean(image), c, rtol=1e-12)

    def test_channels_independent(self):
        image = np.zeros((2, 2, 3))
        image[..., 1] = 1.0
        image[0, 0, 2] = 4.0
        np.testing.assert_allclose(image_mean(image), [0.0, 1.0, 1.0])

    def test_matches_numpy(self):
        image = np.random.default_rng(3).random((64, 48, 3))
        np.testing.assert_allclose(image_mean(image), image.mean(axis=(0, 1)), rtol=1e-12)

    def test_no_overflow_u16(self):
        image = np.full((300, 300, 3), 65535, dtype=np.uint16)
        np.testing.assert_allclose(image_mean(image), [65535.0] * 3)

    def test_returns_float64_vector(self):
        out = image_mean(np.ones((2, 2, 3), dtype=np.float32))
        assert out.shape == (3,)
        assert out.dtype == np.float64

    def test_float16_image(self):
        """Test half-precision images are averaged in float64."""
        out = image_mean(np.full((2, 2, 3), 0.5, dtype=np.float16))
        assert out.dtype == np.float64
        np.testing.assert_allclose(out, [0.5, 0.5, 0.5])

    def test_empty_image(self):
        with pytest.raises(ShapeError):
            image_mean(np.zeros((0, 4, 3)))

    def test_wrong_shape(self):
        with pytest.raises(ShapeError):
            image_mean(np.zeros((4, 4)))


class TestGrayWorldIlluminant:

    def test_is_xyz_of_mean(self):
        image = np.random.default_rng(5).random((8, 8, 3))
        expected = rgb2xyz(image.mean(axis=(0, 1)).reshape(1, 1, 3))[0, 0]
        np.testing.assert_allclose(gray_world_illuminant(image), expected, rtol=1e-10)

    def test_bgr(self):
        image = np.random.default_rng(6).random((8, 8, 3))
        np.testing.assert_allclose(
            gray_world_illuminant(image[..., ::-1], is_bgr=True),
            gray_world_illuminant(image),
            rtol=1e-10,
        )

    def test_gray_image_has_d65_chromaticity(self):
        image = np.full((4, 4, 3), 0.5)
        white = gray_world_illuminant(image)
        np.testing.assert_allclose(white / white[1], [0.95047, 1.0, 1.08883], rtol=1e-4)

    def test_dark_image_warns(self):
        image = np.zeros((2, 2, 3))
        with pytest.warns(UserWarning):
            gray_world_illuminant(image)

    def test_normal_image_does_not_warn(self):
        image = np.full((2, 2, 3), 0.5)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            gray_world_illuminant(image)

    def test_unsigned_rejected(self):
        with pytest.raises(TypeError):
            gray_world_illuminant(np.zeros((2, 2, 3), dtype=np.uint8))
