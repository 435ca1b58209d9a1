"""Tests for unsigned <-> floating conversion."""
import numpy as np
import pytest

from photog_convert import clip, to_floating, to_unsigned
from photog_errors import NonFiniteError, ShapeError


RGB_U8 = np.array([
    255, 0, 0,
    0, 255, 0,
    0, 0, 255,
    120, 120, 120,
], dtype=np.uint8)

RGB_FLOAT = np.array([
    1.0, 0.0, 0.0,
    0.0, 1.0, 0.0,
    0.0, 0.0, 1.0,
    0.470588, 0.470588, 0.470588,
]).reshape(4, 1, 3)


class TestToFloating:
    """Tests for v -> v / Max."""

    def test_reference_image(self):
        """Test the red/green/blue/gray-120 image."""
        out = to_floating(RGB_U8, 1, 4)
        assert out.shape == (4, 1, 3)
        assert out.dtype == np.float64
        np.testing.assert_allclose(out, RGB_FLOAT, atol=1e-6)

    def test_bytes_buffer(self):
        """Test raw decoder bytes are read as uint8."""
        out = to_floating(RGB_U8.tobytes(), 2, 2)
        assert out.shape == (2, 2, 3)
        assert out[1, 1, 0] == pytest.approx(120 / 255)

    def test_uint16_uses_dtype_max(self):
        buf = np.array([65535, 0, 32768] * 2, dtype=np.uint16)
        out = to_floating(buf, 2, 1)
        assert out[0, 0, 0] == 1.0
        assert out[0, 1, 2] == pytest.approx(32768 / 65535)

    def test_explicit_max_value(self):
        """Test 12-bit data stored in uint16."""
        buf = np.array([4095, 2048, 0], dtype=np.uint16)
        out = to_floating(buf, 1, 1, max_value=4095)
        np.testing.assert_allclose(out[0, 0], [1.0, 2048 / 4095, 0.0])

    def test_float32_output(self):
        out = to_floating(RGB_U8, 1, 4, dtype=np.float32)
        assert out.dtype == np.float32

    def test_shaped_input(self):
        """Test an already [H, W, 3] buffer is accepted."""
        out = to_floating(RGB_U8.reshape(2, 2, 3), 2, 2)
        assert out.shape == (2, 2, 3)

    def test_input_not_modified(self):
        buf = RGB_U8.copy()
        to_floating(buf, 1, 4)
        np.testing.assert_array_equal(buf, RGB_U8)

    def test_length_mismatch(self):
        """Test buffer length must equal W * H * 3."""
        with pytest.raises(ShapeError):
            to_floating(RGB_U8, 2, 4)

    def test_signed_input_rejected(self):
        with pytest.raises(TypeError):
            to_floating(RGB_U8.astype(np.int16), 1, 4)

    def test_integer_return_type_rejected(self):
        with pytest.raises(TypeError):
            to_floating(RGB_U8, 1, 4, dtype=np.uint16)

    def test_max_value_out_of_range(self):
        with pytest.raises(ValueError):
            to_floating(RGB_U8, 1, 4, max_value=1000)

    def test_value_above_max_value_rejected(self):
        """Test 12-bit data with a 13-bit sample fails instead of exceeding 1.0."""
        buf = np.array([4096, 0, 0], dtype=np.uint16)
        with pytest.raises(ValueError):
            to_floating(buf, 1, 1, max_value=4095)

    @pytest.mark.parametrize("dtype", [np.float16, np.longdouble])
    def test_non_float64_output(self, dtype):
        out = to_floating(RGB_U8, 1, 4, dtype=dtype)
        assert out.dtype == dtype
        np.testing.assert_allclose(out.astype(np.float64), RGB_FLOAT, atol=1e-3)


class TestToUnsigned:
    """Tests for f -> round(clip(f, 0, 1) * Max)."""

    def test_reference_image(self):
        out = to_unsigned(RGB_FLOAT)
        assert out.dtype == np.uint8
        np.testing.assert_array_equal(out, RGB_U8.reshape(4, 1, 3))

    def test_saturation(self):
        """Test out-of-range values clamp instead of wrapping."""
        out = to_unsigned(np.array([1.5, -0.2, 1.0, 0.0, 100.0, -100.0]))
        np.testing.assert_array_equal(out, [255, 0, 255, 0, 255, 0])

    def test_rounds_to_nearest(self):
        out = to_unsigned(np.array([0.4 / 255, 1.4 / 255, 1.6 / 255]))
        np.testing.assert_array_equal(out, [0, 1, 2])

    def test_uint16(self):
        out = to_unsigned(np.array([1.0, 0.5, 2.0]), dtype=np.uint16)
        assert out.dtype == np.uint16
        np.testing.assert_array_equal(out, [65535, 32768, 65535])

    def test_explicit_max_value(self):
        out = to_unsigned(np.array([1.0, 0.5]), dtype=np.uint16, max_value=1023)
        np.testing.assert_array_equal(out, [1023, 512])

    def test_float32_input(self):
        out = to_unsigned(RGB_FLOAT.astype(np.float32))
        np.testing.assert_array_equal(out, RGB_U8.reshape(4, 1, 3))

    def test_float16_input(self):
        """Test half-precision input is widened before conversion."""
        out = to_unsigned(np.array([0.5, 1.5, 0.0], dtype=np.float16))
        np.testing.assert_array_equal(out, [128, 255, 0])

    def test_longdouble_input(self):
        out = to_unsigned(np.array([1.0, 0.0], dtype=np.longdouble))
        np.testing.assert_array_equal(out, [255, 0])

    def test_round_trip_all_u8_values(self):
        """Test to_unsigned(to_floating(v)) == v for every 8-bit level."""
        levels = np.arange(256 * 3, dtype=np.int64) % 256
        buf = levels.astype(np.uint8)
        out = to_unsigned(to_floating(buf, 256, 1))
        np.testing.assert_array_equal(out.ravel(), buf)

    def test_round_trip_all_u16_values(self):
        levels = np.arange(65535 * 3 + 3, dtype=np.int64) % 65536
        buf = levels.astype(np.uint16)
        out = to_unsigned(to_floating(buf, 65536, 1), dtype=np.uint16)
        np.testing.assert_array_equal(out.ravel(), buf)

    def test_nan_rejected(self):
        with pytest.raises(NonFiniteError):
            to_unsigned(np.array([0.1, np.nan, 0.2]))

    def test_unsigned_input_rejected(self):
        with pytest.raises(TypeError):
            to_unsigned(RGB_U8)

    def test_float_target_rejected(self):
        with pytest.raises(TypeError):
            to_unsigned(RGB_FLOAT, dtype=np.float32)


class TestClip:

    def test_scalar(self):
        assert clip(1.5) == 1.0
        assert clip(-0.5) == 0.0
        assert clip(0.25) == 0.25

    def test_custom_range(self):
        np.testing.assert_array_equal(clip(np.array([-5, 5, 15]), 0, 10), [0, 5, 10])

    def test_empty_range(self):
        with pytest.raises(ValueError):
            clip(0.5, 1.0, 0.0)
