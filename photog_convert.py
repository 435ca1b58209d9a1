# -*- coding: utf-8 -*-
"""
Photog: Color science for computational photography
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Elementwise Type Converter
==========================
Conversion between unsigned integer pixel buffers (as produced by image
decoders) and normalised floating-point images.

    to_floating:  v -> v / Max                      (domain is closed, no clip)
    to_unsigned:  f -> round(clip(f, 0, 1) * Max)   (saturating)

Saturation in ``to_unsigned`` is policy, not an error: transforms upstream
(e.g. chromatic adaptation) may overshoot [0, 1] and are clamped here.
Rounding is round-half-to-even (``np.rint``).

Both conversions allocate a fresh output and never mutate their input.
Elements are independent, so the kernels run as ``prange`` loops.
"""

import logging
from typing import Optional, Union

import numpy as np
from numba import njit, prange

from photog_errors import NonFiniteError, ShapeError
from photog_pixels import CHANNELS

__all__ = [
    "BufferLike",
    "clip",
    "to_floating",
    "to_unsigned",
]

logger = logging.getLogger(__name__)

BufferLike = Union[np.ndarray, bytes, bytearray, memoryview]


def clip(value, low: float = 0.0, high: float = 1.0):
    """Clamps a scalar or array to ``[low, high]``."""
    if low > high:
        raise ValueError(f"Empty clip range [{low}, {high}].")
    return np.clip(value, low, high)


# =============================================================================
# KERNELS
# =============================================================================

@njit(cache=True, parallel=True)
def _to_floating_kernel(src, out, max_value):
    """out[i] = src[i] / Max, flat arrays of equal length."""
    for i in prange(src.shape[0]):
        out[i] = src[i] / max_value


@njit(cache=True, parallel=True)
def _to_unsigned_kernel(src, out, max_value):
    """
    out[i] = rint(clip(src[i], 0, 1) * Max).

    Explicit branches instead of np.clip avoid a temporary array.
    """
    for i in prange(src.shape[0]):
        v = src[i]
        if v >= 1.0:
            v = 1.0
        elif v <= 0.0:
            v = 0.0
        out[i] = np.rint(v * max_value)


# =============================================================================
# HELPERS
# =============================================================================

def _resolve_max(dtype: np.dtype, max_value: Optional[int]) -> int:
    """Returns the declared maximum for an unsigned representation."""
    dtype_max = int(np.iinfo(dtype).max)
    if max_value is None:
        return dtype_max
    max_value = int(max_value)
    if max_value <= 0 or max_value > dtype_max:
        raise ValueError(
            f"max_value must be in [1, {dtype_max}] for {dtype.name}, got {max_value}."
        )
    return max_value


def _as_unsigned_array(buffer: BufferLike) -> np.ndarray:
    """Wraps raw decoder output as a numpy array without copying."""
    if isinstance(buffer, (bytes, bytearray)):
        return np.frombuffer(buffer, dtype=np.uint8)
    return np.asarray(buffer)


# =============================================================================
# PUBLIC API
# =============================================================================

def to_floating(
    buffer: BufferLike,
    width: int,
    height: int,
    dtype: np.dtype = np.float64,
    max_value: Optional[int] = None,
) -> np.ndarray:
    """
    Converts an unsigned pixel buffer to a floating-point ``[H, W, 3]`` image.

    Args:
        buffer: ``W * H * 3`` unsigned values, row-major with interleaved
            channels. Either flat or already shaped; ``bytes`` and
            ``bytearray`` are read as ``uint8``.
        width: Image width in pixels.
        height: Image height in pixels.
        dtype: Floating element type of the result.
        max_value: Value mapped to 1.0. Defaults to the maximum of the
            buffer's type (255 for uint8, 65535 for uint16). Set it for
            e.g. 12-bit data stored in uint16.

    Returns:
        New array of shape (height, width, 3) with values in [0, 1].

    Raises:
        TypeError: If the buffer is not unsigned or ``dtype`` not floating.
        ShapeError: If the buffer length is not ``W * H * 3``.
        ValueError: If ``max_value`` is outside the representable range or
            the buffer holds values above it.
    """
    src = _as_unsigned_array(buffer)
    if not np.issubdtype(src.dtype, np.unsignedinteger):
        raise TypeError(f"Input must be unsigned integer, got {src.dtype}.")
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise TypeError(f"Return type must be floating point, got {dtype}.")
    if width < 0 or height < 0:
        raise ShapeError(f"Invalid image size {width}x{height}.")

    expected = width * height * CHANNELS
    if src.size != expected:
        raise ShapeError(
            f"Buffer holds {src.size} values, expected {width}x{height}x{CHANNELS} = {expected}."
        )

    max_v = _resolve_max(src.dtype, max_value)
    flat = np.ascontiguousarray(src).ravel()
    if flat.size and flat.max() > max_v:
        raise ValueError(f"Buffer holds {flat.max()}, above max_value {max_v}.")

    # Kernels are compiled for float64 only; float16 and longdouble are cast after.
    out = np.empty(expected, dtype=np.float64)
    _to_floating_kernel(flat, out, float(max_v))

    logger.debug("[Convert] %s -> %s, %dx%d, max=%d", src.dtype, dtype, width, height, max_v)
    return out.astype(dtype, copy=False).reshape(height, width, CHANNELS)


def to_unsigned(
    image: np.ndarray,
    dtype: np.dtype = np.uint8,
    max_value: Optional[int] = None,
) -> np.ndarray:
    """
    Converts a floating-point image to unsigned integers.

    Values are clamped to [0, 1] before scaling, so overshoot saturates to
    0 or ``Max`` instead of wrapping.

    Args:
        image: Floating-point array of any shape (normally (H, W, 3)).
        dtype: Unsigned element type of the result.
        max_value: Value that 1.0 maps to. Defaults to the maximum of
            ``dtype``.

    Returns:
        New array of the same shape with element type ``dtype``.

    Raises:
        TypeError: If ``image`` is not floating or ``dtype`` not unsigned.
        NonFiniteError: If ``image`` contains NaN.
        ValueError: If ``max_value`` is outside the representable range.
    """
    src = np.asarray(image)
    if not np.issubdtype(src.dtype, np.floating):
        raise TypeError(f"Value to convert must be floating point, got {src.dtype}.")
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.unsignedinteger):
        raise TypeError(f"Return type must be unsigned integer, got {dtype}.")
    if np.isnan(src).any():
        raise NonFiniteError("Cannot convert NaN values to unsigned integers.")

    max_v = _resolve_max(dtype, max_value)
    flat = np.ascontiguousarray(src, dtype=np.float64).ravel()
    out = np.empty(flat.shape[0], dtype=dtype)
    _to_unsigned_kernel(flat, out, float(max_v))

    logger.debug("[Convert] %s -> %s, %d values, max=%d", src.dtype, dtype, flat.shape[0], max_v)
    return out.reshape(src.shape)
