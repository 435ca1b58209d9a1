# -*- coding: utf-8 -*-
"""
Photog: Color science for computational photography
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Pixel View Adapter
==================
Zero-copy reinterpretation of dense ``[H, W, 3]`` images as ``[H*W]``
sequences of 3-element pixel windows, and back.

Views are built explicitly from shape and strides
(``numpy.lib.stride_tricks.as_strided``) rather than through ``reshape``,
so a layout that cannot be merged without copying is rejected instead of
being copied behind the caller's back. Every window aliases the storage of
the source image: writing to ``pixel_pack(img)[i]`` writes to ``img``.

The module also hosts ``pixel_map``, the generic per-pixel function
applicator used to inject transforms (e.g. chromatic adaptation) into the
RGB <-> XYZ pipeline.
"""

import logging
from typing import Any, Callable, Optional, Tuple, TypeAlias

import numpy as np
from numpy.lib.stride_tricks import as_strided

from photog_errors import ShapeError

__all__ = [
    "CHANNELS",
    "PixelFunc",
    "pixel_dimensions",
    "pixel_pack",
    "pixel_unpack",
    "pixel_map",
]

logger = logging.getLogger(__name__)

# Only 3-channel color is handled (no alpha).
CHANNELS: int = 3

PixelFunc: TypeAlias = Callable[[np.ndarray], Any]


def pixel_dimensions(image: np.ndarray) -> Tuple[int, int]:
    """
    Returns ``(height, width)`` of a ``[H, W, 3]`` image.

    Raises:
        ShapeError: If the image is not 3-D with exactly 3 channels.
    """
    if image.ndim != 3:
        raise ShapeError(f"Image must have 3 dimensions, got {image.ndim}.")
    if image.shape[2] != CHANNELS:
        raise ShapeError(f"Image requires {CHANNELS} channels, got {image.shape[2]}.")
    return int(image.shape[0]), int(image.shape[1])


def pixel_pack(image: np.ndarray) -> np.ndarray:
    """
    Converts an ``[H, W, 3]`` image to an ``[H*W, 3]`` view of pixels.

    No data is copied. The row and column axes are merged, which is only
    possible when stepping one row equals stepping ``W`` columns in memory
    (true for every C-contiguous image and for row slices of one). A
    single-column image is always packable.

    Args:
        image: Dense image, any element type.

    Returns:
        Pixel view sharing memory with ``image``. Writable if ``image`` is.

    Raises:
        ShapeError: On a wrong shape or a layout that would need a copy.
    """
    height, width = pixel_dimensions(image)
    row_stride, col_stride, chnl_stride = image.strides

    if width == 1:
        # A single column steps through pixels by rows.
        pixel_stride = row_stride
    elif height > 1 and row_stride != width * col_stride:
        raise ShapeError(
            f"Cannot pack image with strides {image.strides} without copying; "
            "pass a contiguous array (np.ascontiguousarray)."
        )
    else:
        pixel_stride = col_stride

    return as_strided(
        image,
        shape=(height * width, CHANNELS),
        strides=(pixel_stride, chnl_stride),
        writeable=image.flags.writeable,
    )


def pixel_unpack(pixels: np.ndarray, height: int, width: int) -> np.ndarray:
    """
    Converts an ``[H*W, 3]`` pixel sequence back to an ``[H, W, 3]`` view.

    Args:
        pixels: Packed pixels, shape (N, 3).
        height: Image height in pixels.
        width: Image width in pixels.

    Returns:
        Image view sharing memory with ``pixels``.

    Raises:
        ShapeError: If ``pixels`` is not (N, 3) or ``N != height * width``.
    """
    if pixels.ndim != 2 or pixels.shape[1] != CHANNELS:
        raise ShapeError(f"Pixels must have shape (N, {CHANNELS}), got {pixels.shape}.")
    if height < 0 or width < 0:
        raise ShapeError(f"Invalid image size {height}x{width}.")
    if pixels.shape[0] != height * width:
        raise ShapeError(
            f"{pixels.shape[0]} pixels cannot be unpacked to {height}x{width}."
        )

    pixel_stride, chnl_stride = pixels.strides
    return as_strided(
        pixels,
        shape=(height, width, CHANNELS),
        strides=(width * pixel_stride, pixel_stride, chnl_stride),
        writeable=pixels.flags.writeable,
    )


def pixel_map(
    image: np.ndarray,
    fun: PixelFunc,
    *,
    vectorized: bool = False,
    out_dtype: Optional[np.dtype] = None,
) -> np.ndarray:
    """
    Maps a function across an image's pixels.

    Each pixel is replaced by ``fun(pixel)``; pixels are independent and
    the visiting order is unspecified.

    Args:
        image: Input image, shape (H, W, 3).
        fun: Callable taking one 3-vector and returning one 3-vector. With
            ``vectorized=True`` it is called once with the packed (H*W, 3)
            view and must return an (H*W, 3) array instead.
        vectorized: Select the batch calling convention described above.
        out_dtype: Element type of the result. Defaults to the input type
            for floating images and float64 otherwise.

    Returns:
        New image, shape (H, W, 3). The input is not modified by this
        function (``fun`` receives read-only windows).

    Raises:
        ShapeError: If the image or a result of ``fun`` has the wrong shape.
    """
    height, width = pixel_dimensions(image)
    src = np.ascontiguousarray(image).view()
    src.flags.writeable = False
    packed_in = pixel_pack(src)

    if out_dtype is None:
        out_dtype = image.dtype if np.issubdtype(image.dtype, np.floating) else np.float64
    out = np.empty((height, width, CHANNELS), dtype=out_dtype)
    packed_out = pixel_pack(out)

    if vectorized:
        res = np.asarray(fun(packed_in))
        if res.shape != packed_out.shape:
            raise ShapeError(
                f"Vectorized pixel function returned shape {res.shape}, "
                f"expected {packed_out.shape}."
            )
        packed_out[...] = res
    else:
        for i in range(packed_in.shape[0]):
            res = np.asarray(fun(packed_in[i]))
            if res.shape != (CHANNELS,):
                raise ShapeError(
                    f"Pixel function must return a {CHANNELS}-vector, got shape {res.shape}."
                )
            packed_out[i] = res

    logger.debug("[Pixels] Mapped %d pixels (vectorized=%s)", packed_in.shape[0], vectorized)
    return out
