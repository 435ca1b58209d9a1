# -*- coding: utf-8 -*-
"""
Photog: Color science for computational photography
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Image statistics used to estimate a scene illuminant.

The gray-world assumption says the average of a natural scene is
achromatic, so the per-channel mean of an image, taken to XYZ, is a usable
source white point for ``chrom_adapt``. Choosing that policy is up to the
caller; this module only supplies the primitives.
"""

import logging
import warnings

import numpy as np
from numba import njit, prange

from photog_colorengine import ArrayFloat, WorkingSpace, bgr2xyz, rgb2xyz
from photog_errors import ShapeError
from photog_pixels import CHANNELS, pixel_dimensions, pixel_pack

__all__ = ["image_mean", "gray_world_illuminant"]

logger = logging.getLogger(__name__)


@njit(cache=True, parallel=True)
def _channel_sums(pixels):
    """Per-channel sums with float64 accumulators (parallel reduction)."""
    s0 = 0.0
    s1 = 0.0
    s2 = 0.0
    for i in prange(pixels.shape[0]):
        s0 += pixels[i, 0]
        s1 += pixels[i, 1]
        s2 += pixels[i, 2]
    return s0, s1, s2


def image_mean(image: np.ndarray) -> ArrayFloat:
    """
    Calculates the mean pixel value of an image, per channel.

    Works on unsigned and floating images alike; the result is in the
    input's units (e.g. 0..255 for uint8). Summation order is not fixed,
    so results may differ from a sequential sum in the last bits.

    Args:
        image: Image of shape (H, W, 3).

    Returns:
        float64 vector of 3 channel means.

    Raises:
        ShapeError: If the image has the wrong shape or no pixels.
    """
    image = np.asarray(image)
    height, width = pixel_dimensions(image)
    if height * width == 0:
        raise ShapeError("Cannot take the mean of an empty image.")

    pixels = pixel_pack(np.ascontiguousarray(image, dtype=np.float64))
    sums = np.array(_channel_sums(pixels), dtype=np.float64)
    return sums / (height * width)


def gray_world_illuminant(image: ArrayFloat,
                          working_space: WorkingSpace = WorkingSpace.SRGB,
                          is_bgr: bool = False) -> ArrayFloat:
    """
    Estimates the scene white point of a floating image (gray world).

    Args:
        image: Gamma-encoded RGB/BGR, shape (H, W, 3), floating point.
        working_space: RGB working space of the image.
        is_bgr: Image uses BGR channel order.

    Returns:
        XYZ white point, shape (3,), suitable as ``src_illuminant``.
    """
    image = np.asarray(image)
    if not np.issubdtype(image.dtype, np.floating):
        raise TypeError(f"Input values must be floating point, got {image.dtype}.")

    mean = image_mean(image).reshape(1, 1, CHANNELS)
    to_xyz = bgr2xyz if is_bgr else rgb2xyz
    white = to_xyz(mean, working_space)[0, 0]

    if np.any(white < 1e-6):
        warnings.warn(
            f"gray_world_illuminant: estimated white point {white} has a "
            "near-zero component; adaptation from it will be unstable.",
            stacklevel=2,
        )
    logger.debug("[Stats] gray-world mean=%s -> white=%s", mean.ravel(), white)
    return white
