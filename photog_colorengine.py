# -*- coding: utf-8 -*-
"""
Photog: Color science for computational photography
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color Space Transform & Chromatic Adaptation Engine
===================================================
Device RGB/BGR <-> CIE XYZ conversion and von Kries style chromatic
adaptation for dense ``[H, W, 3]`` floating-point images.

Pipeline per pixel:

    RGB -> XYZ:  linearise each channel (sRGB EOTF), then xyz = M . rgb
    XYZ -> RGB:  rgb = M^-1 . xyz, then sRGB OETF on each channel
    Adapt:       rgb2xyz -> (T . xyz per pixel) -> xyz2rgb,
                 T = A^-1 . diag(A.Wd / A.Ws) . A

BGR is handled without touching the companding step: on input the columns
of the RGB->XYZ matrix are reversed, on output the three result channels
are written in reverse order.

No clamping happens in this module. Values outside [0, 1] (e.g. adaptation
overshoot) pass through and are saturated by ``photog_convert.to_unsigned``.

The 3x3 products are written out by hand inside Numba ``prange`` kernels,
so no per-pixel temporaries are allocated.

References:
    - IEC 61966-2-1:1999 (sRGB Standard)
    - Lindbloom, B. "RGB/XYZ Matrices" and "Chromatic Adaptation".
    - Lam, K.M. (1985). Metamerism and colour constancy (Bradford transform).
"""

import functools
import logging
from enum import Enum
from typing import Dict, Final, Sequence, Tuple, TypeAlias, Union

import numpy as np
import numpy.typing as npt
from numba import njit, prange
from scipy import linalg

from photog_errors import DegenerateIlluminantError, ShapeError
from photog_pixels import pixel_dimensions, pixel_map, pixel_pack

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",
    "IlluminantLike",

    # --- Enumerations ---
    "WorkingSpace",
    "ChromAdaptMethod",
    "Illuminant",

    # --- Configuration ---
    "set_strict_ieee",

    # --- Matrix lookup ---
    "conversion_matrices",
    "cone_response_matrices",

    # --- Transforms ---
    "srgb_decompand",
    "srgb_compand",
    "rgb2xyz",
    "bgr2xyz",
    "xyz2rgb",
    "xyz2bgr",

    # --- Chromatic adaptation ---
    "adaptation_matrix",
    "adapt_xyz",
    "chrom_adapt",
]

logger = logging.getLogger(__name__)

# --- Type Aliases ---
ArrayFloat: TypeAlias = npt.NDArray[np.floating]


# =============================================================================
# 1. ENUMERATIONS & CONSTANT TABLES
# =============================================================================

class WorkingSpace(Enum):
    """RGB working spaces."""
    SRGB = "sRgb"


class ChromAdaptMethod(Enum):
    """Chromatic adaptation methods."""
    BRADFORD = "bradford"


class Illuminant(Enum):
    """Standard illuminants as XYZ white points (Y = 1.0)."""
    # Average daylight (approx 6500K), reference white of sRGB
    D65 = (0.95047, 1.00000, 1.08883)
    # Horizon daylight (approx 5000K), standard for printing (ICC)
    D50 = (0.96422, 1.00000, 0.82521)

    @property
    def xyz(self) -> ArrayFloat:
        """White point as a read-only float64 vector."""
        return _frozen(np.array(self.value, dtype=np.float64))


IlluminantLike: TypeAlias = Union[Illuminant, Sequence[float], np.ndarray]


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


# sRGB matrices (D65 relative), IEC 61966-2-1.
_M_SRGB_TO_XYZ: Final[ArrayFloat] = _frozen(np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041]
], dtype=np.float64))

_M_XYZ_TO_SRGB: Final[ArrayFloat] = _frozen(np.array([
    [ 3.2404542, -1.5371385, -0.4985314],
    [-0.9692660,  1.8760108,  0.0415560],
    [ 0.0556434, -0.2040259,  1.0572252]
], dtype=np.float64))

# Bradford cone response. Transforms XYZ to "sharpened" LMS for gain application.
_M_BRADFORD: Final[ArrayFloat] = _frozen(np.array([
    [ 0.8951000,  0.2664000, -0.1614000],
    [-0.7502000,  1.7135000,  0.0367000],
    [ 0.0389000, -0.0685000,  1.0296000]
], dtype=np.float64))

# (rgb2xyz, rgb2xyz with reversed columns for BGR input, xyz2rgb)
_WORKING_SPACE_MATRICES: Final[Dict[WorkingSpace, Tuple[ArrayFloat, ArrayFloat, ArrayFloat]]] = {
    WorkingSpace.SRGB: (
        _M_SRGB_TO_XYZ,
        _frozen(np.ascontiguousarray(_M_SRGB_TO_XYZ[:, ::-1])),
        _M_XYZ_TO_SRGB,
    ),
}

# (xyz2lms, lms2xyz)
_CONE_RESPONSE_MATRICES: Final[Dict[ChromAdaptMethod, Tuple[ArrayFloat, ArrayFloat]]] = {
    ChromAdaptMethod.BRADFORD: (
        _M_BRADFORD,
        _frozen(linalg.inv(_M_BRADFORD)),
    ),
}


def conversion_matrices(working_space: WorkingSpace = WorkingSpace.SRGB,
                        is_bgr: bool = False) -> Tuple[ArrayFloat, ArrayFloat]:
    """
    Returns ``(to_xyz, from_xyz)`` matrices for a working space.

    ``to_xyz`` has its columns reversed when ``is_bgr`` is set. ``from_xyz``
    is the same for both orders, BGR output is handled by channel order.

    Raises:
        KeyError: If the working space has no registered matrices.
    """
    try:
        rgb2xyz_m, bgr2xyz_m, xyz2rgb_m = _WORKING_SPACE_MATRICES[WorkingSpace(working_space)]
    except (KeyError, ValueError) as exc:
        raise KeyError(f"No conversion matrices for working space {working_space!r}") from exc
    return (bgr2xyz_m if is_bgr else rgb2xyz_m), xyz2rgb_m


def cone_response_matrices(method: ChromAdaptMethod = ChromAdaptMethod.BRADFORD
                           ) -> Tuple[ArrayFloat, ArrayFloat]:
    """
    Returns ``(xyz2lms, lms2xyz)`` for a chromatic adaptation method.

    Raises:
        KeyError: If the method has no registered matrices.
    """
    return _CONE_RESPONSE_MATRICES[_to_method(method)]


def _to_method(method: Union[ChromAdaptMethod, str]) -> ChromAdaptMethod:
    try:
        resolved = ChromAdaptMethod(method)
    except ValueError as exc:
        raise KeyError(f"No cone response matrices for method {method!r}") from exc
    if resolved not in _CONE_RESPONSE_MATRICES:
        raise KeyError(f"No cone response matrices for method {method!r}")
    return resolved


# --- Runtime Configuration ---
# When True, every Numba kernel (transforms, companding, adaptation) runs its
# fastmath=False variant with strict IEEE 754 semantics (inf / NaN
# propagation, no FP reassociation).
#
#     import photog_colorengine as ce
#     ce.set_strict_ieee(True)   # enable strict mode
#     ce.set_strict_ieee(False)  # back to fast mode (default)
_STRICT_IEEE: bool = False

def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between fast (default) and strict IEEE 754 Numba kernels.

    Args:
        enabled: If True, use strict IEEE mode.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)
    logger.debug("[Color] strict IEEE mode %s", "on" if _STRICT_IEEE else "off")


# =============================================================================
# 2. LOW-LEVEL KERNELS (Numba)
# =============================================================================
# fastmath=True allows reassociation; results may differ from the strict
# variants in the last bits.

@njit(cache=True, fastmath=True, inline='always')
def _decompand(c):
    """sRGB EOTF for one channel value."""
    if c <= 0.04045:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4

@njit(cache=True, fastmath=True, inline='always')
def _compand(c):
    """sRGB OETF for one linear channel value."""
    if c <= 0.0031308:
        return c * 12.92
    return 1.055 * c ** (1.0 / 2.4) - 0.055

@njit(cache=True, fastmath=True, parallel=True)
def _rgb_to_xyz_kernel(pixels, m, out):
    """Linearise then multiply. pixels, out: (N, 3); m: (3, 3)."""
    for i in prange(pixels.shape[0]):
        r = _decompand(pixels[i, 0])
        g = _decompand(pixels[i, 1])
        b = _decompand(pixels[i, 2])
        out[i, 0] = m[0, 0] * r + m[0, 1] * g + m[0, 2] * b
        out[i, 1] = m[1, 0] * r + m[1, 1] * g + m[1, 2] * b
        out[i, 2] = m[2, 0] * r + m[2, 1] * g + m[2, 2] * b

@njit(cache=True, fastmath=True, parallel=True)
def _xyz_to_rgb_kernel(pixels, m, out, reverse):
    """Multiply then compand; channels written in reverse order for BGR."""
    for i in prange(pixels.shape[0]):
        x = pixels[i, 0]
        y = pixels[i, 1]
        z = pixels[i, 2]
        c0 = _compand(m[0, 0] * x + m[0, 1] * y + m[0, 2] * z)
        c1 = _compand(m[1, 0] * x + m[1, 1] * y + m[1, 2] * z)
        c2 = _compand(m[2, 0] * x + m[2, 1] * y + m[2, 2] * z)
        if reverse:
            out[i, 0] = c2
            out[i, 2] = c0
        else:
            out[i, 0] = c0
            out[i, 2] = c2
        out[i, 1] = c1


# --- Strict IEEE 754 kernel variants (fastmath=False) ---

@njit(cache=True, fastmath=False, inline='always')
def _decompand_strict(c):
    """sRGB EOTF, strict IEEE 754 variant."""
    if c <= 0.04045:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4

@njit(cache=True, fastmath=False, inline='always')
def _compand_strict(c):
    """sRGB OETF, strict IEEE 754 variant."""
    if c <= 0.0031308:
        return c * 12.92
    return 1.055 * c ** (1.0 / 2.4) - 0.055

@njit(cache=True, fastmath=False, parallel=True)
def _rgb_to_xyz_kernel_strict(pixels, m, out):
    for i in prange(pixels.shape[0]):
        r = _decompand_strict(pixels[i, 0])
        g = _decompand_strict(pixels[i, 1])
        b = _decompand_strict(pixels[i, 2])
        out[i, 0] = m[0, 0] * r + m[0, 1] * g + m[0, 2] * b
        out[i, 1] = m[1, 0] * r + m[1, 1] * g + m[1, 2] * b
        out[i, 2] = m[2, 0] * r + m[2, 1] * g + m[2, 2] * b

@njit(cache=True, fastmath=False, parallel=True)
def _xyz_to_rgb_kernel_strict(pixels, m, out, reverse):
    for i in prange(pixels.shape[0]):
        x = pixels[i, 0]
        y = pixels[i, 1]
        z = pixels[i, 2]
        c0 = _compand_strict(m[0, 0] * x + m[0, 1] * y + m[0, 2] * z)
        c1 = _compand_strict(m[1, 0] * x + m[1, 1] * y + m[1, 2] * z)
        c2 = _compand_strict(m[2, 0] * x + m[2, 1] * y + m[2, 2] * z)
        if reverse:
            out[i, 0] = c2
            out[i, 2] = c0
        else:
            out[i, 0] = c0
            out[i, 2] = c2
        out[i, 1] = c1

@njit(cache=True, fastmath=True, parallel=True)
def _matrix_kernel(pixels, m, out):
    """out = m . p for every pixel p. pixels, out: (N, 3)."""
    for i in prange(pixels.shape[0]):
        x = pixels[i, 0]
        y = pixels[i, 1]
        z = pixels[i, 2]
        out[i, 0] = m[0, 0] * x + m[0, 1] * y + m[0, 2] * z
        out[i, 1] = m[1, 0] * x + m[1, 1] * y + m[1, 2] * z
        out[i, 2] = m[2, 0] * x + m[2, 1] * y + m[2, 2] * z

@njit(cache=True, fastmath=False, parallel=True)
def _matrix_kernel_strict(pixels, m, out):
    for i in prange(pixels.shape[0]):
        x = pixels[i, 0]
        y = pixels[i, 1]
        z = pixels[i, 2]
        out[i, 0] = m[0, 0] * x + m[0, 1] * y + m[0, 2] * z
        out[i, 1] = m[1, 0] * x + m[1, 1] * y + m[1, 2] * z
        out[i, 2] = m[2, 0] * x + m[2, 1] * y + m[2, 2] * z

@njit(cache=True, fastmath=True, parallel=True)
def _decompand_kernel(flat, out):
    for i in prange(flat.shape[0]):
        out[i] = _decompand(flat[i])

@njit(cache=True, fastmath=False, parallel=True)
def _decompand_kernel_strict(flat, out):
    for i in prange(flat.shape[0]):
        out[i] = _decompand_strict(flat[i])

@njit(cache=True, fastmath=True, parallel=True)
def _compand_kernel(flat, out):
    for i in prange(flat.shape[0]):
        out[i] = _compand(flat[i])

@njit(cache=True, fastmath=False, parallel=True)
def _compand_kernel_strict(flat, out):
    for i in prange(flat.shape[0]):
        out[i] = _compand_strict(flat[i])


# --- Kernel dispatchers ---

def _rgb_to_xyz(pixels: ArrayFloat, m: ArrayFloat, out: ArrayFloat) -> None:
    if _STRICT_IEEE:
        _rgb_to_xyz_kernel_strict(pixels, m, out)
    else:
        _rgb_to_xyz_kernel(pixels, m, out)

def _xyz_to_rgb(pixels: ArrayFloat, m: ArrayFloat, out: ArrayFloat, reverse: bool) -> None:
    if _STRICT_IEEE:
        _xyz_to_rgb_kernel_strict(pixels, m, out, reverse)
    else:
        _xyz_to_rgb_kernel(pixels, m, out, reverse)

def _matrix(pixels: ArrayFloat, m: ArrayFloat, out: ArrayFloat) -> None:
    if _STRICT_IEEE:
        _matrix_kernel_strict(pixels, m, out)
    else:
        _matrix_kernel(pixels, m, out)

def _decompand_flat(flat: ArrayFloat, out: ArrayFloat) -> None:
    if _STRICT_IEEE:
        _decompand_kernel_strict(flat, out)
    else:
        _decompand_kernel(flat, out)

def _compand_flat(flat: ArrayFloat, out: ArrayFloat) -> None:
    if _STRICT_IEEE:
        _compand_kernel_strict(flat, out)
    else:
        _compand_kernel(flat, out)


# =============================================================================
# 3. COLOR SPACE TRANSFORMS
# =============================================================================

def _validated(image: np.ndarray, dtype: np.dtype) -> Tuple[np.ndarray, np.dtype]:
    """
    Checks a transform input and returns it as C-contiguous float64.

    NOTE: kernels compile to float64. float32 inputs incur one copy here.
    """
    image = np.asarray(image)
    pixel_dimensions(image)
    if not np.issubdtype(image.dtype, np.floating):
        raise TypeError(
            f"Input values must be floating point, got {image.dtype}; "
            "convert with photog_convert.to_floating first."
        )
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise TypeError(f"Return type must be floating point, got {dtype}.")
    return np.ascontiguousarray(image, dtype=np.float64), dtype


def _rgb_bgr_to_xyz(image: ArrayFloat, is_bgr: bool, working_space: WorkingSpace,
                    dtype: np.dtype) -> ArrayFloat:
    src, dtype = _validated(image, dtype)
    m, _ = conversion_matrices(working_space, is_bgr)
    out = np.empty(src.shape, dtype=np.float64)
    _rgb_to_xyz(pixel_pack(src), m, pixel_pack(out))
    logger.debug("[Color] %s -> XYZ (%s), shape=%s",
                 "BGR" if is_bgr else "RGB", WorkingSpace(working_space).value, src.shape)
    return out.astype(dtype, copy=False)


def _xyz_to_rgb_bgr(image: ArrayFloat, is_bgr: bool, working_space: WorkingSpace,
                    dtype: np.dtype) -> ArrayFloat:
    src, dtype = _validated(image, dtype)
    _, m = conversion_matrices(working_space)
    out = np.empty(src.shape, dtype=np.float64)
    _xyz_to_rgb(pixel_pack(src), m, pixel_pack(out), is_bgr)
    logger.debug("[Color] XYZ -> %s (%s), shape=%s",
                 "BGR" if is_bgr else "RGB", WorkingSpace(working_space).value, src.shape)
    return out.astype(dtype, copy=False)


def rgb2xyz(image: ArrayFloat, working_space: WorkingSpace = WorkingSpace.SRGB,
            dtype: np.dtype = np.float64) -> ArrayFloat:
    """
    Converts an RGB image to XYZ.

    Args:
        image: Gamma-encoded RGB, shape (H, W, 3), floating point, nominally [0, 1].
        working_space: RGB working space of the input.
        dtype: Floating element type of the result.

    Returns:
        New XYZ image (relative to the working space's reference white).
    """
    return _rgb_bgr_to_xyz(image, False, working_space, dtype)


def bgr2xyz(image: ArrayFloat, working_space: WorkingSpace = WorkingSpace.SRGB,
            dtype: np.dtype = np.float64) -> ArrayFloat:
    """Converts a BGR image to XYZ. Same contract as :func:`rgb2xyz`."""
    return _rgb_bgr_to_xyz(image, True, working_space, dtype)


def xyz2rgb(image: ArrayFloat, working_space: WorkingSpace = WorkingSpace.SRGB,
            dtype: np.dtype = np.float64) -> ArrayFloat:
    """
    Converts an XYZ image to gamma-encoded RGB.

    Out-of-gamut results are not clipped. Negative linear values follow the
    linear segment of the curve, so no NaNs are produced.

    Args:
        image: XYZ, shape (H, W, 3), floating point.
        working_space: Target RGB working space.
        dtype: Floating element type of the result.

    Returns:
        New RGB image.
    """
    return _xyz_to_rgb_bgr(image, False, working_space, dtype)


def xyz2bgr(image: ArrayFloat, working_space: WorkingSpace = WorkingSpace.SRGB,
            dtype: np.dtype = np.float64) -> ArrayFloat:
    """Converts an XYZ image to BGR. Same contract as :func:`xyz2rgb`."""
    return _xyz_to_rgb_bgr(image, True, working_space, dtype)


def srgb_decompand(values: ArrayFloat) -> ArrayFloat:
    """Applies the sRGB EOTF (encoded -> linear) to every element."""
    src = np.asarray(values, dtype=np.float64)
    flat = np.ascontiguousarray(src).ravel()
    out = np.empty_like(flat)
    _decompand_flat(flat, out)
    return out.reshape(src.shape)


def srgb_compand(values: ArrayFloat) -> ArrayFloat:
    """Applies the sRGB OETF (linear -> encoded) to every element."""
    src = np.asarray(values, dtype=np.float64)
    flat = np.ascontiguousarray(src).ravel()
    out = np.empty_like(flat)
    _compand_flat(flat, out)
    return out.reshape(src.shape)


# =============================================================================
# 4. CHROMATIC ADAPTATION
# =============================================================================

def _to_white_point(illuminant: IlluminantLike, name: str) -> Tuple[float, ...]:
    """Validates an illuminant and returns it as a hashable tuple."""
    if isinstance(illuminant, Illuminant):
        arr = illuminant.xyz
    else:
        arr = np.asarray(illuminant, dtype=np.float64).ravel()
    if arr.shape != (3,):
        raise ShapeError(f"{name} illuminant must have 3 elements, got {arr.size}.")
    if not np.all(np.isfinite(arr)):
        raise DegenerateIlluminantError(f"{name} illuminant is not finite: {arr}.")
    return tuple(float(v) for v in arr)


@functools.lru_cache(maxsize=16)
def _get_cached_adaptation_matrix(src_white: Tuple[float, ...], dst_white: Tuple[float, ...],
                                  method: ChromAdaptMethod) -> ArrayFloat:
    """
    Cached worker for the adaptation matrix.

    Derivation (column vectors):
        Ls = A . Ws,  Ld = A . Wd
        T  = A^-1 . diag(Ld / Ls) . A
    """
    xyz2lms, lms2xyz = cone_response_matrices(method)

    lms_src = xyz2lms @ np.array(src_white, dtype=np.float64)
    lms_dst = xyz2lms @ np.array(dst_white, dtype=np.float64)

    if np.any(np.abs(lms_src) < 1e-12):
        raise DegenerateIlluminantError(
            f"Source illuminant {src_white} has a zero cone response {lms_src}; "
            "adaptation gains are undefined."
        )

    gains = np.diag(lms_dst / lms_src)
    transform = lms2xyz @ gains @ xyz2lms
    logger.debug("[Color] %s adaptation %s -> %s, gains=%s",
                 method.value, src_white, dst_white, np.diag(gains))
    return _frozen(transform)


def adaptation_matrix(src_illuminant: IlluminantLike, dst_illuminant: IlluminantLike,
                      method: ChromAdaptMethod = ChromAdaptMethod.BRADFORD) -> ArrayFloat:
    """
    Computes the 3x3 matrix adapting XYZ from one white point to another.

    Args:
        src_illuminant: Source white point (XYZ), e.g. a gray-world estimate.
        dst_illuminant: Destination white point (XYZ).
        method: Cone response model.

    Returns:
        Read-only 3x3 matrix ``T`` with ``xyz_dst = T . xyz_src``.

    Raises:
        ShapeError: If an illuminant does not have exactly 3 elements.
        DegenerateIlluminantError: If an illuminant is not finite or the
            source has a zero cone response.
        KeyError: If ``method`` has no registered cone response matrices.
    """
    src = _to_white_point(src_illuminant, "Source")
    dst = _to_white_point(dst_illuminant, "Destination")
    return _get_cached_adaptation_matrix(src, dst, _to_method(method))


def _apply_matrix(matrix: ArrayFloat, pixels: ArrayFloat) -> ArrayFloat:
    """Vectorised pixel function: ``matrix . p`` for each row of ``pixels``."""
    out = np.empty(pixels.shape, dtype=np.float64)
    _matrix(pixels, matrix, out)
    return out


def adapt_xyz(xyz_image: ArrayFloat, src_illuminant: IlluminantLike,
              dst_illuminant: IlluminantLike,
              method: ChromAdaptMethod = ChromAdaptMethod.BRADFORD) -> ArrayFloat:
    """
    Adapts an XYZ image from the source to the destination white point.

    Args:
        xyz_image: XYZ, shape (H, W, 3), floating point.
        src_illuminant: Source white point (XYZ).
        dst_illuminant: Destination white point (XYZ).
        method: Cone response model.

    Returns:
        New adapted XYZ image (float64). Not clipped.
    """
    transform = adaptation_matrix(src_illuminant, dst_illuminant, method)
    src, _ = _validated(xyz_image, np.float64)
    return pixel_map(src, functools.partial(_apply_matrix, transform),
                     vectorized=True, out_dtype=np.float64)


def chrom_adapt(image: ArrayFloat, src_illuminant: IlluminantLike,
                dst_illuminant: IlluminantLike,
                method: ChromAdaptMethod = ChromAdaptMethod.BRADFORD,
                working_space: WorkingSpace = WorkingSpace.SRGB,
                is_bgr: bool = False) -> ArrayFloat:
    """
    Chromatically adapts an RGB (or BGR) image between illuminants.

    Full pipeline: ``rgb2xyz -> T . xyz per pixel -> xyz2rgb``. The matrix
    is computed (and validated) before any pixel is converted.

    Args:
        image: Gamma-encoded RGB/BGR, shape (H, W, 3), floating point.
        src_illuminant: Source white point (XYZ).
        dst_illuminant: Destination white point (XYZ).
        method: Cone response model.
        working_space: RGB working space of input and output.
        is_bgr: Input and output use BGR channel order.

    Returns:
        New adapted image in the input's channel order and floating type.
        Values may leave [0, 1]; use ``to_unsigned`` to saturate.

    Example:
        >>> img = to_floating(raw, width, height)
        >>> src = gray_world_illuminant(img)
        >>> out = to_unsigned(chrom_adapt(img, src, Illuminant.D65))
    """
    transform = adaptation_matrix(src_illuminant, dst_illuminant, method)
    src, dtype = _validated(image, np.asarray(image).dtype)

    xyz = _rgb_bgr_to_xyz(src, is_bgr, working_space, np.float64)
    adapted = pixel_map(xyz, functools.partial(_apply_matrix, transform),
                        vectorized=True, out_dtype=np.float64)
    return _xyz_to_rgb_bgr(adapted, is_bgr, working_space, dtype)
