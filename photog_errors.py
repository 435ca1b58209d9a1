# -*- coding: utf-8 -*-
"""
Photog: Color science for computational photography
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Exception hierarchy shared by the Photog modules.

Contract violations (bad shapes, wrong channel counts, wrong illuminant
lengths) and degenerate numeric input are raised before any pixel is
touched, so a failing call never leaves partial output behind. Type misuse
(e.g. integer pixels handed to a floating-point transform) raises the
builtin ``TypeError``.
"""

__all__ = [
    "PhotogError",
    "ShapeError",
    "DegenerateIlluminantError",
    "NonFiniteError",
]


class PhotogError(Exception):
    """Base class for all Photog errors."""


class ShapeError(PhotogError, ValueError):
    """Array shape, channel count or buffer length does not match the contract."""


class DegenerateIlluminantError(PhotogError, ValueError):
    """White point that would produce a division by zero or non-finite gains."""


class NonFiniteError(PhotogError, ValueError):
    """NaN values reached a conversion that has no defined output for them."""
