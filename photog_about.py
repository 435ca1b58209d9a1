# -*- coding: utf-8 -*-
# Photog: Color science for computational photography.
#
# Copyright (c) 2026 opticsWolf
#
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Project metadata for opticsWolf Photog.
"""

from typing import Final

# Metadata Definitions
__title__: Final[str] = "Photog"
__description__: Final[str] = (
    "RGB/BGR <-> CIE XYZ conversion and Bradford chromatic adaptation "
    "for dense 3-channel image buffers."
)
__version__: Final[str] = "0.1.0"
__author__: Final[str] = "opticsWolf"
__license__: Final[str] = "LGPL-3.0-or-later"
__copyright__: Final[str] = "Copyright (c) 2026 opticsWolf"

def metadata_summary() -> dict[str, str]:
    """Returns a dictionary of project metadata for introspection."""
    return {
        "title": __title__,
        "version": __version__,
        "license": __license__,
        "description": __description__,
        "copyright": __copyright__,
    }
