"""Abstract manipulation names -> engine parameter keys.

The table is closed: a name without a member here is an error, never a guess.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from image_conversion.exceptions import UnknownManipulation

# No-op for the engine; dropped before translation.
OPTIMIZE = "optimize"


class Manipulation(str, Enum):
    WIDTH = "width"
    HEIGHT = "height"
    BLUR = "blur"
    PIXELATE = "pixelate"
    CROP = "crop"
    MANUAL_CROP = "manualCrop"
    ORIENTATION = "orientation"
    FLIP = "flip"
    FIT = "fit"
    DEVICE_PIXEL_RATIO = "devicePixelRatio"
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    GAMMA = "gamma"
    SHARPEN = "sharpen"
    FILTER = "filter"
    BACKGROUND = "background"
    BORDER = "border"
    QUALITY = "quality"
    FORMAT = "format"
    WATERMARK = "watermark"
    WATERMARK_WIDTH = "watermarkWidth"
    WATERMARK_HEIGHT = "watermarkHeight"
    WATERMARK_FIT = "watermarkFit"
    WATERMARK_PADDING_X = "watermarkPaddingX"
    WATERMARK_PADDING_Y = "watermarkPaddingY"
    WATERMARK_POSITION = "watermarkPosition"
    WATERMARK_OPACITY = "watermarkOpacity"

    @property
    def engine_key(self) -> str:
        return _ENGINE_KEYS[self]


_ENGINE_KEYS: dict[Manipulation, str] = {
    Manipulation.WIDTH: "w",
    Manipulation.HEIGHT: "h",
    Manipulation.BLUR: "blur",
    Manipulation.PIXELATE: "pixel",
    Manipulation.CROP: "fit",
    Manipulation.MANUAL_CROP: "crop",
    Manipulation.ORIENTATION: "or",
    Manipulation.FLIP: "flip",
    Manipulation.FIT: "fit",
    Manipulation.DEVICE_PIXEL_RATIO: "dpr",
    Manipulation.BRIGHTNESS: "bri",
    Manipulation.CONTRAST: "con",
    Manipulation.GAMMA: "gam",
    Manipulation.SHARPEN: "sharp",
    Manipulation.FILTER: "filt",
    Manipulation.BACKGROUND: "bg",
    Manipulation.BORDER: "border",
    Manipulation.QUALITY: "q",
    Manipulation.FORMAT: "fm",
    Manipulation.WATERMARK: "mark",
    Manipulation.WATERMARK_WIDTH: "markw",
    Manipulation.WATERMARK_HEIGHT: "markh",
    Manipulation.WATERMARK_FIT: "markfit",
    Manipulation.WATERMARK_PADDING_X: "markx",
    Manipulation.WATERMARK_PADDING_Y: "marky",
    Manipulation.WATERMARK_POSITION: "markpos",
    Manipulation.WATERMARK_OPACITY: "markalpha",
}


def convert_to_engine_parameter(name: str) -> str:
    """Return the engine key for an abstract manipulation name.

    Raises:
        UnknownManipulation: if ``name`` is not in the table.
    """
    try:
        return Manipulation(name).engine_key
    except ValueError:
        raise UnknownManipulation(name) from None


def prepare_manipulations(group: Mapping[str, Any]) -> dict[str, Any]:
    """Translate a whole group into engine parameters, dropping ``optimize``.

    Keys that translate to the same engine key (``crop``/``fit``) resolve to
    whichever appears last in the group.
    """
    params: dict[str, Any] = {}
    for name, argument in group.items():
        if name == OPTIMIZE:
            continue
        params[convert_to_engine_parameter(name)] = argument
    return params
