"""libvips-backed image server.

Takes the short parameter vocabulary (w, h, fit, blur, mark, ...) and turns
one source file into one output file in the cache directory. Output names
are the md5 of the source path plus the sorted parameters, so a repeat
request is served from the file already on disk. Unknown parameters are
ignored, the way an image server ignores unknown query keys.
"""

from __future__ import annotations

import contextlib
import hashlib
import os
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import urlencode

import pyvips  # type: ignore

from image_conversion.exceptions import IOFailure
from image_conversion.logger import get_logger

from .engine import EngineConfig

_logger = get_logger("server")

# fm -> file extension
OUTPUT_FORMATS: dict[str, str] = {
    "jpg": ".jpg",
    "pjpg": ".jpg",
    "png": ".png",
    "gif": ".gif",
    "webp": ".webp",
    "tif": ".tif",
}
_SOURCE_FORMATS: dict[str, str] = {
    ".jpg": "jpg",
    ".jpeg": "jpg",
    ".png": "png",
    ".gif": "gif",
    ".webp": "webp",
    ".tif": "tif",
    ".tiff": "tif",
}
_ALPHA_FORMATS = {"png", "gif", "webp", "tif"}
_DEFAULT_QUALITY = 90

# position -> (fraction of free space on x, on y)
POSITIONS: dict[str, tuple[float, float]] = {
    "top-left": (0.0, 0.0),
    "top": (0.5, 0.0),
    "top-right": (1.0, 0.0),
    "left": (0.0, 0.5),
    "center": (0.5, 0.5),
    "right": (1.0, 0.5),
    "bottom-left": (0.0, 1.0),
    "bottom": (0.5, 1.0),
    "bottom-right": (1.0, 1.0),
}

_NAMED_COLOURS: dict[str, tuple[int, int, int]] = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
}

_RGB_BANDS = 3
_HEX_SHORT = 3
_HEX_LONG = 6
_HEX_ALPHA = 8
_CROP_PARTS = 4


def _as_int(value: Any, default: int | None = None) -> int | None:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def parse_colour(value: Any) -> tuple[int, int, int, int] | None:
    """Parse ``black``, ``fff``, ``ff0000`` or ``50ff0000`` (alpha percent first).

    Returns (r, g, b, a) with a in 0..255, or None when unparseable.
    """
    text = str(value).strip().lower().lstrip("#")
    if text in _NAMED_COLOURS:
        return (*_NAMED_COLOURS[text], 255)
    try:
        if len(text) == _HEX_SHORT:
            r, g, b = (int(c * 2, 16) for c in text)
            return r, g, b, 255
        if len(text) == _HEX_LONG:
            return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16), 255
        if len(text) == _HEX_ALPHA:
            alpha = min(int(text[0:2]), 100)
            return int(text[2:4], 16), int(text[4:6], 16), int(text[6:8], 16), round(alpha * 255 / 100)
    except ValueError:
        return None
    return None


def _dimension(value: Any, image: Any, dpr: float) -> int | None:
    """Pixel size from ``120``, or relative ``10w`` / ``10h`` (percent of the image)."""
    if value is None:
        return None
    text = str(value).strip().lower()
    if text.endswith("w"):
        pct = _as_float(text[:-1], -1)
        return round(image.width * pct / 100) if pct >= 0 else None
    if text.endswith("h"):
        pct = _as_float(text[:-1], -1)
        return round(image.height * pct / 100) if pct >= 0 else None
    px = _as_float(text, -1)
    return round(px * dpr) if px >= 0 else None


def _map_colour_bands(image: Any, fn: Callable[[Any], Any]) -> Any:
    """Apply ``fn`` to the colour bands only; alpha passes through untouched."""
    if image.hasalpha():
        alpha = image[image.bands - 1]
        colour = image.extract_band(0, n=image.bands - 1)
        return fn(colour).cast("uchar").bandjoin(alpha)
    return fn(image).cast("uchar")


def _ink(image: Any, rgba: tuple[int, int, int, int]) -> list[int]:
    return list(rgba[: image.bands]) if image.hasalpha() else list(rgba[:_RGB_BANDS])


class VipsServer:
    """Image engine for the ``vips`` driver."""

    def __init__(self, config: EngineConfig):
        self.config = config

    # ---- naming ----------------------------------------------------
    def output_format(self, filename: str, params: Mapping[str, Any]) -> str:
        fm = str(params.get("fm", "")).lower()
        if fm in OUTPUT_FORMATS:
            return fm
        return _SOURCE_FORMATS.get(os.path.splitext(filename)[1].lower(), "jpg")

    def cache_filename(self, filename: str, params: Mapping[str, Any]) -> str:
        query = urlencode(sorted((str(k), str(v)) for k, v in params.items()))
        source_path = os.path.join(self.config.source, filename)
        if self.config.watermarks:
            query = f"{query}&watermarks={self.config.watermarks}"
        digest = hashlib.md5(f"{source_path}?{query}".encode(), usedforsecurity=False).hexdigest()
        return digest + OUTPUT_FORMATS[self.output_format(filename, params)]

    # ---- public API ------------------------------------------------
    def make_image(self, filename: str, params: Mapping[str, Any]) -> str:
        source_path = os.path.join(self.config.source, filename)
        if not os.path.isfile(source_path):
            raise IOFailure(source_path, "read", "source image not found")

        out_name = self.cache_filename(filename, params)
        out_path = os.path.join(self.config.cache, out_name)
        if os.path.isfile(out_path):
            _logger.debug("cache hit: %s -> %s", source_path, out_name)
            return out_name

        fmt = self.output_format(filename, params)
        _logger.debug("processing %s params=%s fm=%s", source_path, dict(params), fmt)
        try:
            image = self._load(source_path)
            image = self.run(image, params)
            self._save(image, out_path, fmt, params)
        except pyvips.Error as e:
            # drop a half-written output so it is never served from cache
            with contextlib.suppress(OSError):
                os.unlink(out_path)
            _logger.error("processing failed: %s -> %s", source_path, e)
            raise IOFailure(source_path, "process", str(e)) from e
        return out_name

    def run(self, image: Any, params: Mapping[str, Any]) -> Any:
        """Apply every manipulation in a fixed order."""
        dpr = min(max(_as_float(params.get("dpr"), 1.0), 1.0), 8.0)
        image = self._orientation(image, params)
        image = self._manual_crop(image, params)
        image = self._size(image, params, dpr)
        image = self._brightness(image, params)
        image = self._contrast(image, params)
        image = self._gamma(image, params)
        image = self._sharpen(image, params)
        image = self._filter(image, params)
        image = self._flip(image, params)
        image = self._blur(image, params)
        image = self._watermark(image, params, dpr)
        image = self._background(image, params)
        return self._border(image, params, dpr)

    # ---- io --------------------------------------------------------
    def _load(self, path: str) -> Any:
        image = pyvips.Image.new_from_file(path)
        if image.interpretation != "srgb":
            image = image.colourspace("srgb")
        if image.format != "uchar":
            image = image.cast("uchar")
        return image

    def _save(self, image: Any, out_path: str, fmt: str, params: Mapping[str, Any]) -> None:
        if fmt not in _ALPHA_FORMATS and image.hasalpha():
            bg = parse_colour(params.get("bg", "white")) or (255, 255, 255, 255)
            image = image.flatten(background=list(bg[:_RGB_BANDS])).cast("uchar")

        options: dict[str, Any] = {}
        if fmt in {"jpg", "pjpg", "webp"}:
            q = _as_int(params.get("q"), _DEFAULT_QUALITY) or _DEFAULT_QUALITY
            options["Q"] = min(max(q, 1), 100)
        if fmt == "pjpg":
            options["interlace"] = True
        image.write_to_file(out_path, **options)
        _logger.debug("written: %s", out_path)

    # ---- manipulators ----------------------------------------------
    def _orientation(self, image: Any, params: Mapping[str, Any]) -> Any:
        orient = str(params.get("or", "auto")).lower()
        if orient == "auto":
            return image.autorot()
        # counter-clockwise angles
        if orient == "90":
            return image.rot270()
        if orient == "180":
            return image.rot180()
        if orient == "270":
            return image.rot90()
        return image

    def _manual_crop(self, image: Any, params: Mapping[str, Any]) -> Any:
        if "crop" not in params:
            return image
        parts = [_as_int(p) for p in str(params["crop"]).split(",")]
        if len(parts) != _CROP_PARTS or any(p is None for p in parts):
            return image
        w, h, x, y = (int(p) for p in parts)  # type: ignore[arg-type]
        if w <= 0 or h <= 0:
            return image
        x = min(max(x, 0), image.width - 1)
        y = min(max(y, 0), image.height - 1)
        return image.crop(x, y, min(w, image.width - x), min(h, image.height - y))

    def _size(self, image: Any, params: Mapping[str, Any], dpr: float) -> Any:
        w = _as_int(params.get("w"))
        h = _as_int(params.get("h"))
        w = round(w * dpr) if w and w > 0 else None
        h = round(h * dpr) if h and h > 0 else None
        if not w and not h:
            return image

        src_w, src_h = image.width, image.height
        if not w:
            w = max(1, round(h * src_w / src_h))  # type: ignore[operator]
        if not h:
            h = max(1, round(w * src_h / src_w))

        fit = str(params.get("fit", "contain")).lower()
        if fit == "stretch":
            return image.resize(w / src_w, vscale=h / src_h)
        if fit == "crop" or fit.startswith("crop-"):
            return self._cover(image, w, h, fit)

        scale = min(w / src_w, h / src_h)
        if fit == "max":
            scale = min(scale, 1.0)
        resized = image.resize(scale) if scale != 1.0 else image
        if fit != "fill":
            return resized

        background = [0] * resized.bands if resized.hasalpha() else [255] * resized.bands
        return resized.embed(
            (w - resized.width) // 2,
            (h - resized.height) // 2,
            w,
            h,
            extend="background",
            background=background,
        )

    def _cover(self, image: Any, w: int, h: int, fit: str) -> Any:
        fx, fy = POSITIONS["center"]
        position = fit[len("crop-") :] if fit.startswith("crop-") else ""
        if position in POSITIONS:
            fx, fy = POSITIONS[position]

        scale = max(w / image.width, h / image.height)
        resized = image.resize(scale)
        cw, ch = min(w, resized.width), min(h, resized.height)
        left = round((resized.width - cw) * fx)
        top = round((resized.height - ch) * fy)
        return resized.crop(left, top, cw, ch)

    def _brightness(self, image: Any, params: Mapping[str, Any]) -> Any:
        bri = _as_int(params.get("bri"))
        if not bri or not -100 <= bri <= 100:  # noqa: PLR2004
            return image
        offset = bri * 255 / 100
        return _map_colour_bands(image, lambda c: c.linear(1, offset))

    def _contrast(self, image: Any, params: Mapping[str, Any]) -> Any:
        con = _as_int(params.get("con"))
        if not con or not -100 <= con <= 100:  # noqa: PLR2004
            return image
        factor = (100 + con) / 100
        return _map_colour_bands(image, lambda c: c.linear(factor, 128 * (1 - factor)))

    def _gamma(self, image: Any, params: Mapping[str, Any]) -> Any:
        if "gam" not in params:
            return image
        gam = _as_float(params.get("gam"), 1.0)
        if not 0.1 <= gam <= 9.99 or gam == 1.0:  # noqa: PLR2004
            return image
        return _map_colour_bands(image, lambda c: c.gamma(exponent=gam))

    def _sharpen(self, image: Any, params: Mapping[str, Any]) -> Any:
        amount = _as_int(params.get("sharp"))
        if not amount or not 0 < amount <= 100:  # noqa: PLR2004
            return image
        sharpened = image.sharpen(sigma=0.5 + amount / 50)
        if sharpened.interpretation != "srgb":
            sharpened = sharpened.colourspace("srgb")
        return sharpened.cast("uchar")

    def _filter(self, image: Any, params: Mapping[str, Any]) -> Any:
        filt = str(params.get("filt", "")).lower()
        if filt == "greyscale":
            return image.colourspace("b-w").colourspace("srgb")
        return image

    def _flip(self, image: Any, params: Mapping[str, Any]) -> Any:
        flip = str(params.get("flip", "")).lower()
        if flip in {"h", "both"}:
            image = image.fliphor()
        if flip in {"v", "both"}:
            image = image.flipver()
        return image

    def _blur(self, image: Any, params: Mapping[str, Any]) -> Any:
        blur = _as_float(params.get("blur"), 0.0)
        if not 0 < blur <= 100:  # noqa: PLR2004
            return image
        return image.gaussblur(blur / 2).cast("uchar")

    def _watermark(self, image: Any, params: Mapping[str, Any], dpr: float) -> Any:
        if "mark" not in params:
            return image
        mark_name = params["mark"]
        if not mark_name:
            raise IOFailure(str(self.config.watermarks or "."), "watermark", "empty watermark filename")
        if not self.config.watermarks:
            raise IOFailure(str(mark_name), "watermark", "no watermark directory configured")
        mark_path = os.path.join(self.config.watermarks, str(mark_name))
        if not os.path.isfile(mark_path):
            raise IOFailure(mark_path, "read", "watermark not found")

        mark = self._load(mark_path)
        mw = _dimension(params.get("markw"), image, dpr)
        mh = _dimension(params.get("markh"), image, dpr)
        scales = []
        if mw:
            scales.append(mw / mark.width)
        if mh:
            scales.append(mh / mark.height)
        if scales:
            # markfit: only "contain" is supported
            mark = mark.resize(min(scales))

        if not mark.hasalpha():
            mark = mark.bandjoin(255)
        alpha = _as_int(params.get("markalpha"), 100)
        if alpha is not None and 0 <= alpha < 100:  # noqa: PLR2004
            mark = (mark * [1, 1, 1, alpha / 100]).cast("uchar")

        pad_x = _dimension(params.get("markx"), image, dpr) or 0
        pad_y = _dimension(params.get("marky"), image, dpr) or 0
        fx, fy = POSITIONS.get(str(params.get("markpos", "bottom-right")).lower(), POSITIONS["bottom-right"])
        x = round((image.width - mark.width) * fx) + (pad_x if fx == 0 else -pad_x if fx == 1 else 0)
        y = round((image.height - mark.height) * fy) + (pad_y if fy == 0 else -pad_y if fy == 1 else 0)

        had_alpha = image.hasalpha()
        base = image if had_alpha else image.bandjoin(255)
        out = base.composite2(mark, "over", x=x, y=y).cast("uchar")
        return out if had_alpha else out.extract_band(0, n=_RGB_BANDS)

    def _background(self, image: Any, params: Mapping[str, Any]) -> Any:
        if "bg" not in params or not image.hasalpha():
            return image
        colour = parse_colour(params["bg"])
        if colour is None:
            return image
        return image.flatten(background=list(colour[:_RGB_BANDS])).cast("uchar")

    def _border(self, image: Any, params: Mapping[str, Any], dpr: float) -> Any:
        if "border" not in params:
            return image
        parts = [p.strip() for p in str(params["border"]).split(",")]
        width = _dimension(parts[0], image, dpr)
        colour = parse_colour(parts[1]) if len(parts) > 1 else (0, 0, 0, 255)
        method = parts[2].lower() if len(parts) > 2 else "overlay"  # noqa: PLR2004
        if not width or colour is None:
            return image

        ink = _ink(image, colour)
        w, h = image.width, image.height
        if method == "expand":
            return image.embed(width, width, w + 2 * width, h + 2 * width, extend="background", background=ink)

        width = min(width, w, h)
        image = image.draw_rect(ink, 0, 0, w, width, fill=True)
        image = image.draw_rect(ink, 0, h - width, w, width, fill=True)
        image = image.draw_rect(ink, 0, 0, width, h, fill=True)
        return image.draw_rect(ink, w - width, 0, width, h, fill=True)
