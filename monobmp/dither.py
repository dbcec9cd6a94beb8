from __future__ import annotations

import logging
from typing import Callable, Dict, Union

import numpy as np
from PIL import Image

from .errors import InvalidDimensions

logger = logging.getLogger(__name__)

# ITU-R BT.601
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}

ImageSource = Union[Image.Image, np.ndarray]


def _check_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidDimensions(width, height)


def _as_image(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    arr = np.asarray(source)
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    if arr.ndim == 2 or (arr.ndim == 3 and arr.shape[2] in (3, 4)):
        return Image.fromarray(arr)
    raise ValueError(f"Unsupported pixel array shape: {arr.shape}")


def resample(source: ImageSource, target_w: int, target_h: int, method: str = "bilinear") -> np.ndarray:
    """
    Stretch (or squash) the source to exactly target_w x target_h.
    Aspect ratio is not preserved. Returns an HxWx4 uint8 RGBA array.
    """
    _check_dimensions(target_w, target_h)
    try:
        resample_filter = RESAMPLE_FILTERS[method]
    except KeyError:
        raise ValueError(f"Unknown resample method: {method}") from None

    img = _as_image(source)
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    if img.size != (target_w, target_h):
        logger.debug("Resizing %s -> %s (%s)", img.size, (target_w, target_h), method)
        img = img.resize((target_w, target_h), resample=resample_filter)
    return np.array(img, dtype=np.uint8)


def to_grayscale(img: ImageSource) -> np.ndarray:
    """Luminance 0.299R + 0.587G + 0.114B per pixel; alpha is ignored."""
    if isinstance(img, Image.Image):
        img = np.array(img.convert("RGB"), dtype=np.uint8)
    arr = np.asarray(img)
    if arr.ndim == 2:
        return arr.astype(np.float64)
    if arr.ndim != 3 or arr.shape[2] < 3:
        raise ValueError(f"Unsupported pixel array shape: {arr.shape}")

    rgb = arr[:, :, :3].astype(np.float64)
    r, g, b = LUMA_WEIGHTS
    return r * rgb[:, :, 0] + g * rgb[:, :, 1] + b * rgb[:, :, 2]


def dither_floyd_steinberg(gray: np.ndarray, level: int = 128) -> np.ndarray:
    """
    Floyd–Steinberg error diffusion: returns HxW uint8 with values 0 or 255.
    The input buffer is left untouched; diffusion runs on a private float copy.
    """
    a = np.array(gray, dtype=np.float64)
    if a.ndim != 2:
        raise ValueError(f"Expected a 2-D intensity buffer, got shape {a.shape}")
    h, w = a.shape

    for y in range(h):
        for x in range(w):
            old = a[y, x]
            new = 0.0 if old < level else 255.0
            err = old - new
            a[y, x] = new
            if x + 1 < w:
                a[y, x + 1] += err * 7 / 16
            if y + 1 < h:
                if x > 0:
                    a[y + 1, x - 1] += err * 3 / 16
                a[y + 1, x] += err * 5 / 16
                if x + 1 < w:
                    a[y + 1, x + 1] += err * 1 / 16
    return a.astype(np.uint8)


def threshold(gray: np.ndarray, level: int = 128) -> np.ndarray:
    """Flat threshold, no error propagated: 0 if value < level else 255."""
    a = np.asarray(gray)
    if a.ndim != 2:
        raise ValueError(f"Expected a 2-D intensity buffer, got shape {a.shape}")
    return np.where(a < level, 0, 255).astype(np.uint8)


STRATEGIES: Dict[str, Callable[[np.ndarray, int], np.ndarray]] = {
    "floyd-steinberg": dither_floyd_steinberg,
    "threshold": threshold,
}


def binarize(gray: np.ndarray, strategy: str = "floyd-steinberg", level: int = 128) -> np.ndarray:
    try:
        fn = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown binarization strategy: {strategy}") from None
    return fn(gray, level)


def rasterize(
    source: ImageSource,
    width: int,
    height: int,
    strategy: str = "floyd-steinberg",
    level: int = 128,
    method: str = "bilinear",
) -> np.ndarray:
    """resample -> grayscale -> binarize"""
    rgba = resample(source, width, height, method=method)
    gray = to_grayscale(rgba)
    return binarize(gray, strategy=strategy, level=level)
