from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List, Optional

import numpy as np
from PIL import Image, ImageOps

from . import bmp
from .config import load_settings
from .dither import rasterize
from .errors import DecodeUnavailable, MonoBmpError
from .logging_config import setup_logging
from .models import ConvertParams
from .utils import ensure_dir

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    binary: np.ndarray
    bmp: bytes
    width: int
    height: int
    strategy: str


def _to_8bit(img: Image.Image) -> Image.Image:
    """16-bit (and 32-bit int) grayscale -> "L", keeping the high byte."""
    arr = np.asarray(img).astype(np.int64)
    return Image.fromarray(np.clip(arr // 256, 0, 255).astype(np.uint8))


def decode_image(data: bytes) -> Image.Image:
    """Decode image file bytes (PNG, JPEG, ...) into an RGBA Pillow image."""
    if not data:
        raise DecodeUnavailable("Empty image data")
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            if img.mode == "I" or img.mode.startswith("I;16"):
                img = _to_8bit(img)
            return img.convert("RGBA")
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeUnavailable(f"Could not decode image: {exc}") from exc


def process(image: Image.Image | np.ndarray, params: ConvertParams) -> np.ndarray:
    return rasterize(
        image,
        params.width,
        params.height,
        strategy=params.strategy,
        level=params.threshold,
        method=params.resample,
    )


def convert_bytes(data: bytes, params: Optional[ConvertParams] = None) -> ConversionResult:
    """decode -> process -> encode"""
    if params is None:
        params = ConvertParams()

    image = decode_image(data)
    logger.debug("Decoded %s image", image.size)

    binary = process(image, params)
    logger.debug("Binarized to %dx%d with %s", params.width, params.height, params.strategy)

    encoded = bmp.encode(binary)
    return ConversionResult(
        binary=binary,
        bmp=encoded,
        width=params.width,
        height=params.height,
        strategy=params.strategy,
    )


def convert_file(in_path: str | Path, out_path: str | Path | None = None,
                 params: Optional[ConvertParams] = None) -> Path:
    in_path = Path(in_path)
    try:
        data = in_path.read_bytes()
    except OSError as exc:
        raise DecodeUnavailable(f"Could not read {in_path}: {exc}") from exc

    result = convert_bytes(data, params)

    out = Path(out_path) if out_path else in_path.with_suffix(".bmp")
    ensure_dir(out.parent)
    out.write_bytes(result.bmp)
    logger.info("%s -> %s (%d bytes, %s)", in_path, out, len(result.bmp), result.strategy)
    return out


def to_preview(binary: np.ndarray) -> Image.Image:
    """Grayscale ("L") image of a 0/255 buffer, for display."""
    return Image.fromarray(np.asarray(binary, dtype=np.uint8))


def show_viewer(binary: np.ndarray, title: str = "BMP preview", zoom: int = 1):
    import matplotlib.pyplot as plt

    h, w = binary.shape
    plt.figure(figsize=(w / 100 * zoom, h / 100 * zoom))
    plt.imshow(binary, cmap="gray", vmin=0, vmax=255, interpolation="nearest")
    plt.axis("off")
    plt.title(title)
    plt.show()


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    ap = argparse.ArgumentParser(prog="monobmp", description="Image -> 1-bit monochrome BMP converter")
    ap.add_argument("inputs", nargs="+", help="Input image(s) (png/jpg/...) OR .bmp when using --view")
    ap.add_argument("--out", help="Output .bmp path (single input only; default: same name .bmp)")
    ap.add_argument("--width", type=int, default=settings.width)
    ap.add_argument("--height", type=int, default=settings.height)
    ap.add_argument("--dither", choices=["floyd-steinberg", "threshold"], default=settings.dither)
    ap.add_argument("--threshold", type=int, default=settings.threshold)
    ap.add_argument("--resample", choices=["nearest", "bilinear", "bicubic", "lanczos"], default="bilinear")

    ap.add_argument("--preview", action="store_true", help="Show preview window after conversion")
    ap.add_argument("--zoom", type=int, default=2, help="Viewer zoom factor")
    ap.add_argument("--view", action="store_true", help="Open and preview an existing 1-bit .bmp file")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    setup_logging(settings.log_dir, settings.log_level)
    args = build_parser().parse_args(argv)

    if args.out and len(args.inputs) > 1:
        logger.error("--out can only be used with a single input")
        return 2

    if args.view:
        for path in args.inputs:
            try:
                binary = bmp.decode(Path(path).read_bytes())
            except (OSError, ValueError) as exc:
                logger.error("Cannot view %s: %s", path, exc)
                return 1
            show_viewer(binary, title=os.path.basename(path), zoom=args.zoom)
        return 0

    try:
        params = ConvertParams(
            width=args.width,
            height=args.height,
            strategy=args.dither,
            threshold=args.threshold,
            resample=args.resample,
        )
    except ValueError as exc:
        logger.error("Invalid parameters: %s", exc)
        return 2

    for path in args.inputs:
        try:
            out = convert_file(path, args.out, params)
        except MonoBmpError as exc:
            logger.error("Conversion failed for %s: %s", path, exc)
            return 1
        print(f"OK -> {out}  ({bmp.file_size(params.width, params.height)}B)")

        if args.preview:
            show_viewer(bmp.decode(out.read_bytes()), title=out.name, zoom=args.zoom)
    return 0


if __name__ == "__main__":
    sys.exit(main())
