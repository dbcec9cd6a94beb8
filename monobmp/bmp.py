from __future__ import annotations

import logging
import struct

import numpy as np

from .errors import EncodingIOFailure, InvalidDimensions
from .models import BitmapInfo

logger = logging.getLogger(__name__)

MAGIC = b"BM"
FILE_HEADER = struct.Struct("<2sIII")       # magic, file size, reserved, pixel offset
INFO_HEADER = struct.Struct("<IiiHHIIiiII")  # BITMAPINFOHEADER
HEADER_SIZE = FILE_HEADER.size + INFO_HEADER.size  # 54
# BGRx: index 0 black, index 1 white
PALETTE = b"\x00\x00\x00\x00" + b"\xff\xff\xff\x00"
PIXEL_OFFSET = HEADER_SIZE + len(PALETTE)  # 62
PPM_72DPI = 2835


def row_stride(width: int) -> int:
    """Bytes per stored row: ceil(width / 8) rounded up to a multiple of 4."""
    row_bytes = (width + 7) // 8
    return (row_bytes + 3) // 4 * 4


def file_size(width: int, height: int) -> int:
    return PIXEL_OFFSET + row_stride(width) * height


def pack_rows(buf: np.ndarray) -> np.ndarray:
    """
    buf: HxW, 255 = white. Returns H x stride uint8, MSB-first, zero padded.
    Only an exact 255 sets a bit; anything else is stored as black.
    """
    h, w = buf.shape
    packed = np.packbits(buf == 255, axis=1)
    out = np.zeros((h, row_stride(w)), dtype=np.uint8)
    out[:, :packed.shape[1]] = packed
    return out


def encode(buf: np.ndarray) -> bytes:
    """Serialize a 0/255 pixel buffer as a 1-bpp bottom-up BMP."""
    buf = np.asarray(buf)
    if buf.ndim != 2:
        raise InvalidDimensions(0, 0, f"Expected a 2-D pixel buffer, got shape {buf.shape}")
    h, w = buf.shape
    if w <= 0 or h <= 0:
        raise InvalidDimensions(w, h)

    stride = row_stride(w)
    image_size = stride * h
    total = PIXEL_OFFSET + image_size

    try:
        rows = pack_rows(buf)
        out = bytearray(total)
        FILE_HEADER.pack_into(out, 0, MAGIC, total, 0, PIXEL_OFFSET)
        INFO_HEADER.pack_into(
            out, FILE_HEADER.size,
            INFO_HEADER.size, w, h, 1, 1, 0, image_size,
            PPM_72DPI, PPM_72DPI, 2, 2,
        )
        out[HEADER_SIZE:PIXEL_OFFSET] = PALETTE
        # bottom-up: last source row first
        out[PIXEL_OFFSET:] = rows[::-1].tobytes()
    except MemoryError as exc:
        raise EncodingIOFailure(f"Could not allocate {total} bytes for a {w}x{h} bitmap") from exc

    logger.debug("Encoded %dx%d bitmap (%d bytes)", w, h, total)
    return bytes(out)


def read_info(data: bytes) -> BitmapInfo:
    """Parse and validate the headers of a 1-bpp uncompressed BMP."""
    if len(data) < HEADER_SIZE:
        raise ValueError("BMP data too short")
    magic, size, _reserved, offset = FILE_HEADER.unpack_from(data, 0)
    if magic != MAGIC:
        raise ValueError("Bad BMP magic")
    (header_size, width, height, planes, bpp, compression, image_size,
     x_ppm, y_ppm, colors_used, colors_important) = INFO_HEADER.unpack_from(data, FILE_HEADER.size)
    if header_size < INFO_HEADER.size:
        raise ValueError(f"Unsupported DIB header size: {header_size}")
    if bpp != 1:
        raise ValueError(f"Unsupported bit depth: {bpp}")
    if compression != 0:
        raise ValueError(f"Unsupported compression: {compression}")

    n_colors = colors_used or 2
    if n_colors < 2:
        raise ValueError("1-bpp BMP needs a 2-entry palette")
    pal_start = FILE_HEADER.size + header_size
    if len(data) < pal_start + 4 * n_colors:
        raise ValueError("BMP palette truncated")
    palette = []
    for i in range(n_colors):
        b, g, r, _ = data[pal_start + 4 * i:pal_start + 4 * i + 4]
        palette.append((r, g, b))

    if len(data) < offset + row_stride(width) * abs(height):
        raise ValueError("BMP pixel data truncated")

    return BitmapInfo(
        file_size=size,
        pixel_offset=offset,
        header_size=header_size,
        width=width,
        height=height,
        planes=planes,
        bits_per_pixel=bpp,
        compression=compression,
        image_size=image_size,
        x_ppm=x_ppm,
        y_ppm=y_ppm,
        colors_used=colors_used,
        colors_important=colors_important,
        palette=palette,
    )


def decode(data: bytes) -> np.ndarray:
    """Unpack a 1-bpp BMP into an HxW uint8 buffer of 0/255 values."""
    info = read_info(data)
    w, h = info.width, abs(info.height)
    stride = row_stride(w)
    raw = np.frombuffer(data, dtype=np.uint8, count=stride * h, offset=info.pixel_offset)
    bits = np.unpackbits(raw.reshape((h, stride)), axis=1)[:, :w]
    if info.height > 0:
        bits = bits[::-1]

    # palette index -> black/white by luminance of the entry
    levels = np.array(
        [0 if 0.299 * r + 0.587 * g + 0.114 * b < 128 else 255 for r, g, b in info.palette[:2]],
        dtype=np.uint8,
    )
    return levels[bits]
