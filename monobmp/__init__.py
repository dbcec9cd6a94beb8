from .bmp import decode, encode, read_info
from .convert import ConversionResult, convert_bytes, convert_file, decode_image, process
from .dither import binarize, dither_floyd_steinberg, rasterize, resample, threshold, to_grayscale
from .errors import DecodeUnavailable, EncodingIOFailure, InvalidDimensions, MonoBmpError
from .models import ConvertParams

__all__ = [
    "ConversionResult",
    "ConvertParams",
    "DecodeUnavailable",
    "EncodingIOFailure",
    "InvalidDimensions",
    "MonoBmpError",
    "binarize",
    "convert_bytes",
    "convert_file",
    "decode",
    "decode_image",
    "dither_floyd_steinberg",
    "encode",
    "process",
    "rasterize",
    "read_info",
    "resample",
    "threshold",
    "to_grayscale",
]
