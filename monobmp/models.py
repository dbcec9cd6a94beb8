from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Literal

Strategy = Literal["floyd-steinberg", "threshold"]
ResampleMethod = Literal["nearest", "bilinear", "bicubic", "lanczos"]

TARGET_WIDTH = 300
TARGET_HEIGHT = 150

class ConvertParams(BaseModel):
    width: int = Field(default=TARGET_WIDTH, gt=0)
    height: int = Field(default=TARGET_HEIGHT, gt=0)
    strategy: Strategy = "floyd-steinberg"
    threshold: int = Field(default=128, ge=0, le=255)
    resample: ResampleMethod = "bilinear"

class BitmapInfo(BaseModel):
    file_size: int
    pixel_offset: int
    header_size: int
    width: int
    height: int
    planes: int
    bits_per_pixel: int
    compression: int
    image_size: int
    x_ppm: int
    y_ppm: int
    colors_used: int
    colors_important: int
    # (r, g, b) per palette entry
    palette: List[tuple[int, int, int]] = Field(default_factory=list)
