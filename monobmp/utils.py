from __future__ import annotations
import re
from pathlib import Path

def safe_filename(s: str) -> str:
    s = s.strip()
    s = re.sub(r"[^a-zA-Z0-9._-]+", "_", s)
    return s[:120] or "file"

def bmp_filename(name: str | None) -> str:
    """Download name for a converted upload: 'photo.jpg' -> 'photo.bmp'."""
    stem = Path(name or "").stem
    return safe_filename(stem or "image") + ".bmp"

def ensure_dir(p: str | Path) -> None:
    Path(p).mkdir(parents=True, exist_ok=True)
