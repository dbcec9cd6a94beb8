from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .models import TARGET_HEIGHT, TARGET_WIDTH, ConvertParams

BASE = Path(__file__).resolve().parent.parent
load_dotenv(BASE / ".env")


@dataclass(frozen=True)
class Settings:
    width: int
    height: int
    dither: str
    threshold: int
    max_upload_bytes: int
    log_dir: Path
    log_level: str
    host: str
    port: int

    def params(self, **overrides) -> ConvertParams:
        """Default conversion parameters, with per-request overrides."""
        values = {
            "width": self.width,
            "height": self.height,
            "strategy": self.dither,
            "threshold": self.threshold,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ConvertParams.model_validate(values)


def load_settings() -> Settings:
    return Settings(
        width=int(os.environ.get("MONOBMP_WIDTH", TARGET_WIDTH)),
        height=int(os.environ.get("MONOBMP_HEIGHT", TARGET_HEIGHT)),
        dither=os.environ.get("MONOBMP_DITHER", "floyd-steinberg"),
        threshold=int(os.environ.get("MONOBMP_THRESHOLD", 128)),
        max_upload_bytes=int(os.environ.get("MONOBMP_MAX_UPLOAD_BYTES", 10 * 1024 * 1024)),
        log_dir=Path(os.environ.get("MONOBMP_LOG_DIR", "./logs")),
        log_level=os.environ.get("MONOBMP_LOG_LEVEL", "INFO").upper(),
        host=os.environ.get("MONOBMP_HOST", "127.0.0.1"),
        port=int(os.environ.get("MONOBMP_PORT", 8000)),
    )
