from __future__ import annotations
import logging
from io import BytesIO
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, UploadFile, File, Form, status
from fastapi.responses import Response
from pydantic import ValidationError

from .config import load_settings
from .convert import convert_bytes, to_preview
from .errors import DecodeUnavailable, MonoBmpError
from .logging_config import setup_logging
from .models import ConvertParams
from .utils import bmp_filename

settings = load_settings()
# Fail at startup, not on every request, when the env defaults are invalid
DEFAULT_PARAMS = settings.params()

setup_logging(settings.log_dir, settings.log_level)
logger = logging.getLogger(__name__)
logger.info("=== Starting monobmp (%dx%d, %s) ===", settings.width, settings.height, settings.dither)

app = FastAPI(title=f"Monochrome BMP {settings.width}x{settings.height}")


def _read_upload(image: UploadFile) -> bytes:
    if not (image.content_type or "").startswith("image/"):
        logger.warning("Rejected upload %r with content type %r", image.filename, image.content_type)
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Uploaded file is not an image")

    content = image.file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Image exceeds {settings.max_upload_bytes} bytes",
        )
    return content


def _params(dither: Optional[str], threshold: Optional[int]) -> ConvertParams:
    try:
        return settings.params(strategy=dither, threshold=threshold)
    except ValidationError as e:
        raise HTTPException(422, e.errors(include_url=False, include_context=False))


def _convert(content: bytes, params: ConvertParams, filename: Optional[str]):
    try:
        return convert_bytes(content, params)
    except DecodeUnavailable as e:
        logger.warning("Could not decode %r: %s", filename, e)
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Could not load image from file")
    except MonoBmpError as e:
        logger.error("Conversion of %r failed: %s", filename, e)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Conversion failed: {e}")


@app.get("/health")
def health():
    return {"status": "ok", "width": settings.width, "height": settings.height}


@app.post("/api/convert")
def api_convert(
    image: UploadFile = File(...),
    dither: Optional[str] = Form(None),
    threshold: Optional[int] = Form(None),
):
    """Convert an uploaded image and return it as a 1-bit BMP download."""
    content = _read_upload(image)
    params = _params(dither, threshold)
    result = _convert(content, params, image.filename)

    fn = bmp_filename(image.filename)
    logger.info("Converted %r -> %s (%d bytes, %s)", image.filename, fn, len(result.bmp), result.strategy)
    return Response(content=result.bmp, media_type="image/bmp", headers={
        "Content-Disposition": f"attachment; filename=\"{fn}\""
    })


@app.post("/api/preview")
def api_preview(
    image: UploadFile = File(...),
    dither: Optional[str] = Form(None),
    threshold: Optional[int] = Form(None),
):
    """Render the monochrome result as PNG without producing a download"""
    content = _read_upload(image)
    params = _params(dither, threshold)
    result = _convert(content, params, image.filename)

    buf = BytesIO()
    to_preview(result.binary).save(buf, format="PNG")
    return Response(content=buf.getvalue(), media_type="image/png")


def run():
    """Serve the app with uvicorn on MONOBMP_HOST:MONOBMP_PORT."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
