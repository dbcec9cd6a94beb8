"""Tests for the HTTP upload / download endpoints."""
import dataclasses
import importlib
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pydantic import ValidationError

from monobmp import main as main_module
from monobmp.errors import EncodingIOFailure
from monobmp.main import app

from .conftest import make_image_bytes


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_convert_returns_bmp_download(client, png_bytes):
    resp = client.post("/api/convert", files={"image": ("holiday photo.png", png_bytes, "image/png")})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/bmp"
    assert resp.headers["content-disposition"] == 'attachment; filename="holiday_photo.bmp"'
    assert len(resp.content) == 6062
    assert resp.content[:2] == b"BM"


def test_convert_threshold_form_field(client):
    png = make_image_bytes(color=(250, 250, 250))
    resp = client.post(
        "/api/convert",
        files={"image": ("white.png", png, "image/png")},
        data={"dither": "threshold", "threshold": "128"},
    )
    assert resp.status_code == 200
    with Image.open(BytesIO(resp.content)) as img:
        assert set(img.convert("L").getdata()) == {255}


def test_rejects_non_image_upload(client):
    resp = client.post("/api/convert", files={"image": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Uploaded file is not an image"


def test_rejects_undecodable_image(client):
    resp = client.post("/api/convert", files={"image": ("bad.png", b"\x89PNG broken", "image/png")})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Could not load image from file"


def test_rejects_unknown_strategy(client, png_bytes):
    resp = client.post(
        "/api/convert",
        files={"image": ("a.png", png_bytes, "image/png")},
        data={"dither": "atkinson"},
    )
    assert resp.status_code == 422


def test_rejects_oversized_upload(client, png_bytes, monkeypatch):
    small = dataclasses.replace(main_module.settings, max_upload_bytes=10)
    monkeypatch.setattr(main_module, "settings", small)
    resp = client.post("/api/convert", files={"image": ("a.png", png_bytes, "image/png")})
    assert resp.status_code == 413


def test_preview_returns_png(client, png_bytes):
    resp = client.post("/api/preview", files={"image": ("a.png", png_bytes, "image/png")})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    with Image.open(BytesIO(resp.content)) as img:
        assert img.size == (300, 150)
        assert set(img.getdata()) <= {0, 255}


def test_encoding_failure_maps_to_500(client, png_bytes, monkeypatch):
    def failing_convert(content, params):
        raise EncodingIOFailure("no memory")

    monkeypatch.setattr(main_module, "convert_bytes", failing_convert)
    resp = client.post("/api/convert", files={"image": ("a.png", png_bytes, "image/png")})
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Conversion failed: no memory"


def test_invalid_default_strategy_fails_at_import(monkeypatch):
    monkeypatch.setenv("MONOBMP_DITHER", "atkinson")
    try:
        with pytest.raises(ValidationError):
            importlib.reload(main_module)
    finally:
        monkeypatch.delenv("MONOBMP_DITHER")
        importlib.reload(main_module)


def test_run_serves_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(main_module.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    main_module.run()
    assert calls == [(main_module.app, {
        "host": main_module.settings.host,
        "port": main_module.settings.port,
        "log_config": None,
    })]
