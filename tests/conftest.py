import os
import tempfile
from io import BytesIO

import pytest
from PIL import Image

# Keep log files out of the working tree; must be set before monobmp.main is imported
os.environ.setdefault("MONOBMP_LOG_DIR", tempfile.mkdtemp(prefix="monobmp-logs-"))


def make_image_bytes(size=(64, 48), color=(200, 200, 200), fmt="PNG", mode="RGB") -> bytes:
    buf = BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def gradient_png() -> bytes:
    """Horizontal black-to-white gradient, 640x320."""
    row = bytes(int(x * 255 / 639) for x in range(640))
    img = Image.frombytes("L", (640, 1), row).resize((640, 320)).convert("RGB")
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
