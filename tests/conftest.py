"""
Shared pytest fixtures for the hero composite tests.
"""

import base64
import os
import tempfile
from io import BytesIO

# Keep config.py from creating ./files and from reading real Twilio creds.
os.environ.setdefault("FILES_DIR", tempfile.mkdtemp(prefix="hero-files-"))
for _key in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_VERIFY_SERVICE_SID", "PUBLIC_BASE_URL"):
    os.environ[_key] = ""

import pytest
from PIL import Image

from compositor import Compositor
from hero_asset import HeroAsset
from storage_client import LocalStorage

HERO_RED = (220, 20, 20, 255)
BASE_BLUE = (20, 40, 200)


def encode_image(img: Image.Image, fmt: str = "JPEG") -> bytes:
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def to_data_url(raw: bytes, mime: str = "image/jpeg") -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


@pytest.fixture
def hero_path(tmp_path):
    """
    80x120 hero (same 2:3 aspect as the default 800x1200 asset).
    Top half opaque red, bottom half fully transparent.
    """
    hero = Image.new("RGBA", (80, 120), (0, 0, 0, 0))
    hero.paste(Image.new("RGBA", (80, 60), HERO_RED), (0, 0))
    path = tmp_path / "hero.png"
    hero.save(path)
    return path


@pytest.fixture
def hero_asset(hero_path) -> HeroAsset:
    return HeroAsset(hero_path)


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "files")


@pytest.fixture
def compositor(hero_asset, storage) -> Compositor:
    return Compositor(hero_asset=hero_asset, storage=storage)


@pytest.fixture
def base_photo() -> Image.Image:
    return Image.new("RGB", (600, 900), BASE_BLUE)


@pytest.fixture
def photo_bytes(base_photo) -> bytes:
    return encode_image(base_photo)


@pytest.fixture
def photo_data_url(photo_bytes) -> str:
    return to_data_url(photo_bytes)
