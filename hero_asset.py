# hero_asset.py

from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from compositor import MissingAsset
from config import HERO_PATH


class HeroAsset:
    """
    Read-only provider for the hero overlay graphic.

    The Compositor gets one of these at construction, so tests can point it
    at a synthetic PNG instead of the shipped asset.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or HERO_PATH)

    def exists(self) -> bool:
        return self.path.is_file()

    def _open(self) -> Image.Image:
        if not self.exists():
            raise MissingAsset(
                f"Hero overlay not found: {self.path}. "
                "Place your hero.png in assets/ or set HERO_PATH."
            )
        try:
            return Image.open(self.path)
        except (UnidentifiedImageError, OSError) as e:
            raise MissingAsset(f"Hero overlay unreadable: {self.path} ({e})") from e

    def size(self) -> Tuple[int, int]:
        """Native (width, height) without decoding the pixels."""
        with self._open() as img:
            return img.size

    def load(self) -> Image.Image:
        with self._open() as img:
            try:
                return img.convert("RGBA")
            except OSError as e:
                raise MissingAsset(f"Hero overlay unreadable: {self.path} ({e})") from e
