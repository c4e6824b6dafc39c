from __future__ import annotations

import os
import tempfile
import threading
import time
import uuid
from pathlib import Path
from typing import List, Optional

from PIL import Image

from compositor import CompositeResult, ProcessingFailure
from config import FILES_DIR, JPEG_QUALITY

FILES_ROUTE = "/files"
OUTPUT_PREFIX = "composite_"
OUTPUT_SUFFIX = ".jpg"


class LocalStorage:
    """
    Writes composites into the public files directory.
    """

    def __init__(self, files_dir: Optional[Path] = None):
        self.files_dir = Path(files_dir or FILES_DIR)
        self.files_dir.mkdir(parents=True, exist_ok=True)

    def save_jpeg(self, image: Image.Image, quality: int = JPEG_QUALITY) -> CompositeResult:
        """
        Encode to a temp file in the same directory, then rename into place,
        so a failed encode never leaves a half-written composite behind.
        """
        filename = f"{OUTPUT_PREFIX}{uuid.uuid4().hex}{OUTPUT_SUFFIX}"
        final_path = self.files_dir / filename

        fd, tmp_name = tempfile.mkstemp(dir=self.files_dir, suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                image.save(f, format="JPEG", quality=quality)
            os.replace(tmp_name, final_path)
        except (OSError, ValueError) as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise ProcessingFailure(f"could not write composite: {e}") from e

        return CompositeResult(
            filename=filename,
            path=final_path,
            width=image.width,
            height=image.height,
        )

    def list_outputs(self) -> List[Path]:
        return sorted(self.files_dir.glob(f"{OUTPUT_PREFIX}*{OUTPUT_SUFFIX}"))

    def sweep_expired(self, max_age_seconds: int, now: Optional[float] = None) -> int:
        """
        Delete composites older than max_age_seconds. Returns how many went.
        """
        if max_age_seconds <= 0:
            return 0

        now = time.time() if now is None else now
        removed = 0
        for path in self.list_outputs():
            try:
                if now - path.stat().st_mtime > max_age_seconds:
                    path.unlink()
                    removed += 1
            except FileNotFoundError:
                # Another sweeper got there first.
                continue

        if removed:
            print(f"[storage] Swept {removed} expired composite(s)")
        return removed


def public_url(filename: str, base_url: str) -> str:
    """
    Absolute URL under the static files mount, e.g.
    https://host/files/composite_<hex>.jpg
    """
    return f"{base_url.rstrip('/')}{FILES_ROUTE}/{filename}"


# ============================================================
# SWEEPER
# ============================================================

class OutputSweeper:
    def __init__(self, storage: LocalStorage, max_age_seconds: int, interval_seconds: int):
        self.storage = storage
        self.max_age_seconds = max_age_seconds
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._t = threading.Thread(target=self._run, daemon=True)

    def start(self):
        self._t.start()

    def stop(self):
        self._stop.set()
        self._t.join(timeout=2)

    def _run(self):
        while not self._stop.is_set():
            try:
                self.storage.sweep_expired(self.max_age_seconds)
            except OSError as e:
                print(f"[storage] Sweep failed: {e}")
            self._stop.wait(self.interval_seconds)
