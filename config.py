"""
Global configuration for the hero composite server.

Loads secrets from .env (TWILIO_*, PUBLIC_BASE_URL, FRONTEND_ORIGIN),
and defines paths used across the app.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


BASE_DIR = Path(__file__).resolve().parent

FILES_DIR = Path(os.getenv("FILES_DIR", str(BASE_DIR / "files")))
FILES_DIR.mkdir(parents=True, exist_ok=True)


# ----------------------------
# Server
# ----------------------------

PORT = int(os.getenv("PORT", "5000"))
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "*")

# Set when the server sits behind a proxy and the request host is not public.
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL")

# Default target for the share QR code.
APP_URL = os.getenv("APP_URL", "http://localhost:5173")

# Phone photos arrive base64-encoded inside the JSON body.
MAX_PHOTO_BYTES = int(os.getenv("MAX_PHOTO_BYTES", str(25 * 1024 * 1024)))


# ----------------------------
# Hero overlay
# ----------------------------
# Place the overlay graphic under ./assets/ to match the default below.

HERO_PATH = Path(
    os.getenv(
        "HERO_PATH",
        str(BASE_DIR / "assets" / "hero.png"),
    )
)

JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "90"))


# ----------------------------
# Output retention
# ----------------------------

# 0 keeps composites forever.
OUTPUT_MAX_AGE_SECONDS = int(os.getenv("OUTPUT_MAX_AGE_SECONDS", "0"))
OUTPUT_SWEEP_INTERVAL_SECONDS = int(os.getenv("OUTPUT_SWEEP_INTERVAL_SECONDS", "600"))


# ----------------------------
# Twilio Verify
# ----------------------------

TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_VERIFY_SERVICE_SID = os.getenv("TWILIO_VERIFY_SERVICE_SID")
TWILIO_TIMEOUT_SECONDS = float(os.getenv("TWILIO_TIMEOUT_SECONDS", "15"))
