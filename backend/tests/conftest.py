from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

# Settings are read at import time, so point them at throwaway storage first.
_TMP = Path(tempfile.mkdtemp(prefix="overlaykit-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP / 'test.db'}")
os.environ.setdefault("PRESET_LOGOS_PATH", str(_TMP / "preset-logos.json"))
os.environ.setdefault("FONT_PATH", "")

(_TMP / "preset-logos.json").write_text(
    json.dumps(
        {
            "systemLogos": {"Badge": {"imageUrl": "https://cdn.test/badge.png"}},
            "tradeLogos": {
                "Plumbing": {
                    "default": "https://cdn.test/plumbing.png",
                    "fr": "https://cdn.test/plumbing-fr.png",
                }
            },
        }
    ),
    encoding="utf-8",
)

import pytest

from helpers import FixedMetrics, encode, gif_bytes, solid
from overlaykit.services.fonts import load_font


@pytest.fixture()
def metrics() -> FixedMetrics:
    return FixedMetrics()


@pytest.fixture(scope="session")
def font():
    return load_font(None)


@pytest.fixture()
def png_bytes() -> bytes:
    return encode(solid((40, 30), (200, 100, 50)), "PNG")


@pytest.fixture()
def animated_gif() -> bytes:
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]
    return gif_bytes([solid((20, 10), c) for c in colors], [80, 120, 160])
