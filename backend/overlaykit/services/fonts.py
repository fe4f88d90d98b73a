import io
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Optional

from PIL import ImageFont

from overlaykit.core.config import get_settings
from overlaykit.core.errors import FontLoadError

logger = logging.getLogger(__name__)


class FontHandle:
    """
    A parsed font, shared read-only between concurrent renders.

    `data=None` uses Pillow's bundled scalable font. FreeType faces are
    created per pixel size on first use and kept.
    """

    def __init__(self, data: Optional[bytes] = None, name: str = "default"):
        self._data = data
        self.name = name
        self._faces: Dict[float, ImageFont.FreeTypeFont] = {}
        self._lock = threading.Lock()

    def font(self, size_px: float) -> ImageFont.FreeTypeFont:
        key = round(max(size_px, 1.0), 2)
        with self._lock:
            face = self._faces.get(key)
            if face is None:
                if self._data is None:
                    face = ImageFont.load_default(size=key)
                else:
                    face = ImageFont.truetype(io.BytesIO(self._data), key)
                self._faces[key] = face
            return face

    def advance_width(self, text: str, size_px: float) -> float:
        if not text:
            return 0.0
        return self.font(size_px).getlength(text)


def load_font(data: Optional[bytes], name: str = "default") -> FontHandle:
    """Parse font bytes once up front so a bad file fails here, not mid-render."""
    handle = FontHandle(data, name)
    try:
        handle.font(12)
    except (OSError, ValueError) as e:
        raise FontLoadError(f"Failed to parse font {name}: {e}")
    return handle


def _configured_font() -> FontHandle:
    path = get_settings().FONT_PATH
    if not path:
        return load_font(None)
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise FontLoadError(f"Font file not readable: {path} ({e})")
    return load_font(data, Path(path).name)


class FontCache:
    """
    Process-wide, lazily initialised font.

    Callers arriving while the font is being parsed block on the lock until
    it is ready. A failed load is not remembered: the next call tries again.
    """

    def __init__(self, loader: Callable[[], FontHandle] = _configured_font):
        self._loader = loader
        self._handle: Optional[FontHandle] = None
        self._lock = threading.Lock()

    def get(self) -> FontHandle:
        handle = self._handle
        if handle is not None:
            return handle
        with self._lock:
            if self._handle is None:
                logger.info("Loading font...")
                self._handle = self._loader()
                logger.info("Font %s loaded", self._handle.name)
            return self._handle


font_cache = FontCache()
