class OverlayError(Exception):
    """Base class for every failure the render engine reports to its caller."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MarkupError(OverlayError):
    """Malformed directive or superscript span (strict parsing only)."""

    status_code = 422


class FetchError(OverlayError):
    """Background or overlay image could not be retrieved."""

    status_code = 400


class DecodeError(OverlayError):
    """Unsupported or corrupt image/GIF payload."""

    status_code = 415


class EncodeError(OverlayError):
    status_code = 500


class SizeLimitExceeded(OverlayError):
    """Payload or canvas dimensions over the configured bound."""

    status_code = 413


class FontLoadError(OverlayError):
    status_code = 500
