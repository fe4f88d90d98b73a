import logging
from contextlib import contextmanager

from fastapi import HTTPException

from overlaykit.core.errors import OverlayError

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors(action: str):
    """Turn engine failures into HTTP errors carrying the failure's status."""
    try:
        yield
    except OverlayError as e:
        if e.status_code >= 500:
            logger.exception("%s failed", action)
        else:
            logger.warning("%s rejected: %s", action, e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)
