from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List

from overlaykit.api.v1.errors import translate_errors
from overlaykit.core.config import get_settings
from overlaykit.core.db import get_db
from overlaykit.schemas.overlay import ImageOverlay, RenderRequest
from overlaykit.services.compositor import ImageLayer
from overlaykit.services.fetch import fetch_image
from overlaykit.services.pipeline import RenderResult, decode_image, render, render_animated
from overlaykit.services.preset_logos import resolve_preset_url

router = APIRouter()
settings = get_settings()


def _overlay_url(db: Session, overlay: ImageOverlay) -> str:
    # Preset logos are looked up here, never by the engine
    if overlay.preset_logo_id:
        url = resolve_preset_url(db, overlay.preset_logo_id, overlay.preset_logo_variant)
        if url is None:
            raise HTTPException(status_code=404, detail=f"Unknown preset logo: {overlay.preset_logo_id}")
        return url
    if not overlay.image_url:
        raise HTTPException(
            status_code=400,
            detail=f"Image overlay {overlay.id or '?'} needs an image URL or preset logo id",
        )
    return overlay.image_url


def _load_layers(db: Session, overlays: List[ImageOverlay]) -> List[ImageLayer]:
    layers = []
    for overlay in overlays:
        data, _ = fetch_image(_overlay_url(db, overlay), settings.MAX_IMAGE_BYTES)
        layers.append(ImageLayer(overlay=overlay, image=decode_image(data)))
    return layers


def _image_response(result: RenderResult) -> Response:
    headers = {"Cache-Control": "public, max-age=31536000"}
    if result.filename:
        headers["Content-Disposition"] = f'attachment; filename="{result.filename}"'
    return Response(content=result.content, media_type=result.content_type, headers=headers)


@router.post("/overlay")
def render_overlay(payload: RenderRequest, db: Session = Depends(get_db)):
    """
    Render text and image overlays onto the background at `image_url`.
    - static images come back as JPEG, or PNG when the result has transparency
    - animated GIFs come back as GIF with every frame overlaid
    """
    text_overlays, image_overlays = payload.split_overlays()
    with translate_errors("Render"):
        background, _ = fetch_image(payload.image_url)
        layers = _load_layers(db, image_overlays)
        result = render(
            background,
            payload.canvas,
            text_overlays,
            layers,
            variant=payload.variant,
            download=payload.download,
        )
    return _image_response(result)


@router.post("/overlay-gif")
def render_overlay_gif(payload: RenderRequest, db: Session = Depends(get_db)):
    """Same as /overlay but the background must be a GIF."""
    text_overlays, image_overlays = payload.split_overlays()
    with translate_errors("GIF render"):
        background, _ = fetch_image(payload.image_url, settings.MAX_GIF_BYTES)
        layers = _load_layers(db, image_overlays)
        result = render_animated(
            background,
            payload.canvas,
            text_overlays,
            layers,
            variant=payload.variant,
            download=payload.download,
        )
    return _image_response(result)
