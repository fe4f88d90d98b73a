from fastapi import APIRouter, HTTPException, Query
from typing import Optional

from overlaykit.api.v1.errors import translate_errors
from overlaykit.schemas.images import ImageDimensions, LoadImagesRequest, LoadImagesResponse
from overlaykit.services.fetch import DATA_URL_PREFIX, fetch_image, to_data_url
from overlaykit.services.pipeline import probe_dimensions

router = APIRouter()


@router.get("/dimensions", response_model=ImageDimensions)
def get_dimensions(url: Optional[str] = Query(None)):
    """Width, height and type of a remote image, read from its header."""
    if not url:
        raise HTTPException(status_code=400, detail="No image URL provided")

    with translate_errors("Dimension probe"):
        data, _ = fetch_image(url)
        return probe_dimensions(data)


@router.post("/load-images", response_model=LoadImagesResponse)
def load_images(payload: LoadImagesRequest):
    """
    Inline remote images as data URLs so the browser can draw them onto a
    canvas without CORS trouble. Data URLs are passed through.
    """
    images = []
    for url in payload.images:
        if not url:
            raise HTTPException(status_code=400, detail="Invalid image URL: URL cannot be empty")
        if url.startswith(DATA_URL_PREFIX):
            if ";base64," not in url:
                raise HTTPException(status_code=400, detail="Invalid base64 image format")
            images.append(url)
            continue
        with translate_errors("Image load"):
            data, content_type = fetch_image(url)
        images.append(to_data_url(data, content_type))
    return LoadImagesResponse(images=images)
