from fastapi import APIRouter
from overlaykit.api.v1.routes_render import router as render_router
from overlaykit.api.v1.routes_images import router as images_router
from overlaykit.api.v1.routes_overlays import router as overlays_router

api_router = APIRouter()
api_router.include_router(render_router, prefix="", tags=["render"])
api_router.include_router(images_router, prefix="", tags=["images"])
api_router.include_router(overlays_router, prefix="", tags=["preset-logos"])
