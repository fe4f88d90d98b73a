from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from overlaykit.core.db import get_db
from overlaykit.schemas.preset_logo import PresetLogoCatalog
from overlaykit.services.preset_logos import list_preset_logos

router = APIRouter()


@router.get("/preset-logos", response_model=PresetLogoCatalog)
def list_preset_logos_route(db: Session = Depends(get_db)):
    """
    List preset logos that image overlays can reference by `presetLogoId`.
    Useful for building a picker in the frontend.
    - systemLogos: one image each
    - tradeLogos: per-language variants plus a default
    """
    return list_preset_logos(db)
