import json
import logging
import os
from typing import Dict, Optional

from sqlalchemy.orm import Session

from overlaykit.models.preset_logo import PresetLogo, PresetLogoKind
from overlaykit.schemas.preset_logo import PresetLogoCatalog, SystemLogo, TradeLogo

logger = logging.getLogger(__name__)


def seed_preset_logos(db: Session, path: str) -> int:
    """
    Load the catalog JSON into an empty table. Returns rows inserted.

    Expected shape:
      {"systemLogos": {"<name>": {"imageUrl": "..."}},
       "tradeLogos":  {"<trade>": {"default": "...", "<lang>": "..."}}}
    """
    if db.query(PresetLogo).first() is not None:
        return 0
    if not os.path.exists(path):
        logger.info("No preset logo catalog at %s, skipping seed", path)
        return 0

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    rows = []
    for name, entry in (data.get("systemLogos") or {}).items():
        rows.append(PresetLogo(name=name, kind=PresetLogoKind.system, image_url=entry["imageUrl"]))
    for name, variants in (data.get("tradeLogos") or {}).items():
        if "default" not in variants:
            logger.warning("Trade logo %s has no default variant, skipping", name)
            continue
        for variant, url in variants.items():
            rows.append(PresetLogo(name=name, kind=PresetLogoKind.trade, variant=variant, image_url=url))

    db.add_all(rows)
    db.commit()
    logger.info("Seeded %d preset logos from %s", len(rows), path)
    return len(rows)


def list_preset_logos(db: Session) -> PresetLogoCatalog:
    rows = db.query(PresetLogo).order_by(PresetLogo.name, PresetLogo.variant).all()

    catalog = PresetLogoCatalog()
    trades: Dict[str, Dict[str, str]] = {}
    for row in rows:
        if row.kind == PresetLogoKind.system:
            catalog.system_logos.append(SystemLogo(id=row.name, name=row.name, image_url=row.image_url))
        else:
            trades.setdefault(row.name, {})[row.variant] = row.image_url

    for name, variants in trades.items():
        catalog.trade_logos.append(
            TradeLogo(id=name, name=name, variants=variants, default_image_url=variants["default"])
        )
    return catalog


def resolve_preset_url(db: Session, logo_id: str, variant: str = "default") -> Optional[str]:
    """Image URL for a preset logo, falling back to its default variant."""
    rows = db.query(PresetLogo).filter(PresetLogo.name == logo_id).all()
    by_variant = {row.variant: row.image_url for row in rows}
    return by_variant.get(variant) or by_variant.get("default")
