import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum, UniqueConstraint
from overlaykit.core.db import Base
import enum


class PresetLogoKind(str, enum.Enum):
    system = "system"
    trade = "trade"


class PresetLogo(Base):
    __tablename__ = "preset_logos"
    __table_args__ = (UniqueConstraint("name", "variant", name="uq_preset_logo_variant"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)        # e.g. "Plumbing"
    kind = Column(Enum(PresetLogoKind), nullable=False)
    variant = Column(String, nullable=False, default="default")  # language code or "default"
    image_url = Column(String, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
