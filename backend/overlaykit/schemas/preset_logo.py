from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List


class _CamelOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SystemLogo(_CamelOut):
    id: str
    name: str
    image_url: str
    has_variants: bool = False


class TradeLogo(_CamelOut):
    id: str
    name: str
    variants: Dict[str, str]          # language code -> url, always has "default"
    has_variants: bool = True
    default_image_url: str


class PresetLogoCatalog(_CamelOut):
    system_logos: List[SystemLogo] = Field(default_factory=list)
    trade_logos: List[TradeLogo] = Field(default_factory=list)
