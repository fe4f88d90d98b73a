from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Variant(str, Enum):
    default = "default"
    desktop = "desktop"
    mobile = "mobile"


class FitMode(str, Enum):
    cover = "cover"
    contain = "contain"
    stretch = "stretch"


class Anchor(str, Enum):
    center = "center"
    top = "top"
    bottom = "bottom"
    left = "left"
    right = "right"


class _Payload(BaseModel):
    # Browser clients send camelCase (fontSize, desktopX, ...)
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TextOverlay(_Payload):
    type: Literal["text"] = "text"
    id: str = ""
    text: str = ""                       # raw markup, see services.markup
    font_size: float = Field(5, gt=0)    # % of canvas width
    font_color: str = "#FFFFFF"          # e.g. "white", "#ffcc00"
    x: float = 10                        # % of canvas width
    y: float = 10                        # % of canvas height
    all_caps: bool = False

    desktop_font_size: Optional[float] = Field(None, gt=0)
    desktop_x: Optional[float] = None
    desktop_y: Optional[float] = None
    mobile_font_size: Optional[float] = Field(None, gt=0)
    mobile_x: Optional[float] = None
    mobile_y: Optional[float] = None

    @field_validator("font_color")
    @classmethod
    def _known_color(cls, value: str) -> str:
        value = value.strip()
        try:
            ImageColor.getrgb(value)
        except ValueError:
            raise ValueError(f"Unknown color: {value!r}")
        return value


class ImageOverlay(_Payload):
    """
    An auxiliary image placed on the canvas.

    `width` and `height` are both percentages of the canvas *width*:
    `height` is derived from `width / aspect_ratio`, so it is only given
    explicitly when the aspect ratio is unknown.
    """

    type: Literal["image"] = "image"
    id: str = ""
    image_url: Optional[str] = None
    preset_logo_id: Optional[str] = None  # resolved by the API layer
    preset_logo_variant: str = "default"  # trade logo language, falls back to default

    width: float = Field(20, gt=0)
    height: Optional[float] = Field(None, gt=0)
    aspect_ratio: Optional[float] = Field(None, gt=0)
    x: float = 10
    y: float = 10

    desktop_width: Optional[float] = Field(None, gt=0)
    desktop_height: Optional[float] = Field(None, gt=0)
    desktop_x: Optional[float] = None
    desktop_y: Optional[float] = None
    mobile_width: Optional[float] = Field(None, gt=0)
    mobile_height: Optional[float] = Field(None, gt=0)
    mobile_x: Optional[float] = None
    mobile_y: Optional[float] = None

    @model_validator(mode="after")
    def _derive_heights(self):
        if self.aspect_ratio:
            self.height = self.width / self.aspect_ratio
            if self.desktop_width is not None:
                self.desktop_height = self.desktop_width / self.aspect_ratio
            if self.mobile_width is not None:
                self.mobile_height = self.mobile_width / self.aspect_ratio
        elif self.height is None:
            raise ValueError("height or aspect_ratio is required")
        return self

    def with_width(self, width: float) -> "ImageOverlay":
        """Copy with a new width, keeping height consistent with the aspect ratio."""
        data = self.model_dump()
        data["width"] = width
        if not self.aspect_ratio:
            # no ratio to derive from: keep the proportions we have
            data["height"] = self.height * (width / self.width)
        return ImageOverlay.model_validate(data)


Overlay = Annotated[Union[TextOverlay, ImageOverlay], Field(discriminator="type")]


class Canvas(_Payload):
    width: Optional[int] = Field(None, gt=0)    # px, defaults to background size
    height: Optional[int] = Field(None, gt=0)
    fit: FitMode = FitMode.cover
    anchor: Anchor = Anchor.center
    brightness: float = Field(100, ge=0, le=200)
    zoom: float = Field(1, ge=1)
    pan_x: float = Field(0, ge=0, le=100)
    pan_y: float = Field(0, ge=0, le=100)

    def sized(self, natural: Tuple[int, int]) -> "Canvas":
        """Fill in missing pixel dimensions from the background's natural size."""
        return self.model_copy(
            update={
                "width": self.width or natural[0],
                "height": self.height or natural[1],
            }
        )


class RenderRequest(_Payload):
    image_url: str
    canvas: Canvas = Field(default_factory=Canvas)
    overlays: List[Overlay] = Field(default_factory=list)
    # Older clients send the two kinds as separate lists
    text_overlays: List[TextOverlay] = Field(default_factory=list)
    image_overlays: List[ImageOverlay] = Field(default_factory=list)
    variant: Variant = Variant.default
    download: bool = False

    def split_overlays(self) -> Tuple[List[TextOverlay], List[ImageOverlay]]:
        texts = [o for o in self.overlays if isinstance(o, TextOverlay)]
        images = [o for o in self.overlays if isinstance(o, ImageOverlay)]
        return texts + self.text_overlays, images + self.image_overlays
