from pydantic import BaseModel, Field
from typing import List


class ImageDimensions(BaseModel):
    width: int
    height: int
    type: str     # jpg | png | gif | ...


class LoadImagesRequest(BaseModel):
    images: List[str] = Field(..., min_length=1)


class LoadImagesResponse(BaseModel):
    images: List[str]   # data URLs, same order as the request
