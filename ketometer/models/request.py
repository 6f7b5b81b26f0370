"""
Pydantic models for inbound analysis requests.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class AnalysisMode(str, Enum):
    """Input modality; selects the prompt template and output schema."""

    TEXT = "text"
    IMAGE = "image"
    MENU = "menu"


class InboundImage(BaseModel):
    """One entry of the client's ``imageData`` array."""

    uri: Optional[str] = Field(None, description="Local URI on the device, informational only")
    base64: str = Field(..., min_length=1, description="Base64 encoded image bytes")
    type: str = Field(default="image/jpeg", description="Declared media type")

    class Config:
        json_schema_extra = {
            "example": {
                "uri": "file:///var/mobile/photo.jpg",
                "base64": "/9j/4AAQSkZJRgABAQ...",
                "type": "image/jpeg"
            }
        }


class ImagePayload(BaseModel):
    """Decoded image ready to be attached to a vision call."""

    data: bytes
    media_type: str
    uri: Optional[str] = None


class AnalysisRequest(BaseModel):
    """Validated unit of work, built fresh per submission."""

    mode: AnalysisMode
    content: Optional[str] = None
    images: list[ImagePayload] = []

    @property
    def has_images(self) -> bool:
        return bool(self.images)
