from typing import Optional

from pydantic import BaseModel, Field


class EncodeAviRequest(BaseModel):
    width: int = Field(..., gt=0, description="Frame width in pixels, shared by every frame.")
    height: int = Field(..., gt=0, description="Frame height in pixels, shared by every frame.")
    frame_rate: Optional[float] = Field(
        None, gt=0, description="Frames per second. Defaults to the configured frame rate."
    )
    frames: list[str] = Field(default_factory=list, description="Base64 encoded JPEG frames, in display order.")
    filename: Optional[str] = Field(None, description="Filename for the Content-Disposition header.")
    require_jpeg: bool = Field(True, description="Reject frames that do not start with a JPEG marker.")
