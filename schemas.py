"""Request bodies for the composite and OTP endpoints."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CompositeRequest(BaseModel):
    """POST /composite body. Numbers are clamped later, not validated here."""
    model_config = ConfigDict(populate_by_name=True)

    photo: Optional[str] = None  # data:<mime>;base64,<payload>
    side: Optional[str] = "right"  # "left" | "right"
    scale: Optional[float] = 1.0
    pos_x: Optional[float] = Field(default=30, alias="posX")
    pos_y: Optional[float] = Field(default=30, alias="posY")
    opacity: Optional[float] = 1.0


class SendOtpRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    phone: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    phone: Optional[str] = None
    code: Optional[str] = None
