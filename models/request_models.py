"""
API Request Models

Pydantic models for API request validation.
"""
from typing import Optional, Tuple
from pydantic import BaseModel, Field


class ClockSettingsRequest(BaseModel):
    """Partial settings update; omitted fields keep their current value"""
    show_seconds: Optional[bool] = None
    use_12_hour: Optional[bool] = None
    show_labels: Optional[bool] = None
    pixel_density: Optional[int] = None
    ease: Optional[float] = None
    snap_eps: Optional[float] = None
    bias: Optional[float] = None
    background_color: Optional[Tuple[int, int, int]] = None
    rod_color: Optional[Tuple[int, int, int]] = None
    beam_color: Optional[Tuple[int, int, int]] = None
    bead_color: Optional[Tuple[int, int, int]] = None
    bead_stroke_color: Optional[Tuple[int, int, int]] = None
    label_color: Optional[Tuple[int, int, int]] = None
    label_dim_color: Optional[Tuple[int, int, int]] = None


class CanvasResizeRequest(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    fit: bool = False  # True = treat size as available space (margin + cap applied)


class PresetRequest(BaseModel):
    name: str
