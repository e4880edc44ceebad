from typing import List

from pydantic import Field

from .prediction import CamelModel


class IdealConditions(CamelModel):
    soil_type: List[str]
    temperature_range: str = Field(description="e.g., 15-25°C")
    annual_rainfall: str = Field(description="e.g., 600-1200 mm")


class CropInfo(CamelModel):
    """Crop profile returned by the crop explorer lookup."""

    crop_name: str
    description: str
    ideal_conditions: IdealConditions
    common_pests: List[str]
    growing_cycle: str = Field(description="e.g., 90-120 days")
