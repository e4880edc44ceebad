from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_structured_generator
from app.core.exceptions import PredictionParseError, PredictionServiceError
from app.models.crop_info import CropInfo
from app.services.prediction_service import get_crop_info
from app.services.structured_generation import StructuredGenerator

router = APIRouter(prefix="/crops", tags=["Crop Explorer"])


@router.get("/{crop_name}", response_model=CropInfo)
async def get_crop_profile(
    crop_name: str,
    generator: StructuredGenerator = Depends(get_structured_generator),
) -> CropInfo:
    """
    Retrieves the growing profile of a crop.
    """
    if not crop_name.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Crop name must not be empty.",
        )
    try:
        return await get_crop_info(crop_name, generator=generator)
    except (PredictionParseError, PredictionServiceError) as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=f"Failed to fetch information for {crop_name.strip()}.",
        ) from e
