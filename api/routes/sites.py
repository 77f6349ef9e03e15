"""
Site endpoints.

Subdomain availability for the onboarding form.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.dependencies import get_record_store
from core.application.services import SiteAvailabilityService
from core.domain.repositories import RecordStore


router = APIRouter()


class CheckAvailabilityRequest(BaseModel):
    subdomain: str = Field(..., max_length=255)


class CheckAvailabilityResponse(BaseModel):
    subdomain: str
    available: bool
    reason: Optional[str] = None


@router.post(
    "/check-availability",
    response_model=CheckAvailabilityResponse,
    summary="Check subdomain availability",
)
async def check_availability(
    request: CheckAvailabilityRequest,
    store: RecordStore = Depends(get_record_store),
):
    """
    Check whether a subdomain can be used for a new site.

    **Returns:**
    - `available`, and when unavailable a `reason`: invalid, reserved or taken
    """
    subdomain = request.subdomain.strip().lower()
    result = await SiteAvailabilityService(store.sites).check(subdomain)
    return CheckAvailabilityResponse(
        subdomain=subdomain, available=result.available, reason=result.reason
    )
