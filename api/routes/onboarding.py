"""
Onboarding endpoints.

Creates the site and product, then starts provisioning and analysis.
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field, HttpUrl

from api.dependencies import get_onboarding_use_case
from core.application.services.site_availability import SUBDOMAIN_PATTERN
from core.application.use_cases import (
    CompleteOnboardingRequest,
    CompleteOnboardingUseCase,
    SubdomainUnavailableError,
)
from core.domain.exceptions import RecordStoreIntegrityError


logger = logging.getLogger(__name__)
router = APIRouter()


class OnboardingRequest(BaseModel):
    email: EmailStr
    subdomain: str = Field(..., min_length=3, max_length=63, pattern=SUBDOMAIN_PATTERN.pattern)
    product_name: str = Field(..., alias="productName", min_length=1, max_length=255)
    product_description: str = Field(..., alias="productDescription", min_length=1, max_length=5000)
    product_url: Optional[HttpUrl] = Field(None, alias="productUrl")
    name: Optional[str] = Field(None, max_length=255)


@router.post(
    "/complete",
    status_code=status.HTTP_200_OK,
    summary="Complete onboarding",
)
async def complete_onboarding(
    request: OnboardingRequest,
    use_case: CompleteOnboardingUseCase = Depends(get_onboarding_use_case),
):
    """
    Create the site and product and start the provisioning and analysis jobs.

    **Returns:**
    - `site` (id, slug, status), `product` (id, name) and the two job ids
    """
    try:
        response = await use_case.execute(
            CompleteOnboardingRequest(
                email=str(request.email),
                subdomain=request.subdomain,
                product_name=request.product_name,
                product_description=request.product_description,
                product_url=str(request.product_url) if request.product_url else None,
                user_name=request.name,
            )
        )
    except SubdomainUnavailableError as e:
        code = status.HTTP_409_CONFLICT if e.reason == "taken" else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=code, detail=str(e))
    except RecordStoreIntegrityError as e:
        logger.warning(f"Onboarding conflict for {request.subdomain}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subdomain is already taken")

    return response.to_dict()
