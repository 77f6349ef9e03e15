"""Application use cases."""
from .complete_onboarding import (
    CompleteOnboardingRequest,
    CompleteOnboardingResponse,
    CompleteOnboardingUseCase,
    SubdomainUnavailableError,
)

__all__ = [
    "CompleteOnboardingRequest",
    "CompleteOnboardingResponse",
    "CompleteOnboardingUseCase",
    "SubdomainUnavailableError",
]
