"""
Complete Onboarding Use Case.

Flow:
1. Check the subdomain (valid, not reserved, not taken)
2. Create the user on first sign-up
3. Create the site and the product
4. Create the provisioning and analysis jobs
5. Publish site/provision and product/analyze with those job ids
"""
from dataclasses import dataclass, replace
from typing import Optional
import asyncio
import logging

from core.application.services.site_availability import SiteAvailabilityService
from core.domain.entities import DEFAULT_THEME, Job, Product, Site, User
from core.domain.enums import AnalysisMode, JobKind
from core.domain.repositories import RecordStore
from orchestration.bus import EventPublisher
from orchestration.events import PRODUCT_ANALYZE, SITE_PROVISION, Event


logger = logging.getLogger(__name__)


def _with_job(event: Event, job: Job) -> Event:
    return replace(event, metadata=replace(event.metadata, job_id=job.id))


class SubdomainUnavailableError(Exception):
    """The requested subdomain cannot be used."""

    def __init__(self, subdomain: str, reason: str):
        self.subdomain = subdomain
        self.reason = reason
        super().__init__(f"Subdomain {subdomain!r} is {reason}")


@dataclass
class CompleteOnboardingRequest:
    email: str
    subdomain: str
    product_name: str
    product_description: str
    product_url: Optional[str] = None
    user_name: Optional[str] = None


@dataclass
class CompleteOnboardingResponse:
    site: Site
    product: Product
    provision_job_id: str
    analysis_job_id: str

    def to_dict(self) -> dict:
        return {
            "success": True,
            "site": {"id": self.site.id, "slug": self.site.slug, "status": self.site.status.value},
            "product": {"id": self.product.id, "name": self.product.name},
            "jobs": {"provision": self.provision_job_id, "analysis": self.analysis_job_id},
        }


class CompleteOnboardingUseCase:
    def __init__(self, store: RecordStore, event_bus: EventPublisher, domain: str):
        self.store = store
        self.event_bus = event_bus
        self.domain = domain
        self.availability = SiteAvailabilityService(store.sites)

    async def _upsert_user(self, email: str, name: Optional[str]) -> User:
        user = await self.store.users.find_by_email(email)
        if user is None:
            user = await self.store.users.add(User(email=email, name=name))
            logger.info(f"Created user {user.id}")
        return user

    async def _job_for(self, event: Event, kind: JobKind, key: str) -> Job:
        job = Job(kind=kind, payload=dict(event.payload), key=key, event_id=event.metadata.event_id)
        return await self.store.jobs.add(job)

    async def execute(self, request: CompleteOnboardingRequest) -> CompleteOnboardingResponse:
        """
        Raises:
            SubdomainUnavailableError: subdomain invalid, reserved or taken
            RecordStoreIntegrityError: slug taken by a concurrent request
        """
        availability = await self.availability.check(request.subdomain)
        if not availability.available:
            raise SubdomainUnavailableError(request.subdomain, availability.reason or "unavailable")

        user = await self._upsert_user(request.email, request.user_name)

        site = await self.store.sites.add(
            Site(user_id=user.id, slug=request.subdomain, title=request.product_name)
        )
        product_url = request.product_url or None
        mode = AnalysisMode.URL if product_url else AnalysisMode.INTERACTIVE
        product = await self.store.products.add(
            Product(
                user_id=user.id,
                site_id=site.id,
                name=request.product_name,
                description=request.product_description,
                url=product_url or f"https://{request.subdomain}.{self.domain}",
                mode=mode,
            )
        )

        provision_payload = {
            "siteId": site.id,
            "userId": user.id,
            "subdomain": site.slug,
            "theme": DEFAULT_THEME,
        }
        analyze_payload = {"productId": product.id, "mode": mode.value}
        if product_url:
            analyze_payload["url"] = product_url

        provision = Event.create(SITE_PROVISION, provision_payload)
        analyze = Event.create(PRODUCT_ANALYZE, analyze_payload)
        provision_job = await self._job_for(provision, JobKind.PROVISION_SITE, site.id)
        analysis_job = await self._job_for(analyze, JobKind.ANALYZE_PRODUCT, product.id)

        await asyncio.gather(
            self.event_bus.publish(_with_job(provision, provision_job)),
            self.event_bus.publish(_with_job(analyze, analysis_job)),
        )

        logger.info(f"🚀 Onboarding complete for {user.email}: site {site.slug}, product {product.id}")
        return CompleteOnboardingResponse(
            site=site,
            product=product,
            provision_job_id=provision_job.id,
            analysis_job_id=analysis_job.id,
        )
