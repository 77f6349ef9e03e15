"""Tests for CompleteOnboardingUseCase."""

import pytest

from core.application.use_cases import (
    CompleteOnboardingRequest,
    CompleteOnboardingUseCase,
    SubdomainUnavailableError,
)
from core.domain.entities import Site, User
from core.domain.enums import AnalysisMode, JobKind, JobStatus, SiteStatus
from orchestration.bus import InMemoryEventBus
from orchestration.events import PRODUCT_ANALYZE, SITE_PROVISION


def _request(**kwargs) -> CompleteOnboardingRequest:
    values = {
        "email": "owner@example.com",
        "subdomain": "desk-blog",
        "product_name": "LiftDesk Pro",
        "product_description": "A quiet standing desk",
        "product_url": "https://liftdesk.example.com",
    }
    values.update(kwargs)
    return CompleteOnboardingRequest(**values)


@pytest.mark.asyncio
async def test_onboarding_creates_records_and_publishes_events(store):
    bus = InMemoryEventBus()
    use_case = CompleteOnboardingUseCase(store, bus, domain="example.app")

    response = await use_case.execute(_request())

    assert response.site.status == SiteStatus.PENDING
    assert response.site.title == "LiftDesk Pro"
    assert response.product.mode == AnalysisMode.URL

    events = {event.name: event for event in bus.published}
    assert set(events) == {SITE_PROVISION, PRODUCT_ANALYZE}
    provision = events[SITE_PROVISION]
    analyze = events[PRODUCT_ANALYZE]
    assert provision.payload["siteId"] == response.site.id
    assert provision.payload["theme"] == "generatepress"
    assert analyze.payload == {
        "productId": response.product.id,
        "mode": "url",
        "url": "https://liftdesk.example.com",
    }

    provision_job = await store.jobs.get(response.provision_job_id)
    assert provision_job.kind == JobKind.PROVISION_SITE
    assert provision_job.status == JobStatus.PENDING
    assert provision_job.key == response.site.id
    assert provision.metadata.job_id == provision_job.id
    assert provision.metadata.event_id == provision_job.event_id
    assert analyze.metadata.job_id == response.analysis_job_id

    body = response.to_dict()
    assert body["success"] is True
    assert body["site"] == {"id": response.site.id, "slug": "desk-blog", "status": "pending"}
    assert body["jobs"] == {"provision": provision_job.id, "analysis": response.analysis_job_id}


@pytest.mark.asyncio
async def test_interactive_mode_without_product_url(store):
    use_case = CompleteOnboardingUseCase(store, InMemoryEventBus(), domain="example.app")

    response = await use_case.execute(_request(product_url=None))

    assert response.product.mode == AnalysisMode.INTERACTIVE
    assert response.product.url == "https://desk-blog.example.app"


@pytest.mark.asyncio
async def test_existing_user_is_reused(store):
    existing = await store.users.add(User(email="owner@example.com"))
    use_case = CompleteOnboardingUseCase(store, InMemoryEventBus(), domain="example.app")

    response = await use_case.execute(_request())

    assert response.site.user_id == existing.id


@pytest.mark.asyncio
@pytest.mark.parametrize("subdomain, reason", [("admin", "reserved"), ("-x", "invalid"), ("ab", "invalid")])
async def test_unavailable_subdomains_are_rejected(store, subdomain, reason):
    bus = InMemoryEventBus()
    use_case = CompleteOnboardingUseCase(store, bus, domain="example.app")

    with pytest.raises(SubdomainUnavailableError) as exc_info:
        await use_case.execute(_request(subdomain=subdomain))

    assert exc_info.value.reason == reason
    assert bus.published == []


@pytest.mark.asyncio
async def test_taken_subdomain_is_rejected(store):
    owner = await store.users.add(User(email="first@example.com"))
    await store.sites.add(Site(user_id=owner.id, slug="desk-blog", title="Taken"))
    use_case = CompleteOnboardingUseCase(store, InMemoryEventBus(), domain="example.app")

    with pytest.raises(SubdomainUnavailableError) as exc_info:
        await use_case.execute(_request())

    assert exc_info.value.reason == "taken"
