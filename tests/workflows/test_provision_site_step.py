"""Tests for the site/provision step."""

import pytest

from core.application.workflows import ProvisionSiteStep
from core.domain.enums import ErrorCode, SiteStatus, WpConnectionStatus
from core.domain.exceptions import NonRetriableError, RetryableStepError
from core.domain.value_objects import Err
from orchestration.events import SITE_PROVISION


@pytest.mark.asyncio
async def test_provision_activates_site_and_stores_encrypted_credential(
    deps, store, cipher, site_manager, pending_site, make_ctx
):
    step = ProvisionSiteStep(deps)

    emitted = await step.run(make_ctx(SITE_PROVISION, {"siteId": pending_site.id}))

    assert emitted == []
    site = await store.sites.get(pending_site.id)
    assert site.status == SiteStatus.ACTIVE
    assert site.wp_site_id == 2
    assert site.wp_site_url == "https://my-blog.example.app"
    assert site.wp_connection_status == WpConnectionStatus.CONNECTED
    assert site_manager.created == [("my-blog", "My Blog", "new@example.com")]

    credential = await store.credentials.get_for_site(site.id)
    assert credential.username == "admin"
    assert credential.app_name == "blogforge-my-blog"
    assert credential.encrypted_password != "abcd efgh ijkl"
    assert cipher.decrypt(credential.encrypted_password) == "abcd efgh ijkl"

    assert site_manager.themes == [("generatepress", "https://my-blog.example.app")]


@pytest.mark.asyncio
async def test_active_site_is_not_provisioned_again(deps, site_manager, seeded, make_ctx):
    step = ProvisionSiteStep(deps)

    emitted = await step.run(make_ctx(SITE_PROVISION, {"siteId": seeded["site"].id}))

    assert emitted == []
    assert site_manager.created == []


@pytest.mark.asyncio
async def test_existing_slug_is_not_retried(deps, site_manager, pending_site, make_ctx):
    site_manager.result = Err.of(ErrorCode.SITE_EXISTS, "Site already exists")

    with pytest.raises(NonRetriableError, match="SITE_EXISTS"):
        await ProvisionSiteStep(deps).run(make_ctx(SITE_PROVISION, {"siteId": pending_site.id}))


@pytest.mark.asyncio
async def test_cli_failure_is_retryable(deps, store, site_manager, pending_site, make_ctx):
    site_manager.result = Err.of(ErrorCode.WP_CLI_ERROR, "Could not connect to the database")

    with pytest.raises(RetryableStepError):
        await ProvisionSiteStep(deps).run(make_ctx(SITE_PROVISION, {"siteId": pending_site.id}))

    site = await store.sites.get(pending_site.id)
    assert site.status == SiteStatus.PROVISIONING
    assert await store.credentials.get_for_site(site.id) is None


@pytest.mark.asyncio
async def test_theme_failure_does_not_fail_provisioning(deps, store, site_manager, pending_site, make_ctx):
    site_manager.theme_result = RuntimeError("theme missing")

    await ProvisionSiteStep(deps).run(make_ctx(SITE_PROVISION, {"siteId": pending_site.id}))

    assert (await store.sites.get(pending_site.id)).status == SiteStatus.ACTIVE


@pytest.mark.asyncio
async def test_missing_site_id_or_site_is_non_retriable(deps, make_ctx):
    step = ProvisionSiteStep(deps)

    with pytest.raises(NonRetriableError):
        await step.run(make_ctx(SITE_PROVISION, {}))
    with pytest.raises(NonRetriableError):
        await step.run(make_ctx(SITE_PROVISION, {"siteId": "missing"}))


@pytest.mark.asyncio
async def test_on_failure_marks_provision_failed(deps, store, pending_site, make_ctx):
    ctx = make_ctx(SITE_PROVISION, {"siteId": pending_site.id})

    await ProvisionSiteStep(deps).on_failure(ctx, RetryableStepError("ssh down"))

    assert (await store.sites.get(pending_site.id)).status == SiteStatus.PROVISION_FAILED


@pytest.mark.asyncio
async def test_on_failure_leaves_active_site_alone(deps, store, seeded, make_ctx):
    ctx = make_ctx(SITE_PROVISION, {"siteId": seeded["site"].id})

    await ProvisionSiteStep(deps).on_failure(ctx, RuntimeError("late failure"))

    assert (await store.sites.get(seeded["site"].id)).status == SiteStatus.ACTIVE
