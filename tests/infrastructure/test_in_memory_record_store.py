"""Tests for InMemoryRecordStore."""

import pytest

from core.domain.entities import Article, ArticleCluster, ArticleGenerationLog, Credential, Job, Product, Site, User
from core.domain.enums import ArticleStatus, JobKind, JobStatus
from core.domain.exceptions import RecordNotFoundError, RecordStoreIntegrityError


@pytest.mark.asyncio
async def test_entities_are_copied_in_and_out(store):
    user = await store.users.add(User(email="a@example.com"))
    user.name = "changed outside"

    loaded = await store.users.get(user.id)
    assert loaded.name is None

    loaded.name = "changed again"
    assert (await store.users.get(user.id)).name is None


@pytest.mark.asyncio
async def test_duplicate_id_and_unknown_update(store):
    user = await store.users.add(User(email="a@example.com"))

    with pytest.raises(RecordStoreIntegrityError):
        await store.users.add(user)
    with pytest.raises(RecordNotFoundError):
        await store.users.update(User(email="ghost@example.com"))


@pytest.mark.asyncio
async def test_unique_email_and_slug(store):
    user = await store.users.add(User(email="a@example.com"))
    await store.sites.add(Site(user_id=user.id, slug="blog", title="Blog"))

    with pytest.raises(RecordStoreIntegrityError, match="email"):
        await store.users.add(User(email="a@example.com"))
    with pytest.raises(RecordStoreIntegrityError, match="slug"):
        await store.sites.add(Site(user_id=user.id, slug="blog", title="Other"))


@pytest.mark.asyncio
async def test_references_are_checked(store):
    with pytest.raises(RecordStoreIntegrityError):
        await store.sites.add(Site(user_id="nobody", slug="blog", title="Blog"))
    with pytest.raises(RecordStoreIntegrityError):
        await store.products.add(Product(user_id="nobody", site_id="nowhere", name="P"))
    with pytest.raises(RecordStoreIntegrityError):
        await store.credentials.save(Credential(site_id="nowhere", username="admin", encrypted_password="x"))


@pytest.mark.asyncio
async def test_article_cluster_must_exist(store, seeded):
    product = seeded["product"]
    with pytest.raises(RecordStoreIntegrityError, match="cluster"):
        await store.articles.add(Article(product_id=product.id, title="T", target_keyword="k", cluster_id="missing"))

    cluster = await store.clusters.add(ArticleCluster(product_id=product.id, pillar_keyword="desks"))
    article = await store.articles.add(
        Article(product_id=product.id, title="T", target_keyword="k", cluster_id=cluster.id)
    )
    assert [c.id for c in await store.clusters.list_for_product(product.id)] == [cluster.id]
    assert (await store.articles.get(article.id)).cluster_id == cluster.id


@pytest.mark.asyncio
async def test_credential_save_replaces(store, seeded):
    site_id = seeded["site"].id
    await store.credentials.save(Credential(site_id=site_id, username="editor", encrypted_password="t2"))

    credential = await store.credentials.get_for_site(site_id)
    assert credential.username == "editor"
    assert await store.credentials.get_for_site("other") is None


@pytest.mark.asyncio
async def test_find_job_by_event_id(store):
    job = await store.jobs.add(Job(kind=JobKind.SYNC_PUBLISH, payload={}, key="a-1", event_id="evt-1"))

    assert (await store.jobs.find_by_event_id("evt-1")).id == job.id
    assert await store.jobs.find_by_event_id("evt-2") is None

    job.mark_processing()
    await store.jobs.update(job)
    assert (await store.jobs.get(job.id)).status == JobStatus.PROCESSING


@pytest.mark.asyncio
async def test_list_by_status_orders_by_priority_and_limits(store, seeded):
    product = seeded["product"]
    for title, priority in [("a", 1), ("b", 4), ("c", 2)]:
        await store.articles.add(Article(product_id=product.id, title=title, target_keyword=title, priority=priority))
    await store.articles.add(
        Article(product_id=product.id, title="d", target_keyword="d", priority=9, status=ArticleStatus.REVIEW)
    )

    drafts = await store.articles.list_by_status(ArticleStatus.DRAFT, site_id=seeded["site"].id, limit=2)

    assert [a.title for a in drafts] == ["b", "c"]
    assert await store.articles.list_by_status(ArticleStatus.DRAFT, site_id="other-site") == []


@pytest.mark.asyncio
async def test_generation_logs_belong_to_an_article(store, seeded):
    with pytest.raises(RecordStoreIntegrityError):
        await store.generation_logs.add(ArticleGenerationLog(article_id="missing", model="claude-test"))

    article = await store.articles.add(Article(product_id=seeded["product"].id, title="T", target_keyword="k"))
    await store.generation_logs.add(
        ArticleGenerationLog(article_id=article.id, model="claude-test", fact_check_passed=False, fact_check_issues=["x"])
    )

    logs = await store.generation_logs.list_for_article(article.id)
    assert [(log.model, log.fact_check_passed, log.fact_check_issues) for log in logs] == [("claude-test", False, ["x"])]
    assert await store.generation_logs.list_for_article("other") == []
