"""Shared fixtures and fakes for the BlogForge test suite."""

import json
from typing import Any, Callable, Dict, List, Optional, Union

import pytest
import pytest_asyncio

from blogforge_sdk.llm import (
    BatchCreateResult,
    BatchRequest,
    BatchResultItem,
    BatchStatus,
    ClaudeBatchClient,
    RequestCounts,
)
from blogforge_sdk.wordpress import WordPressCredentials
from core.application.services.batch_runner import BatchRunner
from core.application.services.site_manager import SiteCreated, SiteCredentials
from core.application.workflows import StepDependencies
from core.domain.entities import Credential, Job, Product, Site, User
from core.domain.enums import JobKind, SiteStatus
from core.domain.value_objects import ExecutionID, Ok
from core.infrastructure.adapters.persistence import InMemoryRecordStore
from core.infrastructure.security import CredentialCipher
from orchestration.events import Event
from orchestration.models import StepContext


# =============================================================================
# CANNED MODEL OUTPUT
# =============================================================================

ANALYSIS_OUTPUT: Dict[str, Dict[str, Any]] = {
    "summary": {
        "summary": "Height-adjustable standing desk for home offices",
        "target_audience": "Remote workers",
        "value_proposition": "Quiet motor and a ten year warranty",
        "key_features": ["dual motor", "memory presets"],
    },
    "funnel": {
        "awareness": ["back pain from sitting"],
        "consideration": ["standing desk vs desk converter"],
        "decision": ["best standing desk under 500"],
    },
    "keywords": {
        "keywords": [{"keyword": "standing desk", "intent": "commercial", "difficulty": "high"}],
    },
    "competitors": {
        "competitors": [{"name": "DeskCo", "strengths": ["price"]}],
        "content_gaps": ["desk setup guides"],
    },
    "clusters": {
        "clusters": [
            {
                "pillar_topic": "Standing desk basics",
                "articles": [
                    {"title": "How tall should a standing desk be", "target_keyword": "standing desk height", "priority": 1},
                    {"title": "Standing desk benefits", "target_keyword": "standing desk benefits", "priority": 3},
                ],
            },
            {
                "pillar_topic": "Home office setup",
                "articles": [
                    {"title": "Home office ergonomics checklist", "target_keyword": "home office ergonomics", "priority": 2},
                ],
            },
        ]
    },
}

ARTICLE_OUTPUT: Dict[str, Any] = {
    "title": "Standing Desk Benefits: What the Research Says",
    "content": "<h2>Why stand?</h2><p>Standing more often helps.</p>",
    "meta_description": "A look at the benefits of working at a standing desk.",
    "search_intent": "informational",
}

FACT_CHECK_OUTPUT: Dict[str, Any] = {"issues": [], "risk_level": "low"}

Responder = Callable[[BatchRequest], Union[str, BatchResultItem]]


def content_responder(request: BatchRequest) -> str:
    """Answer analysis, article and fact-check requests with canned JSON."""
    for phase, data in ANALYSIS_OUTPUT.items():
        if request.custom_id.startswith(f"analysis-{phase}-"):
            return json.dumps(data)
    if request.custom_id.startswith("article-"):
        return "```json\n" + json.dumps(ARTICLE_OUTPUT) + "\n```"
    if request.custom_id.startswith("factcheck-"):
        return json.dumps(FACT_CHECK_OUTPUT)
    raise AssertionError(f"Unexpected request {request.custom_id}")


# =============================================================================
# FAKES
# =============================================================================

class FakeBatchClient:
    """In-memory stand-in for ClaudeBatchClient.

    Each batch reports ``in_progress`` for ``polls_before_end`` status
    calls, then ``ended``; results come from the responder.
    """

    map_results_to_articles = staticmethod(ClaudeBatchClient.map_results_to_articles)
    default_model = "claude-test"

    def __init__(self, responder: Responder = content_responder, polls_before_end: int = 0):
        self.responder = responder
        self.polls_before_end = polls_before_end
        self.submitted: Dict[str, List[BatchRequest]] = {}
        self.status_calls: Dict[str, int] = {}

    async def submit(self, requests: List[BatchRequest]) -> BatchCreateResult:
        batch_id = f"msgbatch_{len(self.submitted) + 1:03d}"
        self.submitted[batch_id] = list(requests)
        self.status_calls[batch_id] = 0
        return BatchCreateResult(
            batch_id=batch_id,
            status="in_progress",
            request_counts=RequestCounts(processing=len(requests)),
            created_at=None,
            expires_at=None,
        )

    async def get_status(self, batch_id: str) -> BatchStatus:
        self.status_calls[batch_id] = self.status_calls.get(batch_id, 0) + 1
        ended = self.status_calls[batch_id] > self.polls_before_end
        return BatchStatus(
            batch_id=batch_id,
            processing_status="ended" if ended else "in_progress",
            request_counts=RequestCounts(succeeded=len(self.submitted.get(batch_id, []))),
            results_url=None,
            created_at=None,
            ended_at=None,
        )

    async def get_results(self, batch_id: str) -> List[BatchResultItem]:
        items = []
        for request in self.submitted[batch_id]:
            answer = self.responder(request)
            if isinstance(answer, BatchResultItem):
                items.append(answer)
            else:
                items.append(BatchResultItem(custom_id=request.custom_id, type="succeeded", content=answer))
        return items

    @property
    def requests(self) -> List[BatchRequest]:
        return [request for batch in self.submitted.values() for request in batch]


class FakeSiteManager:
    """Records provisioning calls and returns a configured result."""

    def __init__(self, result=None, theme_result: Union[bool, Exception] = True):
        self.result = result
        self.theme_result = theme_result
        self.created: List[tuple] = []
        self.themes: List[tuple] = []

    async def create(self, slug: str, title: str, contact_email: str):
        self.created.append((slug, title, contact_email))
        if self.result is not None:
            return self.result
        return Ok(
            SiteCreated(
                site_id=len(self.created) + 1,
                url=f"https://{slug}.example.app",
                credentials=SiteCredentials(
                    username="admin", password="abcd efgh ijkl", app_name=f"blogforge-{slug}"
                ),
            )
        )

    async def activate_theme(self, theme: str, site_url: str) -> bool:
        self.themes.append((theme, site_url))
        if isinstance(self.theme_result, Exception):
            raise self.theme_result
        return self.theme_result


class FakeWordPressClient:
    """Records REST calls; ``fail_with`` maps a method name to the error it raises."""

    def __init__(self):
        self.credentials: Optional[WordPressCredentials] = None
        self.posts: Dict[int, Dict[str, Any]] = {}
        self.uploads: List[tuple] = []
        self.deleted: List[int] = []
        self.fail_with: Dict[str, Exception] = {}
        self.closed = 0
        self._next_post_id = 100

    def __call__(self, credentials: WordPressCredentials) -> "FakeWordPressClient":
        self.credentials = credentials
        return self

    async def __aenter__(self) -> "FakeWordPressClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.closed += 1

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail_with:
            raise self.fail_with[method]

    async def upload_media(self, data: bytes, filename: str, mime_type: str) -> Dict[str, Any]:
        self._maybe_fail("upload_media")
        self.uploads.append((filename, mime_type, len(data)))
        return {"id": 456, "source_url": f"https://cdn.example.app/{filename}"}

    async def create_post(self, post: Dict[str, Any]) -> Dict[str, Any]:
        self._maybe_fail("create_post")
        self._next_post_id += 1
        self.posts[self._next_post_id] = dict(post)
        return {"id": self._next_post_id, "link": f"https://blog.example.app/?p={self._next_post_id}"}

    async def update_post(self, post_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        self._maybe_fail("update_post")
        self.posts.setdefault(post_id, {}).update(fields)
        return {"id": post_id, "link": f"https://blog.example.app/?p={post_id}"}

    async def delete_post(self, post_id: int, force: bool = False) -> Dict[str, Any]:
        self._maybe_fail("delete_post")
        self.deleted.append(post_id)
        return {"id": post_id, "status": "trash"}


class RecordingSleep:
    """Sleep replacement that returns at once and remembers the delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def cipher() -> CredentialCipher:
    return CredentialCipher(CredentialCipher.generate_key())


@pytest.fixture
def batch_client() -> FakeBatchClient:
    return FakeBatchClient()


@pytest.fixture
def site_manager() -> FakeSiteManager:
    return FakeSiteManager()


@pytest.fixture
def wp_client() -> FakeWordPressClient:
    return FakeWordPressClient()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def deps(store, cipher, batch_client, site_manager, wp_client) -> StepDependencies:
    return StepDependencies(
        store=store,
        cipher=cipher,
        site_manager_factory=lambda: site_manager,
        batch_runner=BatchRunner(batch_client, poll_schedule=(30.0, 60.0), max_wait_seconds=3600),
        wordpress_client_factory=wp_client,
    )


@pytest.fixture
def make_ctx(sleep):
    """Build a StepContext for calling a step directly."""

    def _make(name: str, payload: Dict[str, Any], attempt: int = 1) -> StepContext:
        event = Event.create(name, payload)
        job = Job(kind=JobKind.PROVISION_SITE, payload=dict(payload), key=event.metadata.event_id)
        return StepContext(
            job=job,
            event=event,
            execution_id=ExecutionID.generate(),
            attempt=attempt,
            sleep=sleep,
        )

    return _make


@pytest_asyncio.fixture
async def seeded(store, cipher):
    """An active site with a stored credential and one product."""
    user = await store.users.add(User(email="owner@example.com", name="Owner"))
    site = Site(user_id=user.id, slug="desk-blog", title="Desk Blog")
    site.mark_active(7, "https://desk-blog.example.app")
    site = await store.sites.add(site)
    await store.credentials.save(
        Credential(
            site_id=site.id,
            username="admin",
            encrypted_password=cipher.encrypt("abcd efgh ijkl"),
            app_name="blogforge-desk-blog",
        )
    )
    product = await store.products.add(
        Product(user_id=user.id, site_id=site.id, name="LiftDesk Pro", url="https://liftdesk.example.com")
    )
    return {"user": user, "site": site, "product": product}


@pytest_asyncio.fixture
async def pending_site(store):
    """A freshly onboarded site that has not been provisioned."""
    user = await store.users.add(User(email="new@example.com"))
    site = await store.sites.add(Site(user_id=user.id, slug="my-blog", title="My Blog"))
    assert site.status == SiteStatus.PENDING
    return site
