"""
In-memory record store.

Dictionary-backed repositories for tests and local runs. Entities are
copied on the way in and out so callers never share mutable state with
the store, matching the behaviour of the database-backed store.
"""
import copy
import logging
from datetime import datetime
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from core.domain.entities import (
    Article,
    ArticleCluster,
    ArticleGenerationLog,
    Credential,
    Job,
    Product,
    Schedule,
    Site,
    User,
)
from core.domain.enums import ArticleStatus
from core.domain.exceptions import RecordNotFoundError, RecordStoreIntegrityError
from core.domain.repositories import (
    ArticleRepository,
    ClusterRepository,
    CredentialRepository,
    GenerationLogRepository,
    JobRepository,
    ProductRepository,
    RecordStore,
    ScheduleRepository,
    SiteRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")


class _Table(Generic[E]):
    """Keyed storage with copy-on-read/write and a pre-write check hook."""

    kind = "Record"

    def __init__(self, check: Optional[Callable[[E], None]] = None):
        self._rows: Dict[str, E] = {}
        self._check = check

    async def add(self, entity: E) -> E:
        entity_id = entity.id  # type: ignore[attr-defined]
        if entity_id in self._rows:
            raise RecordStoreIntegrityError(f"{self.kind} {entity_id} already exists")
        if self._check:
            self._check(entity)
        self._rows[entity_id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    async def get(self, entity_id: str) -> Optional[E]:
        row = self._rows.get(entity_id)
        return copy.deepcopy(row) if row is not None else None

    async def update(self, entity: E) -> E:
        entity_id = entity.id  # type: ignore[attr-defined]
        if entity_id not in self._rows:
            raise RecordNotFoundError(self.kind, entity_id)
        if self._check:
            self._check(entity)
        self._rows[entity_id] = copy.deepcopy(entity)
        return copy.deepcopy(entity)

    def rows(self) -> List[E]:
        return [copy.deepcopy(row) for row in self._rows.values()]

    def contains(self, entity_id: Optional[str]) -> bool:
        return entity_id is not None and entity_id in self._rows

    def peek(self, entity_id: str) -> Optional[E]:
        return self._rows.get(entity_id)


class InMemoryJobRepository(_Table[Job], JobRepository):
    kind = "Job"

    async def find_by_event_id(self, event_id: str) -> Optional[Job]:
        for job in self._rows.values():
            if job.event_id == event_id:
                return copy.deepcopy(job)
        return None


class InMemoryUserRepository(_Table[User], UserRepository):
    kind = "User"

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self._rows.values():
            if user.email == email:
                return copy.deepcopy(user)
        return None


class InMemorySiteRepository(_Table[Site], SiteRepository):
    kind = "Site"

    async def find_by_slug(self, slug: str) -> Optional[Site]:
        for site in self._rows.values():
            if site.slug == slug:
                return copy.deepcopy(site)
        return None


class InMemoryProductRepository(_Table[Product], ProductRepository):
    kind = "Product"


class InMemoryClusterRepository(_Table[ArticleCluster], ClusterRepository):
    kind = "ArticleCluster"

    async def list_for_product(self, product_id: str) -> List[ArticleCluster]:
        return [c for c in self.rows() if c.product_id == product_id]


class InMemoryArticleRepository(_Table[Article], ArticleRepository):
    kind = "Article"

    def __init__(self, check: Callable[[Article], None], products: InMemoryProductRepository):
        super().__init__(check)
        self._products = products

    async def list_for_product(self, product_id: str) -> List[Article]:
        return [a for a in self.rows() if a.product_id == product_id]

    async def list_by_status(
        self, status: ArticleStatus, site_id: Optional[str] = None, limit: int = 100
    ) -> List[Article]:
        matches = []
        for article in self.rows():
            if article.status != status:
                continue
            if site_id is not None:
                product = self._products.peek(article.product_id)
                if product is None or product.site_id != site_id:
                    continue
            matches.append(article)
        matches.sort(key=lambda a: (-a.priority, a.created_at))
        return matches[:limit]


class InMemoryGenerationLogRepository(_Table[ArticleGenerationLog], GenerationLogRepository):
    kind = "ArticleGenerationLog"

    async def list_for_article(self, article_id: str) -> List[ArticleGenerationLog]:
        logs = [log for log in self.rows() if log.article_id == article_id]
        return sorted(logs, key=lambda log: log.created_at)


class InMemoryScheduleRepository(_Table[Schedule], ScheduleRepository):
    kind = "Schedule"

    async def list_due(self, now: datetime) -> List[Schedule]:
        return [
            s
            for s in self.rows()
            if s.is_active and s.next_run_at is not None and s.next_run_at <= now
        ]


class InMemoryCredentialRepository(CredentialRepository):
    def __init__(self, sites: InMemorySiteRepository):
        self._rows: Dict[str, Credential] = {}
        self._sites = sites

    async def save(self, credential: Credential) -> None:
        if not self._sites.contains(credential.site_id):
            raise RecordStoreIntegrityError(f"Credential references unknown site {credential.site_id}")
        self._rows[credential.site_id] = copy.deepcopy(credential)

    async def get_for_site(self, site_id: str) -> Optional[Credential]:
        row = self._rows.get(site_id)
        return copy.deepcopy(row) if row is not None else None


class InMemoryRecordStore(RecordStore):
    """
    In-memory implementation of the record store.

    Enforces the same constraints as the database schema: unique site
    slugs and user emails, and Article -> Cluster -> Product -> Site/User
    references.
    """

    def __init__(self) -> None:
        users = InMemoryUserRepository(check=self._check_user)
        sites = InMemorySiteRepository(check=self._check_site)
        products = InMemoryProductRepository(check=self._check_product)
        clusters = InMemoryClusterRepository(check=self._check_cluster)
        articles = InMemoryArticleRepository(check=self._check_article, products=products)
        super().__init__(
            jobs=InMemoryJobRepository(),
            sites=sites,
            users=users,
            credentials=InMemoryCredentialRepository(sites),
            products=products,
            clusters=clusters,
            articles=articles,
            schedules=InMemoryScheduleRepository(check=self._check_schedule),
            generation_logs=InMemoryGenerationLogRepository(check=self._check_generation_log),
        )
        logger.info("InMemoryRecordStore initialized")

    def _check_user(self, user: User) -> None:
        for existing in self.users.rows():
            if existing.email == user.email and existing.id != user.id:
                raise RecordStoreIntegrityError(f"User email already registered: {user.email}")

    def _check_site(self, site: Site) -> None:
        if not self.users.contains(site.user_id):
            raise RecordStoreIntegrityError(f"Site references unknown user {site.user_id}")
        for existing in self.sites.rows():
            if existing.slug == site.slug and existing.id != site.id:
                raise RecordStoreIntegrityError(f"Site slug already taken: {site.slug}")

    def _check_product(self, product: Product) -> None:
        if not self.users.contains(product.user_id):
            raise RecordStoreIntegrityError(f"Product references unknown user {product.user_id}")
        if not self.sites.contains(product.site_id):
            raise RecordStoreIntegrityError(f"Product references unknown site {product.site_id}")

    def _check_cluster(self, cluster: ArticleCluster) -> None:
        if not self.products.contains(cluster.product_id):
            raise RecordStoreIntegrityError(f"Cluster references unknown product {cluster.product_id}")

    def _check_article(self, article: Article) -> None:
        if not self.products.contains(article.product_id):
            raise RecordStoreIntegrityError(f"Article references unknown product {article.product_id}")
        if article.cluster_id is not None and not self.clusters.contains(article.cluster_id):
            raise RecordStoreIntegrityError(f"Article references unknown cluster {article.cluster_id}")

    def _check_schedule(self, schedule: Schedule) -> None:
        if not self.sites.contains(schedule.site_id):
            raise RecordStoreIntegrityError(f"Schedule references unknown site {schedule.site_id}")

    def _check_generation_log(self, log: ArticleGenerationLog) -> None:
        if not self.articles.contains(log.article_id):
            raise RecordStoreIntegrityError(f"Generation log references unknown article {log.article_id}")
