"""Repository interfaces for the BlogForge aggregates."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..entities import (
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
from ..enums import ArticleStatus
from .base import Repository


class JobRepository(Repository[Job]):
    @abstractmethod
    async def find_by_event_id(self, event_id: str) -> Optional[Job]:
        """Find the job created for a given trigger event."""
        pass


class SiteRepository(Repository[Site]):
    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[Site]:
        pass


class UserRepository(Repository[User]):
    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        pass


class ProductRepository(Repository[Product]):
    pass


class ClusterRepository(Repository[ArticleCluster]):
    @abstractmethod
    async def list_for_product(self, product_id: str) -> List[ArticleCluster]:
        pass


class ArticleRepository(Repository[Article]):
    @abstractmethod
    async def list_for_product(self, product_id: str) -> List[Article]:
        pass

    @abstractmethod
    async def list_by_status(
        self, status: ArticleStatus, site_id: Optional[str] = None, limit: int = 100
    ) -> List[Article]:
        """Articles in a status, optionally restricted to one site, by priority."""
        pass


class GenerationLogRepository(Repository[ArticleGenerationLog]):
    @abstractmethod
    async def list_for_article(self, article_id: str) -> List[ArticleGenerationLog]:
        """Generation runs of one article, oldest first."""
        pass


class ScheduleRepository(Repository[Schedule]):
    @abstractmethod
    async def list_due(self, now: datetime) -> List[Schedule]:
        """Active schedules whose next run is at or before `now`."""
        pass


class CredentialRepository(ABC):
    """One credential per site; saving replaces the previous one."""

    @abstractmethod
    async def save(self, credential: Credential) -> None:
        pass

    @abstractmethod
    async def get_for_site(self, site_id: str) -> Optional[Credential]:
        pass


@dataclass
class RecordStore:
    """All repositories of one backing store."""

    jobs: JobRepository
    sites: SiteRepository
    users: UserRepository
    credentials: CredentialRepository
    products: ProductRepository
    clusters: ClusterRepository
    articles: ArticleRepository
    schedules: ScheduleRepository
    generation_logs: GenerationLogRepository
