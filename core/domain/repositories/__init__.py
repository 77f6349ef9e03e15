"""Repository interfaces."""

from .base import Repository
from .repositories import (
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

__all__ = [
    "ArticleRepository",
    "ClusterRepository",
    "CredentialRepository",
    "GenerationLogRepository",
    "JobRepository",
    "ProductRepository",
    "RecordStore",
    "Repository",
    "ScheduleRepository",
    "SiteRepository",
    "UserRepository",
]
