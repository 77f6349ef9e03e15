"""Domain entities."""

from .content import Article, ArticleCluster, ArticleGenerationLog, Product
from .job import TERMINAL_JOB_STATUSES, Job, utc_now
from .schedule import Schedule
from .site import DEFAULT_THEME, Credential, Site, User

__all__ = [
    "DEFAULT_THEME",
    "TERMINAL_JOB_STATUSES",
    "Article",
    "ArticleCluster",
    "ArticleGenerationLog",
    "Credential",
    "Job",
    "Product",
    "Schedule",
    "Site",
    "User",
    "utc_now",
]
