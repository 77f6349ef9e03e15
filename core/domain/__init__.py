"""Domain layer - pure domain models and interfaces."""

from .entities import Article, ArticleCluster, Credential, Job, Product, Schedule, Site, User
from .exceptions import (
    NonRetriableError,
    RecordNotFoundError,
    RecordStoreIntegrityError,
    RetryableStepError,
)
from .repositories import RecordStore
from .value_objects import Err, ExecutionID, Ok, OperationError

__all__ = [
    "Article",
    "ArticleCluster",
    "Credential",
    "Err",
    "ExecutionID",
    "Job",
    "NonRetriableError",
    "Ok",
    "OperationError",
    "Product",
    "RecordNotFoundError",
    "RecordStore",
    "RecordStoreIntegrityError",
    "RetryableStepError",
    "Schedule",
    "Site",
    "User",
]
