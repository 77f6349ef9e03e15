"""
Lifecycle status enums.

Values are the strings persisted in the record store and carried in
event payloads.
"""
from enum import Enum


class JobKind(str, Enum):
    """Kinds of orchestrated work."""

    PROVISION_SITE = "provision-site"
    ANALYZE_PRODUCT = "analyze-product"
    GENERATE_ARTICLE = "generate-article"
    SYNC_PUBLISH = "sync-publish"
    RUN_SCHEDULE = "run-schedule"


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class SiteStatus(str, Enum):
    PENDING = "pending"
    PROVISIONING = "provisioning"
    PROVISION_FAILED = "provision_failed"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class WpConnectionStatus(str, Enum):
    CONNECTED = "connected"
    ERROR = "error"


class ProductStatus(str, Enum):
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisMode(str, Enum):
    URL = "url"
    INTERACTIVE = "interactive"
    RESEARCH = "research"


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    GENERATING = "generating"
    REVIEW = "review"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    FAILED = "failed"


class PublishAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class PublishMode(str, Enum):
    """What a schedule run does with the articles it generates."""

    DRAFT = "draft"
    PUBLISH = "publish"


class ErrorCode(str, Enum):
    """Failure kinds returned by the provisioning and publishing managers."""

    SITE_EXISTS = "SITE_EXISTS"
    WP_CLI_ERROR = "WP_CLI_ERROR"
    SSH_ERROR = "SSH_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    API_ERROR = "API_ERROR"
    UPLOAD_ERROR = "UPLOAD_ERROR"
    UNKNOWN = "UNKNOWN"
