from .statuses import (
    AnalysisMode,
    ArticleStatus,
    ErrorCode,
    JobKind,
    JobStatus,
    ProductStatus,
    PublishAction,
    PublishMode,
    SiteStatus,
    WpConnectionStatus,
)

__all__ = [
    "AnalysisMode",
    "ArticleStatus",
    "ErrorCode",
    "JobKind",
    "JobStatus",
    "ProductStatus",
    "PublishAction",
    "PublishMode",
    "SiteStatus",
    "WpConnectionStatus",
]
