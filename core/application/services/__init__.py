"""Application services."""
from .article_generator import ArticleGenerator, GeneratedArticle
from .article_publisher import ArticlePublisher, PublishedPost, classify_error
from .batch_runner import BatchRunner, BatchTimeoutError
from .fact_checker import FactChecker, FactCheckResult
from .product_analyzer import ProductAnalysis, ProductAnalysisError, ProductAnalyzer
from .site_availability import Availability, SiteAvailabilityService, is_valid_subdomain
from .site_manager import SiteCreated, SiteCredentials, SiteManager

__all__ = [
    "ArticleGenerator",
    "ArticlePublisher",
    "Availability",
    "BatchRunner",
    "BatchTimeoutError",
    "FactCheckResult",
    "FactChecker",
    "GeneratedArticle",
    "ProductAnalysis",
    "ProductAnalysisError",
    "ProductAnalyzer",
    "PublishedPost",
    "SiteAvailabilityService",
    "SiteCreated",
    "SiteCredentials",
    "SiteManager",
    "classify_error",
    "is_valid_subdomain",
]
