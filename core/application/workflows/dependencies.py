"""Collaborators shared by the step functions."""
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from blogforge_sdk.wordpress import WordPressClient, WordPressCredentials
from core.application.services.article_generator import ArticleGenerator
from core.application.services.batch_runner import BatchRunner
from core.application.services.fact_checker import FactChecker
from core.application.services.product_analyzer import ProductAnalyzer
from core.application.services.site_manager import SiteManager
from core.domain.repositories import RecordStore
from core.infrastructure.security import CredentialCipher


@dataclass
class StepDependencies:
    """
    Everything a step needs, built once at start-up.

    ``site_manager_factory`` returns a fresh manager per provisioning run
    so each run owns its own SSH session. ``wordpress_client_factory``
    returns a client bound to one site's credentials; steps use it as an
    async context manager. ``fact_checker`` runs after generation unless
    ``fact_check`` is off.
    """

    store: RecordStore
    cipher: CredentialCipher
    site_manager_factory: Callable[[], SiteManager]
    batch_runner: BatchRunner
    wordpress_client_factory: Callable[[WordPressCredentials], WordPressClient]
    article_generator: Optional[ArticleGenerator] = None
    product_analyzer: Optional[ProductAnalyzer] = None
    fact_checker: Optional[FactChecker] = None
    fact_check: bool = True
    activate_theme: bool = True
    post_status: str = "publish"

    def __post_init__(self) -> None:
        if self.article_generator is None:
            self.article_generator = ArticleGenerator()
        if self.product_analyzer is None:
            self.product_analyzer = ProductAnalyzer(self.batch_runner)
        if self.fact_checker is None and self.fact_check:
            self.fact_checker = FactChecker()
