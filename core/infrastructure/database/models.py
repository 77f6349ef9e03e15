"""
SQLAlchemy ORM Models.

Maps domain entities to database tables.
"""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base


Base = declarative_base()

ID = String(36)


# =============================================================================
# JOBS
# =============================================================================

class JobModel(Base):
    """Audit record of one orchestrated unit of work. Never deleted."""

    __tablename__ = "jobs"

    id = Column(ID, primary_key=True)
    kind = Column(String(50), nullable=False, index=True)
    key = Column(String(255), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, index=True)
    event_id = Column(String(64), nullable=True, unique=True)
    retry_count = Column(Integer, nullable=False, default=0)
    error = Column(Text, nullable=True)
    outbox = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_jobs_kind_key", "kind", "key"),
    )


# =============================================================================
# USERS, SITES, CREDENTIALS
# =============================================================================

class UserModel(Base):
    __tablename__ = "users"

    id = Column(ID, primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class SiteModel(Base):
    __tablename__ = "sites"

    id = Column(ID, primary_key=True)
    user_id = Column(ID, ForeignKey("users.id"), nullable=False, index=True)
    slug = Column(String(63), nullable=False, unique=True)
    title = Column(String(255), nullable=False)
    theme = Column(String(100), nullable=False)
    status = Column(String(30), nullable=False, index=True)

    # WordPress multisite data
    wp_site_id = Column(Integer, nullable=True)
    wp_site_url = Column(String(512), nullable=True)
    wp_connection_status = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class CredentialModel(Base):
    """Encrypted application password; one row per site."""

    __tablename__ = "credentials"

    site_id = Column(ID, ForeignKey("sites.id"), primary_key=True)
    username = Column(String(255), nullable=False)
    encrypted_password = Column(Text, nullable=False)
    app_name = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False)


# =============================================================================
# CONTENT
# =============================================================================

class ProductModel(Base):
    __tablename__ = "products"

    id = Column(ID, primary_key=True)
    user_id = Column(ID, ForeignKey("users.id"), nullable=False, index=True)
    site_id = Column(ID, ForeignKey("sites.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    url = Column(String(2048), nullable=True)
    mode = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False)
    analysis_result = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class ArticleClusterModel(Base):
    __tablename__ = "article_clusters"

    id = Column(ID, primary_key=True)
    product_id = Column(ID, ForeignKey("products.id"), nullable=False, index=True)
    pillar_keyword = Column(String(255), nullable=False)
    priority = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ArticleModel(Base):
    __tablename__ = "articles"

    id = Column(ID, primary_key=True)
    product_id = Column(ID, ForeignKey("products.id"), nullable=False, index=True)
    cluster_id = Column(ID, ForeignKey("article_clusters.id"), nullable=True, index=True)
    title = Column(String(512), nullable=False)
    target_keyword = Column(String(255), nullable=False)
    search_intent = Column(String(50), nullable=True)
    article_type = Column(String(50), nullable=False, default="article")
    priority = Column(Integer, nullable=False, default=0)
    content = Column(Text, nullable=True)
    meta_description = Column(String(512), nullable=True)
    status = Column(String(20), nullable=False, index=True)
    batch_id = Column(String(255), nullable=True)
    wp_post_id = Column(Integer, nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)

    # Featured image, uploaded before the post is created
    featured_image_data = Column(LargeBinary, nullable=True)
    featured_image_filename = Column(String(255), nullable=True)
    featured_image_mime_type = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class ArticleGenerationLogModel(Base):
    """One generation run of an article, with the fact-check outcome."""

    __tablename__ = "article_generation_logs"

    id = Column(ID, primary_key=True)
    article_id = Column(ID, ForeignKey("articles.id"), nullable=False, index=True)
    batch_id = Column(String(255), nullable=True)
    model = Column(String(100), nullable=False)
    input_tokens = Column(Integer, nullable=False, default=0)
    output_tokens = Column(Integer, nullable=False, default=0)
    generation_time_ms = Column(Integer, nullable=False, default=0)
    fact_check_passed = Column(Boolean, nullable=True)
    fact_check_issues = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ScheduleModel(Base):
    __tablename__ = "schedules"

    id = Column(ID, primary_key=True)
    site_id = Column(ID, ForeignKey("sites.id"), nullable=False, index=True)
    cron_expression = Column(String(100), nullable=False)
    articles_per_run = Column(Integer, nullable=False, default=1)
    publish_mode = Column(String(20), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    next_run_at = Column(DateTime(timezone=True), nullable=True, index=True)
    last_run_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
