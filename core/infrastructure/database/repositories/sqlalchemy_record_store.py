"""
SQLAlchemy Record Store Implementation.

Implements the repository interfaces on top of an async session factory.
Each call runs in its own short session and commits before returning;
unique and foreign key violations surface as RecordStoreIntegrityError.
"""
from datetime import datetime, timezone
from typing import Any, Generic, List, Optional, Type, TypeVar
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

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
from core.domain.enums import (
    AnalysisMode,
    ArticleStatus,
    JobKind,
    JobStatus,
    ProductStatus,
    PublishMode,
    SiteStatus,
    WpConnectionStatus,
)
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
from core.domain.value_objects import FeaturedImage
from core.infrastructure.database.models import (
    ArticleClusterModel,
    ArticleGenerationLogModel,
    ArticleModel,
    CredentialModel,
    JobModel,
    ProductModel,
    ScheduleModel,
    SiteModel,
    UserModel,
)


logger = logging.getLogger(__name__)

E = TypeVar("E")
SessionFactory = async_sessionmaker[AsyncSession]


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands datetimes back without tzinfo; everything is stored as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.error(f"Record store constraint violated: {e.orig}")
        raise RecordStoreIntegrityError(str(e.orig)) from e


class _SqlRepository(Generic[E]):
    model: Type[Any]
    kind: str = "Record"

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    def _to_model(self, entity: E) -> Any:
        raise NotImplementedError

    def _to_entity(self, row: Any) -> E:
        raise NotImplementedError

    async def add(self, entity: E) -> E:
        row = self._to_model(entity)
        async with self._session_factory() as session:
            session.add(row)
            await _commit(session)
        return self._to_entity(row)

    async def get(self, entity_id: str) -> Optional[E]:
        async with self._session_factory() as session:
            row = await session.get(self.model, entity_id)
            return self._to_entity(row) if row is not None else None

    async def update(self, entity: E) -> E:
        entity_id = getattr(entity, "id")
        async with self._session_factory() as session:
            if await session.get(self.model, entity_id) is None:
                raise RecordNotFoundError(self.kind, entity_id)
            row = await session.merge(self._to_model(entity))
            await _commit(session)
            return self._to_entity(row)

    async def _select(self, statement) -> List[E]:
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return [self._to_entity(row) for row in result.scalars().all()]

    async def _select_one(self, statement) -> Optional[E]:
        rows = await self._select(statement.limit(1))
        return rows[0] if rows else None


# =============================================================================
# REPOSITORIES
# =============================================================================

class SqlAlchemyJobRepository(_SqlRepository[Job], JobRepository):
    model = JobModel
    kind = "Job"

    def _to_model(self, job: Job) -> JobModel:
        return JobModel(
            id=job.id,
            kind=job.kind.value,
            key=job.key,
            payload=job.payload,
            status=job.status.value,
            event_id=job.event_id,
            retry_count=job.retry_count,
            error=job.error,
            outbox=list(job.outbox),
            created_at=job.created_at,
            updated_at=job.updated_at,
            completed_at=job.completed_at,
        )

    def _to_entity(self, row: JobModel) -> Job:
        return Job(
            id=row.id,
            kind=JobKind(row.kind),
            key=row.key,
            payload=dict(row.payload or {}),
            status=JobStatus(row.status),
            event_id=row.event_id,
            retry_count=row.retry_count,
            error=row.error,
            outbox=list(row.outbox or []),
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
            completed_at=_aware(row.completed_at),
        )

    async def find_by_event_id(self, event_id: str) -> Optional[Job]:
        return await self._select_one(select(JobModel).where(JobModel.event_id == event_id))


class SqlAlchemyUserRepository(_SqlRepository[User], UserRepository):
    model = UserModel
    kind = "User"

    def _to_model(self, user: User) -> UserModel:
        return UserModel(id=user.id, email=user.email, name=user.name, created_at=user.created_at)

    def _to_entity(self, row: UserModel) -> User:
        return User(id=row.id, email=row.email, name=row.name, created_at=_aware(row.created_at))

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._select_one(select(UserModel).where(UserModel.email == email))


class SqlAlchemySiteRepository(_SqlRepository[Site], SiteRepository):
    model = SiteModel
    kind = "Site"

    def _to_model(self, site: Site) -> SiteModel:
        return SiteModel(
            id=site.id,
            user_id=site.user_id,
            slug=site.slug,
            title=site.title,
            theme=site.theme,
            status=site.status.value,
            wp_site_id=site.wp_site_id,
            wp_site_url=site.wp_site_url,
            wp_connection_status=(
                site.wp_connection_status.value if site.wp_connection_status else None
            ),
            created_at=site.created_at,
            updated_at=site.updated_at,
        )

    def _to_entity(self, row: SiteModel) -> Site:
        return Site(
            id=row.id,
            user_id=row.user_id,
            slug=row.slug,
            title=row.title,
            theme=row.theme,
            status=SiteStatus(row.status),
            wp_site_id=row.wp_site_id,
            wp_site_url=row.wp_site_url,
            wp_connection_status=(
                WpConnectionStatus(row.wp_connection_status) if row.wp_connection_status else None
            ),
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    async def find_by_slug(self, slug: str) -> Optional[Site]:
        return await self._select_one(select(SiteModel).where(SiteModel.slug == slug))


class SqlAlchemyProductRepository(_SqlRepository[Product], ProductRepository):
    model = ProductModel
    kind = "Product"

    def _to_model(self, product: Product) -> ProductModel:
        return ProductModel(
            id=product.id,
            user_id=product.user_id,
            site_id=product.site_id,
            name=product.name,
            description=product.description,
            url=product.url,
            mode=product.mode.value,
            status=product.status.value,
            analysis_result=product.analysis_result,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    def _to_entity(self, row: ProductModel) -> Product:
        return Product(
            id=row.id,
            user_id=row.user_id,
            site_id=row.site_id,
            name=row.name,
            description=row.description,
            url=row.url,
            mode=AnalysisMode(row.mode),
            status=ProductStatus(row.status),
            analysis_result=row.analysis_result,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )


class SqlAlchemyClusterRepository(_SqlRepository[ArticleCluster], ClusterRepository):
    model = ArticleClusterModel
    kind = "ArticleCluster"

    def _to_model(self, cluster: ArticleCluster) -> ArticleClusterModel:
        return ArticleClusterModel(
            id=cluster.id,
            product_id=cluster.product_id,
            pillar_keyword=cluster.pillar_keyword,
            priority=cluster.priority,
            created_at=cluster.created_at,
        )

    def _to_entity(self, row: ArticleClusterModel) -> ArticleCluster:
        return ArticleCluster(
            id=row.id,
            product_id=row.product_id,
            pillar_keyword=row.pillar_keyword,
            priority=row.priority,
            created_at=_aware(row.created_at),
        )

    async def list_for_product(self, product_id: str) -> List[ArticleCluster]:
        return await self._select(
            select(ArticleClusterModel)
            .where(ArticleClusterModel.product_id == product_id)
            .order_by(ArticleClusterModel.priority)
        )


class SqlAlchemyArticleRepository(_SqlRepository[Article], ArticleRepository):
    model = ArticleModel
    kind = "Article"

    def _to_model(self, article: Article) -> ArticleModel:
        image = article.featured_image
        return ArticleModel(
            id=article.id,
            product_id=article.product_id,
            cluster_id=article.cluster_id,
            title=article.title,
            target_keyword=article.target_keyword,
            search_intent=article.search_intent,
            article_type=article.article_type,
            priority=article.priority,
            content=article.content,
            meta_description=article.meta_description,
            status=article.status.value,
            batch_id=article.batch_id,
            wp_post_id=article.wp_post_id,
            published_at=article.published_at,
            featured_image_data=image.data if image else None,
            featured_image_filename=image.filename if image else None,
            featured_image_mime_type=image.mime_type if image else None,
            created_at=article.created_at,
            updated_at=article.updated_at,
        )

    def _to_entity(self, row: ArticleModel) -> Article:
        image = None
        if row.featured_image_data is not None:
            image = FeaturedImage(
                data=row.featured_image_data,
                filename=row.featured_image_filename or "featured-image",
                mime_type=row.featured_image_mime_type or "image/png",
            )
        return Article(
            id=row.id,
            product_id=row.product_id,
            cluster_id=row.cluster_id,
            title=row.title,
            target_keyword=row.target_keyword,
            search_intent=row.search_intent,
            article_type=row.article_type,
            priority=row.priority,
            content=row.content,
            meta_description=row.meta_description,
            status=ArticleStatus(row.status),
            batch_id=row.batch_id,
            wp_post_id=row.wp_post_id,
            published_at=_aware(row.published_at),
            featured_image=image,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
        )

    async def list_for_product(self, product_id: str) -> List[Article]:
        return await self._select(
            select(ArticleModel)
            .where(ArticleModel.product_id == product_id)
            .order_by(ArticleModel.created_at)
        )

    async def list_by_status(
        self, status: ArticleStatus, site_id: Optional[str] = None, limit: int = 100
    ) -> List[Article]:
        statement = select(ArticleModel).where(ArticleModel.status == status.value)
        if site_id is not None:
            statement = statement.join(
                ProductModel, ProductModel.id == ArticleModel.product_id
            ).where(ProductModel.site_id == site_id)
        statement = statement.order_by(
            ArticleModel.priority.desc(), ArticleModel.created_at
        ).limit(limit)
        return await self._select(statement)


class SqlAlchemyGenerationLogRepository(_SqlRepository[ArticleGenerationLog], GenerationLogRepository):
    model = ArticleGenerationLogModel
    kind = "ArticleGenerationLog"

    def _to_model(self, log: ArticleGenerationLog) -> ArticleGenerationLogModel:
        return ArticleGenerationLogModel(
            id=log.id,
            article_id=log.article_id,
            batch_id=log.batch_id,
            model=log.model,
            input_tokens=log.input_tokens,
            output_tokens=log.output_tokens,
            generation_time_ms=log.generation_time_ms,
            fact_check_passed=log.fact_check_passed,
            fact_check_issues=list(log.fact_check_issues),
            created_at=log.created_at,
        )

    def _to_entity(self, row: ArticleGenerationLogModel) -> ArticleGenerationLog:
        return ArticleGenerationLog(
            id=row.id,
            article_id=row.article_id,
            batch_id=row.batch_id,
            model=row.model,
            input_tokens=row.input_tokens,
            output_tokens=row.output_tokens,
            generation_time_ms=row.generation_time_ms,
            fact_check_passed=row.fact_check_passed,
            fact_check_issues=list(row.fact_check_issues or []),
            created_at=_aware(row.created_at),
        )

    async def list_for_article(self, article_id: str) -> List[ArticleGenerationLog]:
        return await self._select(
            select(ArticleGenerationLogModel)
            .where(ArticleGenerationLogModel.article_id == article_id)
            .order_by(ArticleGenerationLogModel.created_at)
        )


class SqlAlchemyScheduleRepository(_SqlRepository[Schedule], ScheduleRepository):
    model = ScheduleModel
    kind = "Schedule"

    def _to_model(self, schedule: Schedule) -> ScheduleModel:
        return ScheduleModel(
            id=schedule.id,
            site_id=schedule.site_id,
            cron_expression=schedule.cron_expression,
            articles_per_run=schedule.articles_per_run,
            publish_mode=schedule.publish_mode.value,
            is_active=schedule.is_active,
            next_run_at=schedule.next_run_at,
            last_run_at=schedule.last_run_at,
            created_at=schedule.created_at,
        )

    def _to_entity(self, row: ScheduleModel) -> Schedule:
        return Schedule(
            id=row.id,
            site_id=row.site_id,
            cron_expression=row.cron_expression,
            articles_per_run=row.articles_per_run,
            publish_mode=PublishMode(row.publish_mode),
            is_active=row.is_active,
            next_run_at=_aware(row.next_run_at),
            last_run_at=_aware(row.last_run_at),
            created_at=_aware(row.created_at),
        )

    async def list_due(self, now: datetime) -> List[Schedule]:
        return await self._select(
            select(ScheduleModel).where(
                ScheduleModel.is_active.is_(True),
                ScheduleModel.next_run_at.is_not(None),
                ScheduleModel.next_run_at <= now,
            )
        )


class SqlAlchemyCredentialRepository(CredentialRepository):
    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def save(self, credential: Credential) -> None:
        async with self._session_factory() as session:
            await session.merge(
                CredentialModel(
                    site_id=credential.site_id,
                    username=credential.username,
                    encrypted_password=credential.encrypted_password,
                    app_name=credential.app_name,
                    created_at=credential.created_at,
                )
            )
            await _commit(session)

    async def get_for_site(self, site_id: str) -> Optional[Credential]:
        async with self._session_factory() as session:
            row = await session.get(CredentialModel, site_id)
            if row is None:
                return None
            return Credential(
                site_id=row.site_id,
                username=row.username,
                encrypted_password=row.encrypted_password,
                app_name=row.app_name,
                created_at=_aware(row.created_at),
            )


class SqlAlchemyRecordStore(RecordStore):
    """Every repository bound to one session factory."""

    def __init__(self, session_factory: SessionFactory):
        super().__init__(
            jobs=SqlAlchemyJobRepository(session_factory),
            sites=SqlAlchemySiteRepository(session_factory),
            users=SqlAlchemyUserRepository(session_factory),
            credentials=SqlAlchemyCredentialRepository(session_factory),
            products=SqlAlchemyProductRepository(session_factory),
            clusters=SqlAlchemyClusterRepository(session_factory),
            articles=SqlAlchemyArticleRepository(session_factory),
            schedules=SqlAlchemyScheduleRepository(session_factory),
            generation_logs=SqlAlchemyGenerationLogRepository(session_factory),
        )
