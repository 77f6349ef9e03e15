"""Start-up wiring of trigger events to step functions."""
from orchestration.events import (
    ARTICLE_GENERATE,
    PRODUCT_ANALYZE,
    PUBLISH_SYNC,
    SCHEDULE_CRON,
    SCHEDULE_TRIGGER_MANUAL,
    SITE_PROVISION,
)
from orchestration.registry import StepRegistry
from orchestration.workflow import RetryPolicy, StepRegistration
from core.domain.enums import JobKind

from .analyze_product import AnalyzeProductStep
from .dependencies import StepDependencies
from .generate_article import GenerateArticleStep
from .provision_site import ProvisionSiteStep
from .schedules import RunDueSchedulesStep, TriggerScheduleStep
from .sync_publish import SyncPublishStep


def build_registry(deps: StepDependencies, retry_policy: RetryPolicy | None = None) -> StepRegistry:
    """Build the registry for every trigger event."""
    policy = retry_policy or RetryPolicy()
    provision = ProvisionSiteStep(deps)
    analyze = AnalyzeProductStep(deps)
    generate = GenerateArticleStep(deps)
    publish = SyncPublishStep(deps)
    trigger = TriggerScheduleStep(deps)
    cron = RunDueSchedulesStep(deps)

    return StepRegistry([
        StepRegistration(
            name=provision.name,
            events=(SITE_PROVISION,),
            job_kind=JobKind.PROVISION_SITE,
            step=provision.run,
            key_field="siteId",
            retry_policy=policy,
            on_failure=provision.on_failure,
        ),
        StepRegistration(
            name=analyze.name,
            events=(PRODUCT_ANALYZE,),
            job_kind=JobKind.ANALYZE_PRODUCT,
            step=analyze.run,
            key_field="productId",
            retry_policy=policy,
            on_failure=analyze.on_failure,
        ),
        StepRegistration(
            name=generate.name,
            events=(ARTICLE_GENERATE,),
            job_kind=JobKind.GENERATE_ARTICLE,
            step=generate.run,
            key_field="articleId",
            retry_policy=policy,
            on_failure=generate.on_failure,
        ),
        StepRegistration(
            name=publish.name,
            events=(PUBLISH_SYNC,),
            job_kind=JobKind.SYNC_PUBLISH,
            step=publish.run,
            key_field="articleId",
            retry_policy=policy,
            on_failure=publish.on_failure,
        ),
        StepRegistration(
            name=trigger.name,
            events=(SCHEDULE_TRIGGER_MANUAL,),
            job_kind=JobKind.RUN_SCHEDULE,
            step=trigger.run,
            key_field="scheduleId",
            retry_policy=policy,
        ),
        StepRegistration(
            name=cron.name,
            events=(SCHEDULE_CRON,),
            job_kind=JobKind.RUN_SCHEDULE,
            step=cron.run,
            retry_policy=RetryPolicy(max_attempts=1),
        ),
    ])
