"""Step functions run by the orchestrator, one module per trigger event."""
from .analyze_product import AnalyzeProductStep
from .dependencies import StepDependencies
from .generate_article import GenerateArticleStep
from .provision_site import ProvisionSiteStep
from .registry import build_registry
from .schedules import RunDueSchedulesStep, TriggerScheduleStep, next_run_at
from .sync_publish import SyncPublishStep

__all__ = [
    "AnalyzeProductStep",
    "GenerateArticleStep",
    "ProvisionSiteStep",
    "RunDueSchedulesStep",
    "StepDependencies",
    "SyncPublishStep",
    "TriggerScheduleStep",
    "build_registry",
    "next_run_at",
]
