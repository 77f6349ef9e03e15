"""Schedule - timer that drives article generation for a site."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..enums import PublishMode
from ..value_objects import new_id
from .job import utc_now


@dataclass
class Schedule:
    site_id: str
    cron_expression: str
    id: str = field(default_factory=new_id)
    articles_per_run: int = 1
    publish_mode: PublishMode = PublishMode.DRAFT
    is_active: bool = True
    next_run_at: Optional[datetime] = None
    last_run_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)
