"""Site aggregate - a hosted blog on the multisite network."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..enums import SiteStatus, WpConnectionStatus
from ..value_objects import new_id
from .job import utc_now

DEFAULT_THEME = "generatepress"


@dataclass
class User:
    email: str
    id: str = field(default_factory=new_id)
    name: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Site:
    """
    Hosted blog owned by one user.

    Status moves pending -> provisioning -> active | provision_failed;
    only the provisioning step changes it.
    """

    user_id: str
    slug: str
    title: str
    id: str = field(default_factory=new_id)
    theme: str = DEFAULT_THEME
    status: SiteStatus = SiteStatus.PENDING
    wp_site_id: Optional[int] = None
    wp_site_url: Optional[str] = None
    wp_connection_status: Optional[WpConnectionStatus] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def mark_provisioning(self) -> None:
        self.status = SiteStatus.PROVISIONING
        self.updated_at = utc_now()

    def mark_active(self, wp_site_id: int, wp_site_url: str) -> None:
        self.status = SiteStatus.ACTIVE
        self.wp_site_id = wp_site_id
        self.wp_site_url = wp_site_url
        self.wp_connection_status = WpConnectionStatus.CONNECTED
        self.updated_at = utc_now()

    def mark_provision_failed(self) -> None:
        self.status = SiteStatus.PROVISION_FAILED
        self.updated_at = utc_now()

    def mark_connection_error(self) -> None:
        self.wp_connection_status = WpConnectionStatus.ERROR
        self.updated_at = utc_now()


@dataclass
class Credential:
    """
    Site-scoped application password, stored encrypted.

    One per site; rotation replaces the record.
    """

    site_id: str
    username: str
    encrypted_password: str = field(repr=False)
    app_name: str = ""
    created_at: datetime = field(default_factory=utc_now)
