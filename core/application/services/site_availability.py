"""Subdomain availability check."""
from dataclasses import dataclass
from typing import Optional
import re

from core.domain.repositories import SiteRepository


SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")

RESERVED_SUBDOMAINS = frozenset({
    "www", "api", "admin", "app", "dashboard", "blog", "mail", "smtp", "ftp",
    "cdn", "static", "assets", "images", "img", "js", "css", "support", "help",
    "docs", "status", "test", "dev", "staging", "prod", "production",
})


@dataclass(frozen=True)
class Availability:
    available: bool
    reason: Optional[str] = None  # "invalid" | "reserved" | "taken"


def is_valid_subdomain(subdomain: str) -> bool:
    return 3 <= len(subdomain) <= 63 and bool(SUBDOMAIN_PATTERN.match(subdomain))


class SiteAvailabilityService:
    def __init__(self, sites: SiteRepository):
        self._sites = sites

    async def check(self, subdomain: str) -> Availability:
        if not is_valid_subdomain(subdomain):
            return Availability(available=False, reason="invalid")
        if subdomain in RESERVED_SUBDOMAINS:
            return Availability(available=False, reason="reserved")
        if await self._sites.find_by_slug(subdomain) is not None:
            return Availability(available=False, reason="taken")
        return Availability(available=True)
