"""
Health check endpoints.

Used for monitoring and load balancer health checks.
"""
from datetime import datetime, timezone
import platform

from fastapi import APIRouter, Depends

from api.dependencies import get_settings, get_site_manager
from blogforge_sdk.vps import check_vps_connection
from core.application.services import SiteManager
from core.settings import AppSettings


router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns system health status.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "blogforge",
        "version": "1.0.0",
        "python_version": platform.python_version(),
    }


@router.get("/health/ready")
async def readiness_check(settings: AppSettings = Depends(get_settings)):
    """
    Readiness check endpoint.

    Reports which collaborators are configured; nothing is contacted.
    """
    checks = {
        "api": "ok",
        "vps": "configured" if settings.vps.host and settings.vps.private_key else "missing",
        "anthropic": "configured" if settings.anthropic.api_key else "missing",
        "encryption": "configured" if settings.security.encryption_key else "missing",
        "event_transport": settings.orchestration.transport,
        "record_store": settings.orchestration.record_store,
    }
    ready = "missing" not in checks.values()
    return {
        "status": "ready" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }


@router.get("/health/vps")
async def vps_check(
    settings: AppSettings = Depends(get_settings),
    site_manager: SiteManager = Depends(get_site_manager),
):
    """
    Contacts the VPS: an SSH echo test, then `wp --version` on a fresh session.
    """
    ssh_ok = await check_vps_connection(settings.vps.to_ssh_config())
    wp_cli_ok = await site_manager.check_host() if ssh_ok else False
    checks = {
        "ssh": "ok" if ssh_ok else "unreachable",
        "wp_cli": "ok" if wp_cli_ok else "unavailable",
    }
    return {
        "status": "ready" if ssh_ok and wp_cli_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
