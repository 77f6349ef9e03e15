from __future__ import annotations

from pydantic import Field

from blogforge_sdk.vps import SSHConfig
from core.settings.base import BlogForgeBaseSettings


class VpsSettings(BlogForgeBaseSettings):
    """
    SSH access to the WordPress VPS.
    The private key may be PEM text or base64-encoded PEM.
    """

    host: str | None = Field(None, alias="VPS_HOST")
    port: int = Field(22, alias="VPS_SSH_PORT")
    username: str = Field("root", alias="VPS_SSH_USER")
    private_key: str | None = Field(None, alias="VPS_SSH_PRIVATE_KEY", repr=False)
    connect_timeout: float = Field(30.0, alias="VPS_SSH_CONNECT_TIMEOUT")

    def to_ssh_config(self) -> SSHConfig:
        return SSHConfig(
            host=self.host,
            port=self.port,
            username=self.username,
            private_key=self.private_key,
            connect_timeout=self.connect_timeout,
        )
