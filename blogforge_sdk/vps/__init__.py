"""VPS access: SSH sessions and WP-CLI site management."""

from .ssh_client import (
    SSHClient,
    SSHConfig,
    SSHConnectionError,
    SSHExecError,
    SSHExecuteResult,
    SSHSession,
    check_vps_connection,
    decode_private_key,
    execute_ssh_command,
)
from .validation import ValidationError
from .wp_cli import (
    WPApplicationPassword,
    WPCLIClient,
    WPCLIError,
    WPSiteCreateResult,
)

__all__ = [
    "SSHClient",
    "SSHConfig",
    "SSHConnectionError",
    "SSHExecError",
    "SSHExecuteResult",
    "SSHSession",
    "ValidationError",
    "WPApplicationPassword",
    "WPCLIClient",
    "WPCLIError",
    "WPSiteCreateResult",
    "check_vps_connection",
    "decode_private_key",
    "execute_ssh_command",
]
