"""
SSH client for the WordPress VPS.

Opens one authenticated session to the configured host and runs shell
commands on it. A non-zero exit code is a normal result; only transport
failures raise.
"""
from __future__ import annotations

import asyncio
import base64
import binascii
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import asyncssh

from blogforge_sdk.logging import get_logger

logger = get_logger("blogforge_sdk.vps.ssh")

DEFAULT_CONNECT_TIMEOUT = 30.0


class SSHConnectionError(ConnectionError):
    """Raised when the host/key is missing or the handshake fails."""


class SSHExecError(Exception):
    """Raised when a command cannot be delivered over an open session."""


@dataclass(frozen=True)
class SSHConfig:
    """Connection parameters for the VPS."""

    host: str | None
    private_key: str | None
    port: int = 22
    username: str = "root"
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    def __repr__(self) -> str:
        return (
            f"SSHConfig(host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, private_key=***)"
        )


@dataclass(frozen=True)
class SSHExecuteResult:
    """Captured output of one remote command."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def decode_private_key(raw: str) -> str:
    """Return PEM text for a key given as PEM or as base64-encoded PEM."""
    candidate = raw.strip()
    try:
        decoded = base64.b64decode(candidate, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return candidate
    if "-----BEGIN" in decoded:
        return decoded
    return candidate


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class SSHSession:
    """Handle for one live SSH connection.

    Commands on the same session are serialized; the underlying
    connection is not multiplexed between concurrent callers.
    """

    def __init__(self, connection: asyncssh.SSHClientConnection, host: str) -> None:
        self._connection = connection
        self._host = host
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def host(self) -> str:
        return self._host

    @property
    def closed(self) -> bool:
        return self._closed

    async def execute(self, command: str) -> SSHExecuteResult:
        if self._closed:
            raise SSHExecError(f"Session to {self._host} is closed")

        async with self._lock:
            try:
                completed = await self._connection.run(command, check=False)
            except (asyncssh.Error, OSError) as exc:
                raise SSHExecError(f"Command transport to {self._host} failed: {exc}") from exc

        exit_code = completed.exit_status if completed.exit_status is not None else -1
        return SSHExecuteResult(
            stdout=_as_text(completed.stdout),
            stderr=_as_text(completed.stderr),
            exit_code=exit_code,
        )

    async def execute_multiple(self, commands: list[str]) -> list[SSHExecuteResult]:
        """Run commands in order, stopping after the first non-zero exit."""
        results: list[SSHExecuteResult] = []
        for command in commands:
            result = await self.execute(command)
            results.append(result)
            if not result.ok:
                logger.warning(
                    f"Command {len(results)}/{len(commands)} exited with "
                    f"{result.exit_code}; skipping the remaining commands"
                )
                break
        return results

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._connection.close()
        await self._connection.wait_closed()


class SSHClient:
    """Owns at most one SSHSession to the configured host."""

    def __init__(self, config: SSHConfig) -> None:
        self._config = config
        self._session: SSHSession | None = None
        self._connect_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._session is not None and not self._session.closed

    async def connect(self) -> SSHSession:
        """Open the session, or return the live one.

        Raises:
            SSHConnectionError: host or key unset, key unparsable,
                handshake failed or exceeded the connect timeout
        """
        async with self._connect_lock:
            if self._session is not None and not self._session.closed:
                return self._session

            config = self._config
            if not config.host:
                raise SSHConnectionError("VPS_HOST is not configured")
            if not config.private_key:
                raise SSHConnectionError("VPS_SSH_PRIVATE_KEY is not configured")

            try:
                client_key = asyncssh.import_private_key(decode_private_key(config.private_key))
            except (asyncssh.KeyImportError, ValueError) as exc:
                raise SSHConnectionError(f"Invalid SSH private key: {exc}") from exc

            try:
                connection = await asyncio.wait_for(
                    asyncssh.connect(
                        config.host,
                        port=config.port,
                        username=config.username,
                        client_keys=[client_key],
                        known_hosts=None,
                    ),
                    timeout=config.connect_timeout,
                )
            except asyncio.TimeoutError as exc:
                raise SSHConnectionError(
                    f"SSH handshake with {config.host}:{config.port} timed out "
                    f"after {config.connect_timeout:.0f}s"
                ) from exc
            except (asyncssh.Error, OSError) as exc:
                raise SSHConnectionError(
                    f"SSH connection to {config.host}:{config.port} failed: {exc}"
                ) from exc

            self._session = SSHSession(connection, config.host)
            logger.info(f"Connected to {config.username}@{config.host}:{config.port}")
            return self._session

    async def execute(self, command: str) -> SSHExecuteResult:
        session = await self.connect()
        return await session.execute(command)

    async def execute_multiple(self, commands: list[str]) -> list[SSHExecuteResult]:
        session = await self.connect()
        return await session.execute_multiple(commands)

    async def disconnect(self) -> None:
        """Close the session; a no-op when nothing is open."""
        session, self._session = self._session, None
        if session is None or session.closed:
            return
        await session.close()
        logger.info(f"Disconnected from {session.host}")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[SSHSession]:
        """Acquire the session and release it on every exit path."""
        handle = await self.connect()
        try:
            yield handle
        finally:
            await self.disconnect()


async def execute_ssh_command(config: SSHConfig, command: str) -> SSHExecuteResult:
    """Run a single command on a fresh session."""
    client = SSHClient(config)
    async with client.session() as session:
        return await session.execute(command)


async def check_vps_connection(config: SSHConfig) -> bool:
    """Return True when the VPS accepts a session and echoes back."""
    try:
        result = await execute_ssh_command(config, 'echo "connection test"')
    except (SSHConnectionError, SSHExecError) as exc:
        logger.warning(f"VPS connection check failed: {exc}")
        return False
    return result.ok and "connection test" in result.stdout
