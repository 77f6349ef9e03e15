"""Tests for WPCLIClient command building and output parsing."""

import pytest

from blogforge_sdk.vps import SSHExecError, SSHExecuteResult, ValidationError, WPCLIClient, WPCLIError


class FakeSSHClient:
    """Returns scripted results for commands containing a given fragment.

    Acts as its own session: ``connect`` hands back the client itself.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.commands: list[str] = []
        self.connected = 0
        self.disconnected = 0
        self.closed = True
        self.host = "vps.example.app"

    async def connect(self):
        self.connected += 1
        self.closed = False
        return self

    async def disconnect(self):
        self.disconnected += 1
        self.closed = True

    async def execute(self, command: str) -> SSHExecuteResult:
        self.commands.append(command)
        for fragment, result in self.responses.items():
            if fragment in command:
                return result
        return SSHExecuteResult(stdout="", stderr="", exit_code=0)


def ok(stdout: str) -> SSHExecuteResult:
    return SSHExecuteResult(stdout=stdout, stderr="", exit_code=0)


def failed(stderr: str, code: int = 1) -> SSHExecuteResult:
    return SSHExecuteResult(stdout="", stderr=stderr, exit_code=code)


def _client(responses=None) -> tuple[WPCLIClient, FakeSSHClient]:
    ssh = FakeSSHClient(responses)
    return WPCLIClient(ssh, wp_path="/var/www/wordpress", domain="example.app"), ssh


async def _connected(responses=None) -> tuple[WPCLIClient, FakeSSHClient]:
    wp, ssh = _client(responses)
    await wp.connect()
    return wp, ssh


def test_build_command_quotes_arguments():
    wp, _ = _client()

    command = wp.build_command("site", "create", "--title=Bob's Blog")

    assert command.startswith("cd /var/www/wordpress && wp site create ")
    assert "'--title=Bob'\"'\"'s Blog'" in command
    assert command.endswith("--allow-root")


def test_site_url_uses_network_domain():
    wp, _ = _client()

    assert wp.site_url("my-blog") == "https://my-blog.example.app"


@pytest.mark.asyncio
async def test_create_site_parses_porcelain_blog_id():
    wp, ssh = await _connected({"site create": ok("2\n")})

    result = await wp.create_site("my-blog", "My Blog", "owner@example.com")

    assert result.success is True
    assert result.blog_id == 2
    assert result.url == "https://my-blog.example.app"
    assert "--slug=my-blog" in ssh.commands[0]
    assert "--porcelain" in ssh.commands[0]


@pytest.mark.asyncio
async def test_create_site_reports_cli_error():
    wp, _ = await _connected({"site create": failed("Error: Sorry, that site already exists!\n")})

    result = await wp.create_site("my-blog", "My Blog", "owner@example.com")

    assert result.success is False
    assert result.error == "Error: Sorry, that site already exists!"


@pytest.mark.asyncio
async def test_create_site_rejects_unparsable_output():
    wp, _ = await _connected({"site create": ok("Success: Site 2 created\n")})

    result = await wp.create_site("my-blog", "My Blog", "owner@example.com")

    assert result.success is False
    assert "Unexpected output" in result.error


@pytest.mark.asyncio
async def test_create_site_validates_before_running_anything():
    wp, ssh = await _connected()

    result = await wp.create_site("Bad_Slug", "Title", "owner@example.com")
    injected = await wp.create_site("fine-slug", "Title; rm -rf /", "owner@example.com")

    assert result.success is False
    assert injected.success is False
    assert ssh.commands == []


@pytest.mark.asyncio
async def test_site_exists_counts_matching_sites():
    wp, _ = await _connected({"site list": ok("1\n")})
    assert await wp.site_exists("my-blog") is True

    wp, _ = await _connected({"site list": ok("0\n")})
    assert await wp.site_exists("my-blog") is False


@pytest.mark.asyncio
async def test_site_exists_raises_on_failure():
    wp, _ = await _connected({"site list": failed("Error: database unavailable")})

    with pytest.raises(WPCLIError):
        await wp.site_exists("my-blog")


@pytest.mark.asyncio
async def test_site_exists_rejects_invalid_slug():
    wp, ssh = await _connected()

    with pytest.raises(ValidationError):
        await wp.site_exists("-bad-")
    assert ssh.commands == []


@pytest.mark.asyncio
async def test_create_application_password_parses_uuid_and_password():
    wp, ssh = await _connected({"application-password create": ok("6f1e2d3c abcdEFGHijklMNOPqrstUVWX\n")})

    password = await wp.create_application_password(
        "admin", "blogforge-my-blog", "https://my-blog.example.app"
    )

    assert password.uuid == "6f1e2d3c"
    assert password.password == "abcdEFGHijklMNOPqrstUVWX"
    assert password.name == "blogforge-my-blog"
    assert "--url=https://my-blog.example.app" in ssh.commands[0]
    assert "abcdEFGH" not in repr(password)


@pytest.mark.asyncio
async def test_create_application_password_returns_none_on_failure():
    wp, _ = await _connected({"application-password create": failed("Error: Invalid user")})
    assert await wp.create_application_password("admin", "blogforge-x") is None

    wp, _ = await _connected({"application-password create": ok("just-one-token\n")})
    assert await wp.create_application_password("admin", "blogforge-x") is None


@pytest.mark.asyncio
async def test_activate_theme_for_site_targets_site_url():
    wp, ssh = await _connected()

    assert await wp.activate_theme_for_site("generatepress", "https://my-blog.example.app") is True
    assert "--url=https://my-blog.example.app" in ssh.commands[0]


@pytest.mark.asyncio
async def test_check_wp_cli_always_disconnects():
    wp, ssh = _client({"--version": failed("wp: command not found", code=127)})

    assert await wp.check_wp_cli() is False
    assert ssh.connected == 1
    assert ssh.disconnected == 1


@pytest.mark.asyncio
async def test_commands_need_an_open_session():
    wp, ssh = _client({"site list": ok("1\n")})

    with pytest.raises(SSHExecError):
        await wp.site_exists("my-blog")

    session = await wp.connect()
    assert session is ssh
    assert await wp.site_exists("my-blog") is True

    await wp.disconnect()
    with pytest.raises(SSHExecError):
        await wp.site_exists("my-blog")
    assert len(ssh.commands) == 1
