"""
Command Builders

Every command line hostdeploy runs is assembled here, one builder per
capability. Values that come from the operator (branches, hosts, users,
ports) are quoted at this boundary and nowhere else.

Local commands (git, rsync, scp) are argv lists and never touch a shell.
Remote commands are shell strings, since ssh hands them to the login shell.
"""

import shlex
from typing import Optional

from hostdeploy.constants import (
    DOCKER_APT_REPO,
    DOCKER_COMPOSE_BINARY,
    DOCKER_COMPOSE_RELEASE_URL,
    DOCKER_GPG_URL,
    DOCKER_KEYRING,
    DOCKER_KEYRING_DIR,
    DOCKER_SOURCE_LIST,
)

q = shlex.quote


def as_root(command: str) -> str:
    """Wrap a remote command for non-interactive privilege escalation."""
    return f"sudo -n sh -c {q(command)}"


class GitCommands:
    """Local version-control commands (argv form)."""

    @staticmethod
    def clone(url: str, dest: str, branch: Optional[str] = None) -> list[str]:
        argv = ["git", "clone"]
        if branch:
            argv.extend(["--branch", branch])
        argv.extend(["--", url, dest])
        return argv

    @staticmethod
    def is_repository() -> list[str]:
        return ["git", "rev-parse", "--is-inside-work-tree"]

    @staticmethod
    def current_branch() -> list[str]:
        return ["git", "rev-parse", "--abbrev-ref", "HEAD"]

    @staticmethod
    def fetch(branch: str, url: Optional[str] = None) -> list[str]:
        # The explicit refspec keeps origin/<branch> current when fetching by URL
        return ["git", "fetch", url or "origin", f"+{branch}:refs/remotes/origin/{branch}"]

    @staticmethod
    def checkout(branch: str) -> list[str]:
        return ["git", "checkout", branch]

    @staticmethod
    def pull(branch: str, url: Optional[str] = None) -> list[str]:
        return ["git", "pull", url or "origin", branch]

    @staticmethod
    def set_origin(url: str) -> list[str]:
        return ["git", "remote", "set-url", "origin", url]


class SyncCommands:
    """Local file transfer commands (argv form)."""

    @staticmethod
    def rsync(source: str, destination: str, ssh_options: list[str]) -> list[str]:
        # Trailing slashes copy the directory contents, --delete mirrors removals
        return [
            "rsync",
            "-az",
            "--delete",
            "-e",
            shlex.join(["ssh", *ssh_options]),
            f"{source.rstrip('/')}/",
            f"{destination.rstrip('/')}/",
        ]

    @staticmethod
    def scp(source: str, destination: str, ssh_options: list[str]) -> list[str]:
        return ["scp", "-r", "-q", *ssh_options, source, destination]


class SystemCommands:
    """Remote host commands (shell form)."""

    @staticmethod
    def echo(message: str) -> str:
        return f"echo {q(message)}"

    @staticmethod
    def command_exists(binary: str) -> str:
        return f"command -v {q(binary)} >/dev/null 2>&1"

    @staticmethod
    def apt_update() -> str:
        return "DEBIAN_FRONTEND=noninteractive apt-get update -y"

    @staticmethod
    def apt_install(packages: list[str]) -> str:
        return "DEBIAN_FRONTEND=noninteractive apt-get install -y " + " ".join(
            q(p) for p in packages
        )

    @staticmethod
    def enable_service(service: str) -> str:
        return f"systemctl enable --now {q(service)}"

    @staticmethod
    def service_active(service: str) -> str:
        return f"systemctl is-active --quiet {q(service)}"

    @staticmethod
    def add_user_to_group(user: str, group: str) -> str:
        return f"usermod -aG {q(group)} {q(user)}"

    @staticmethod
    def remove_tree(path: str) -> str:
        return f"rm -rf -- {q(path)}"

    @staticmethod
    def remove_files(*paths: str) -> str:
        return "rm -f -- " + " ".join(q(p) for p in paths)

    @staticmethod
    def write_file(path: str) -> str:
        """Write stdin to path (used with execute_as_root)."""
        return f"tee {q(path)} >/dev/null"

    @staticmethod
    def symlink(target: str, link: str) -> str:
        return f"ln -sfn {q(target)} {q(link)}"

    @staticmethod
    def http_probe(port: int, timeout: int) -> str:
        # Any HTTP response counts: curl runs without --fail, wget exits 8 on 4xx/5xx
        url = q(f"http://127.0.0.1:{int(port)}/")
        return (
            f"curl -sS -o /dev/null --max-time {int(timeout)} {url} "
            f"|| wget -q -O /dev/null -T {int(timeout)} -t 1 {url} || [ $? -eq 8 ]"
        )


class DockerInstallCommands:
    """Fixed, ordered Docker engine installation sequence (root, shell form)."""

    @staticmethod
    def remove_source_list() -> str:
        return SystemCommands.remove_files(DOCKER_SOURCE_LIST)

    @staticmethod
    def create_keyring_dir() -> str:
        return f"install -m 0755 -d {q(DOCKER_KEYRING_DIR)}"

    @staticmethod
    def import_key() -> str:
        return (
            f"curl -fsSL {q(DOCKER_GPG_URL)} "
            f"| gpg --dearmor --batch --yes -o {q(DOCKER_KEYRING)}"
        )

    @staticmethod
    def register_repository() -> str:
        # $(...) is evaluated on the remote host
        return (
            f'echo "deb [arch=$(dpkg --print-architecture) signed-by={DOCKER_KEYRING}] '
            f'{DOCKER_APT_REPO} $(lsb_release -cs) stable" '
            f"> {q(DOCKER_SOURCE_LIST)}"
        )

    @staticmethod
    def compose_available() -> str:
        return "docker compose version >/dev/null 2>&1 || docker-compose version >/dev/null 2>&1"

    @staticmethod
    def install_standalone_compose() -> str:
        return (
            f'curl -fsSL "{DOCKER_COMPOSE_RELEASE_URL}/docker-compose-$(uname -s)-$(uname -m)" '
            f"-o {q(DOCKER_COMPOSE_BINARY)} && chmod +x {q(DOCKER_COMPOSE_BINARY)}"
        )


class DockerCommands:
    """Container engine CLI surface (shell form)."""

    @staticmethod
    def build(image: str, context: str) -> str:
        return f"docker build -t {q(image)} {q(context)}"

    @staticmethod
    def remove_container(name: str) -> str:
        return f"docker rm -f {q(name)}"

    @staticmethod
    def remove_image(image: str) -> str:
        return f"docker rmi -f {q(image)}"

    @staticmethod
    def run(image: str, name: str, port: int, loopback_only: bool = True) -> str:
        port = int(port)
        binding = f"127.0.0.1:{port}:{port}" if loopback_only else f"{port}:{port}"
        return (
            f"docker run -d --name {q(name)} --restart unless-stopped "
            f"-p {q(binding)} {q(image)}"
        )

    @staticmethod
    def list_running(name: str) -> str:
        return f"docker ps --filter {q(f'name=^/{name}$')} --format '{{{{.Names}}}}'"

    @staticmethod
    def logs(name: str, tail: int) -> str:
        return f"docker logs --tail {int(tail)} {q(name)} 2>&1"


class NginxCommands:
    """Reverse-proxy CLI surface (shell form, run as root)."""

    @staticmethod
    def test_config() -> str:
        return "nginx -t"

    @staticmethod
    def reload() -> str:
        return "systemctl reload nginx"

    @staticmethod
    def restart() -> str:
        return "systemctl restart nginx"
